from dataclasses import dataclass, field
from datetime import datetime, timezone

SUBMISSION_STATUSES = ("pending", "approved", "rejected", "contacted")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SocialMedia:
    linkedin: str | None = None
    facebook: str | None = None
    twitter: str | None = None
    instagram: str | None = None


@dataclass
class EnrichedBusinessData:
    business_name: str | None = None
    website: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    description: str | None = None
    industry: str | None = None
    employee_count: str | None = None
    revenue: str | None = None
    social_media: SocialMedia | None = None
    other_details: dict | None = None


@dataclass
class Submission:
    id: str
    business_type: str
    city: str
    province: str
    country: str
    status: str = "pending"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    enriched_data: EnrichedBusinessData | None = None
