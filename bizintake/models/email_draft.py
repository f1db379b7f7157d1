from dataclasses import dataclass, field
from datetime import datetime

from bizintake.models.submission import utcnow

EMAIL_STATUSES = ("pending", "approved", "sent")


@dataclass
class EmailDraft:
    id: str
    related_entity_id: str
    business_name: str = ""
    address: str = ""
    ai_email: str = ""
    business_email: str | None = None
    phone_number: str | None = None
    website: str | None = None
    map_link: str | None = None
    subject: str | None = None
    selected_product: str | None = None
    status: str = "pending"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None
    sent_at: datetime | None = None


@dataclass
class Campaign:
    id: str
    business_name: str = ""
    business_email: str | None = None
    address: str | None = None
    city: str | None = None
    map_link: str | None = None
    phone: str | None = None
    rating: str | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class CampaignWithEmail:
    campaign: Campaign
    email: EmailDraft | None = None

    @property
    def has_email(self) -> bool:
        return self.email is not None
