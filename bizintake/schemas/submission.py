from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ValidationInfo, field_validator

from bizintake.models.submission import EnrichedBusinessData, SocialMedia
from bizintake.schemas.common import CamelModel

SubmissionStatus = Literal["pending", "approved", "rejected", "contacted"]

_REQUIRED_MESSAGES = {
    "businessType": "Business type is required",
    "city": "City is required",
    "province": "Province/State is required",
    "country": "Country is required",
}


class SubmissionRequest(BaseModel):
    businessType: str
    city: str
    province: str
    country: str

    @field_validator("businessType", "city", "province", "country")
    @classmethod
    def at_least_two_characters(cls, v: str, info: ValidationInfo) -> str:
        if len(v) < 2:
            raise ValueError(_REQUIRED_MESSAGES[info.field_name])
        return v


class StatusUpdateRequest(BaseModel):
    status: SubmissionStatus


class SocialMediaPayload(BaseModel):
    linkedin: str | None = None
    facebook: str | None = None
    twitter: str | None = None
    instagram: str | None = None


class EnrichedDataPayload(BaseModel):
    businessName: str | None = None
    website: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    description: str | None = None
    industry: str | None = None
    employeeCount: str | None = None
    revenue: str | None = None
    socialMedia: SocialMediaPayload | None = None
    otherDetails: dict[str, Any] | None = None

    def to_model(self) -> EnrichedBusinessData:
        social = self.socialMedia
        return EnrichedBusinessData(
            business_name=self.businessName,
            website=self.website,
            phone=self.phone,
            email=self.email,
            address=self.address,
            description=self.description,
            industry=self.industry,
            employee_count=self.employeeCount,
            revenue=self.revenue,
            social_media=SocialMedia(**social.model_dump()) if social is not None else None,
            other_details=self.otherDetails,
        )


class EnrichmentWebhookRequest(BaseModel):
    submissionId: str
    enrichedData: EnrichedDataPayload

    @field_validator("submissionId")
    @classmethod
    def submission_id_must_not_be_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Submission ID is required")
        return v


class SocialMediaOut(CamelModel):
    linkedin: str | None = None
    facebook: str | None = None
    twitter: str | None = None
    instagram: str | None = None


class EnrichedDataOut(CamelModel):
    business_name: str | None = None
    website: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    description: str | None = None
    industry: str | None = None
    employee_count: str | None = None
    revenue: str | None = None
    social_media: SocialMediaOut | None = None
    other_details: dict[str, Any] | None = None


class SubmissionOut(CamelModel):
    id: str
    business_type: str
    city: str
    province: str
    country: str
    status: SubmissionStatus
    created_at: datetime
    updated_at: datetime
    enriched_data: EnrichedDataOut | None = None


class SubmissionEnvelope(CamelModel):
    message: str
    submission: SubmissionOut
