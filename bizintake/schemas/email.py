from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, ValidationInfo, field_validator

from bizintake.models.email_draft import CampaignWithEmail
from bizintake.schemas.common import CamelModel

EmailStatus = Literal["pending", "approved", "sent"]


class SendEmailRequest(BaseModel):
    emailId: str
    recipientEmail: EmailStr
    subject: str
    body: str
    businessName: str | None = None

    @field_validator("emailId", "subject", "body")
    @classmethod
    def must_not_be_empty(cls, v: str, info: ValidationInfo) -> str:
        if not v:
            label = {"emailId": "Email ID", "subject": "Subject", "body": "Email body"}[info.field_name]
            raise ValueError(f"{label} is required")
        return v


class UpdateEmailRequest(BaseModel):
    subject: str = ""
    body: str

    @field_validator("body")
    @classmethod
    def body_must_not_be_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Email body is required")
        return v


class EmailStatusUpdateRequest(BaseModel):
    # "sent" is reachable only through a successful dispatch.
    status: Literal["pending", "approved"]


class SendEmailResponse(BaseModel):
    message: str
    recipient: str


class EmailDraftOut(CamelModel):
    id: str
    related_entity_id: str
    business_name: str
    address: str
    ai_email: str
    business_email: str | None = None
    phone_number: str | None = None
    website: str | None = None
    map_link: str | None = None
    subject: str | None = None
    selected_product: str | None = None
    status: EmailStatus
    created_at: datetime
    updated_at: datetime | None = None
    sent_at: datetime | None = None


class CampaignWithEmailOut(CamelModel):
    id: str
    business_name: str
    business_email: str | None = None
    address: str | None = None
    city: str | None = None
    map_link: str | None = None
    phone: str | None = None
    rating: str | None = None
    created_at: datetime
    email: EmailDraftOut | None = None
    has_email: bool

    @classmethod
    def from_model(cls, item: CampaignWithEmail) -> "CampaignWithEmailOut":
        campaign = item.campaign
        return cls(
            id=campaign.id,
            business_name=campaign.business_name,
            business_email=campaign.business_email,
            address=campaign.address,
            city=campaign.city,
            map_link=campaign.map_link,
            phone=campaign.phone,
            rating=campaign.rating,
            created_at=campaign.created_at,
            email=EmailDraftOut.model_validate(item.email) if item.email is not None else None,
            has_email=item.has_email,
        )
