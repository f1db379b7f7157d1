"""
Mapping between stored documents and internal models.

Documents in the ``generatedEmails`` and ``campaigns`` collections are written
by the external automation service, which has used several field spellings over
time. Every accepted spelling is listed in the alias tables below; the first
alias holding a non-blank value wins. Nothing outside this module should look up
document keys directly.
"""
import logging
from datetime import datetime, timezone
from typing import Any

from bizintake.models.email_draft import EMAIL_STATUSES, Campaign, EmailDraft
from bizintake.models.submission import (
    SUBMISSION_STATUSES,
    EnrichedBusinessData,
    SocialMedia,
    Submission,
)

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

SUBMISSION_ALIASES: dict[str, tuple[str, ...]] = {
    "business_type": ("businessType", "business_type"),
    "city": ("city", "City"),
    "province": ("province", "Province"),
    "country": ("country", "Country"),
    "status": ("status",),
    "created_at": ("createdAt", "created_at"),
    "updated_at": ("updatedAt", "updated_at"),
    "enriched_data": ("enrichedData", "enriched_data"),
}

ENRICHED_DATA_ALIASES: dict[str, tuple[str, ...]] = {
    "business_name": ("businessName", "BusinessName"),
    "website": ("website", "Website"),
    "phone": ("phone", "Phone"),
    "email": ("email", "Email"),
    "address": ("address", "Address"),
    "description": ("description",),
    "industry": ("industry",),
    "employee_count": ("employeeCount",),
    "revenue": ("revenue",),
    "social_media": ("socialMedia",),
    "other_details": ("otherDetails",),
}

EMAIL_DRAFT_ALIASES: dict[str, tuple[str, ...]] = {
    "related_entity_id": ("relatedEntityId", "campaignId", "CampaignId", "Campaign ID", "campaign_id"),
    "business_name": ("businessName", "BusinessName"),
    "address": ("address", "Address"),
    "business_email": ("businessEmail", "BusinessEmail"),
    "phone_number": ("phoneNumber", "PhoneNumber"),
    "website": ("website", "Website"),
    "map_link": ("mapLink", "MapLink", "map_link", "Map Link"),
    "subject": ("subject", "editedSubject"),
    "selected_product": ("selectedProduct", "SelectedProduct", "selected_product"),
    "ai_email": ("aiEmail", "AIEmail", "editedBody"),
    "status": ("status",),
    "created_at": ("createdAt", "created_at"),
    "updated_at": ("updatedAt", "updated_at"),
    "sent_at": ("sentAt", "sent_at"),
}

CAMPAIGN_ALIASES: dict[str, tuple[str, ...]] = {
    "business_name": ("businessName", "BusinessName", "business_name", "name", "Name"),
    "business_email": ("businessEmail", "BusinessEmail", "business_email", "email", "Email"),
    "address": ("address", "Address"),
    "city": ("city", "City"),
    "map_link": ("mapLink", "MapLink", "map_link", "Map Link"),
    "phone": ("phone", "Phone"),
    "rating": ("rating", "Rating", "Ratings"),
    "created_at": ("createdAt", "created_at"),
}

# Draft statuses written by earlier versions of the automation service.
LEGACY_EMAIL_STATUSES = {
    "not_generated": "pending",
    "generated": "pending",
    "edited": "pending",
}


def first_value(document: dict, aliases: tuple[str, ...]) -> Any:
    """Return the value of the first alias present with a non-blank value, else None."""
    for key in aliases:
        value = document.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text(document: dict, aliases: tuple[str, ...]) -> str | None:
    value = first_value(document, aliases)
    return None if value is None else str(value)


# Epoch numbers above this are milliseconds (JavaScript Date.getTime()).
_MILLIS_THRESHOLD = 1e11


def _epoch_seconds(value: Any) -> float:
    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        nanos = value.get("_nanoseconds", value.get("nanos", 0)) or 0
        return seconds + nanos / 1e9
    if abs(value) > _MILLIS_THRESHOLD:
        return value / 1000
    return value


def parse_timestamp(value: Any) -> datetime | None:
    """Accept datetimes, ISO-8601 strings, epoch seconds or milliseconds and exported Firestore timestamps."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) or (
        isinstance(value, dict) and ("_seconds" in value or "seconds" in value)
    ):
        try:
            parsed = datetime.fromtimestamp(_epoch_seconds(value), tz=timezone.utc)
        except (ValueError, OverflowError, OSError, TypeError):
            logger.warning("[normalize] out-of-range timestamp %r", value)
            return None
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("[normalize] unparseable timestamp %r", value)
            return None
    else:
        logger.warning("[normalize] unsupported timestamp type %s", type(value).__name__)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# -- submissions ------------------------------------------------------------


def enriched_data_from_document(document: dict) -> EnrichedBusinessData:
    a = ENRICHED_DATA_ALIASES
    social = first_value(document, a["social_media"])
    other = first_value(document, a["other_details"])
    return EnrichedBusinessData(
        business_name=_text(document, a["business_name"]),
        website=_text(document, a["website"]),
        phone=_text(document, a["phone"]),
        email=_text(document, a["email"]),
        address=_text(document, a["address"]),
        description=_text(document, a["description"]),
        industry=_text(document, a["industry"]),
        employee_count=_text(document, a["employee_count"]),
        revenue=_text(document, a["revenue"]),
        social_media=SocialMedia(
            linkedin=social.get("linkedin"),
            facebook=social.get("facebook"),
            twitter=social.get("twitter"),
            instagram=social.get("instagram"),
        )
        if isinstance(social, dict)
        else None,
        other_details=dict(other) if isinstance(other, dict) else None,
    )


def enriched_data_to_document(data: EnrichedBusinessData) -> dict:
    document = {
        "businessName": data.business_name,
        "website": data.website,
        "phone": data.phone,
        "email": data.email,
        "address": data.address,
        "description": data.description,
        "industry": data.industry,
        "employeeCount": data.employee_count,
        "revenue": data.revenue,
        "otherDetails": data.other_details,
    }
    if data.social_media is not None:
        social = {
            "linkedin": data.social_media.linkedin,
            "facebook": data.social_media.facebook,
            "twitter": data.social_media.twitter,
            "instagram": data.social_media.instagram,
        }
        document["socialMedia"] = {k: v for k, v in social.items() if v is not None}
    return {k: v for k, v in document.items() if v is not None}


def submission_from_document(doc_id: str, document: dict) -> Submission:
    a = SUBMISSION_ALIASES
    created_at = parse_timestamp(first_value(document, a["created_at"])) or EPOCH
    updated_at = parse_timestamp(first_value(document, a["updated_at"])) or created_at
    status = _text(document, a["status"]) or "pending"
    if status not in SUBMISSION_STATUSES:
        logger.warning("[normalize] unknown submission status %r | id=%s", status, doc_id)
        status = "pending"
    enriched = first_value(document, a["enriched_data"])
    return Submission(
        id=doc_id,
        business_type=_text(document, a["business_type"]) or "",
        city=_text(document, a["city"]) or "",
        province=_text(document, a["province"]) or "",
        country=_text(document, a["country"]) or "",
        status=status,
        created_at=created_at,
        updated_at=updated_at,
        enriched_data=enriched_data_from_document(enriched) if isinstance(enriched, dict) else None,
    )


def submission_to_document(submission: Submission) -> dict:
    document = {
        "businessType": submission.business_type,
        "city": submission.city,
        "province": submission.province,
        "country": submission.country,
        "status": submission.status,
        "createdAt": format_timestamp(submission.created_at),
        "updatedAt": format_timestamp(submission.updated_at),
    }
    if submission.enriched_data is not None:
        document["enrichedData"] = enriched_data_to_document(submission.enriched_data)
    return document


# -- generated emails and campaigns -----------------------------------------


def normalize_email_status(value: str | None) -> str:
    if value in EMAIL_STATUSES:
        return value
    if value in LEGACY_EMAIL_STATUSES:
        return LEGACY_EMAIL_STATUSES[value]
    if value is not None:
        logger.warning("[normalize] unknown email status %r, treating as pending", value)
    return "pending"


def email_draft_from_document(doc_id: str, document: dict) -> EmailDraft:
    a = EMAIL_DRAFT_ALIASES
    return EmailDraft(
        id=doc_id,
        related_entity_id=_text(document, a["related_entity_id"]) or doc_id,
        business_name=_text(document, a["business_name"]) or "",
        address=_text(document, a["address"]) or "",
        ai_email=_text(document, a["ai_email"]) or "",
        business_email=_text(document, a["business_email"]),
        phone_number=_text(document, a["phone_number"]),
        website=_text(document, a["website"]),
        map_link=_text(document, a["map_link"]),
        subject=_text(document, a["subject"]),
        selected_product=_text(document, a["selected_product"]),
        status=normalize_email_status(_text(document, a["status"])),
        created_at=parse_timestamp(first_value(document, a["created_at"])) or EPOCH,
        updated_at=parse_timestamp(first_value(document, a["updated_at"])),
        sent_at=parse_timestamp(first_value(document, a["sent_at"])),
    )


def campaign_from_document(doc_id: str, document: dict) -> Campaign:
    a = CAMPAIGN_ALIASES
    return Campaign(
        id=doc_id,
        business_name=_text(document, a["business_name"]) or "",
        business_email=_text(document, a["business_email"]),
        address=_text(document, a["address"]),
        city=_text(document, a["city"]),
        map_link=_text(document, a["map_link"]),
        phone=_text(document, a["phone"]),
        rating=_text(document, a["rating"]),
        created_at=parse_timestamp(first_value(document, a["created_at"])) or EPOCH,
    )
