import logging

from fastapi import APIRouter, Depends, Request

from bizintake.api.dependencies import parse_body, require_webhook_api_key
from bizintake.schemas.email import (
    CampaignWithEmailOut,
    EmailDraftOut,
    EmailStatusUpdateRequest,
    SendEmailRequest,
    SendEmailResponse,
    UpdateEmailRequest,
)
from bizintake.schemas.submission import (
    EnrichmentWebhookRequest,
    StatusUpdateRequest,
    SubmissionEnvelope,
    SubmissionOut,
    SubmissionRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_camel = {"response_model_exclude_none": True, "response_model_by_alias": True}


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


# -- submissions --------------------------------------------------------------


@router.post("/api/submit", status_code=201, response_model=SubmissionEnvelope, **_camel)
async def submit(payload: SubmissionRequest, request: Request) -> SubmissionEnvelope:
    submission = await request.app.state.submission_service.submit(payload)
    return SubmissionEnvelope(
        message="Submission successful", submission=SubmissionOut.model_validate(submission)
    )


@router.get("/api/submissions", response_model=list[SubmissionOut], **_camel)
async def list_submissions(request: Request) -> list[SubmissionOut]:
    submissions = await request.app.state.submission_service.list_submissions()
    return [SubmissionOut.model_validate(s) for s in submissions]


@router.patch("/api/submissions/{submission_id}/status", response_model=SubmissionOut, **_camel)
async def update_submission_status(
    submission_id: str, payload: StatusUpdateRequest, request: Request
) -> SubmissionOut:
    updated = await request.app.state.submission_service.update_status(submission_id, payload.status)
    return SubmissionOut.model_validate(updated)


@router.post(
    "/api/webhook/enrich",
    response_model=SubmissionEnvelope,
    dependencies=[Depends(require_webhook_api_key)],
    **_camel,
)
async def receive_enrichment(request: Request) -> SubmissionEnvelope:
    payload = await parse_body(request, EnrichmentWebhookRequest)
    updated = await request.app.state.submission_service.receive_enrichment(payload)
    return SubmissionEnvelope(
        message="Enriched data saved successfully", submission=SubmissionOut.model_validate(updated)
    )


# -- generated emails -----------------------------------------------------------


@router.get("/api/emails/generated", response_model=list[EmailDraftOut], **_camel)
async def list_generated_emails(request: Request) -> list[EmailDraftOut]:
    emails = await request.app.state.email_service.list_generated_emails()
    return [EmailDraftOut.model_validate(e) for e in emails]


@router.post("/api/emails/send", response_model=SendEmailResponse)
async def send_email(payload: SendEmailRequest, request: Request) -> SendEmailResponse:
    recipient = await request.app.state.email_service.send(payload)
    return SendEmailResponse(message="Email sent successfully", recipient=recipient)


@router.get("/api/emails/{email_id}", response_model=EmailDraftOut, **_camel)
async def get_email(email_id: str, request: Request) -> EmailDraftOut:
    draft = await request.app.state.email_service.get_email(email_id)
    return EmailDraftOut.model_validate(draft)


@router.patch("/api/emails/{email_id}", response_model=EmailDraftOut, **_camel)
async def update_email(email_id: str, payload: UpdateEmailRequest, request: Request) -> EmailDraftOut:
    draft = await request.app.state.email_service.update_content(email_id, payload)
    logger.info("[email] draft edited | id=%s", email_id)
    return EmailDraftOut.model_validate(draft)


@router.patch("/api/emails/{email_id}/status", response_model=EmailDraftOut, **_camel)
async def update_email_status(
    email_id: str, payload: EmailStatusUpdateRequest, request: Request
) -> EmailDraftOut:
    draft = await request.app.state.email_service.update_status(email_id, payload.status)
    return EmailDraftOut.model_validate(draft)


# -- campaigns ------------------------------------------------------------------


@router.get("/api/campaigns", response_model=list[CampaignWithEmailOut], **_camel)
async def list_campaigns(request: Request) -> list[CampaignWithEmailOut]:
    items = await request.app.state.email_service.list_campaigns()
    return [CampaignWithEmailOut.from_model(item) for item in items]
