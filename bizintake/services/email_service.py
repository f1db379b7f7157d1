import asyncio
import html
import logging

from bizintake.models.email_draft import CampaignWithEmail, EmailDraft
from bizintake.repositories.base import AbstractIntakeRepository
from bizintake.schemas.email import SendEmailRequest, UpdateEmailRequest
from bizintake.services.resend_client import ResendClient

logger = logging.getLogger(__name__)


def text_to_html(body: str) -> str:
    """Escape the plain-text body and turn its line breaks into <br> tags."""
    escaped = html.escape(body)
    return escaped.replace("\r\n", "\n").replace("\n", "<br>")


class EmailService:
    def __init__(self, repository: AbstractIntakeRepository, provider: ResendClient) -> None:
        self._repository = repository
        self._provider = provider

    async def send(self, payload: SendEmailRequest) -> str:
        """
        Deliver a reviewed draft to the operator-supplied recipient and mark it sent.
        Returns the recipient. Stored status is untouched when the provider fails.
        """
        self._provider.ensure_configured()
        draft = await asyncio.to_thread(self._repository.get_generated_email, payload.emailId)

        recipient = str(payload.recipientEmail)
        message_id = await self._provider.send(
            recipient=recipient,
            subject=payload.subject,
            text=payload.body,
            html=text_to_html(payload.body),
        )
        logger.info(
            "[email] sent | id=%s | to=%s | business=%s | provider_id=%s",
            draft.id, recipient, payload.businessName or draft.business_name, message_id,
        )
        await asyncio.to_thread(self._repository.set_email_status, draft.id, "sent")
        return recipient

    async def list_generated_emails(self) -> list[EmailDraft]:
        return await asyncio.to_thread(self._repository.list_generated_emails)

    async def get_email(self, email_id: str) -> EmailDraft:
        return await asyncio.to_thread(self._repository.get_generated_email, email_id)

    async def update_content(self, email_id: str, payload: UpdateEmailRequest) -> EmailDraft:
        return await asyncio.to_thread(
            self._repository.update_email_content, email_id, payload.subject, payload.body
        )

    async def update_status(self, email_id: str, status: str) -> EmailDraft:
        await asyncio.to_thread(self._repository.set_email_status, email_id, status)
        return await asyncio.to_thread(self._repository.get_generated_email, email_id)

    async def list_campaigns(self) -> list[CampaignWithEmail]:
        campaigns = await asyncio.to_thread(self._repository.list_campaigns)
        emails = await asyncio.to_thread(self._repository.list_generated_emails)
        # Oldest first so the newest draft wins when several share an entity.
        by_entity = {email.related_entity_id: email for email in reversed(emails)}
        return [CampaignWithEmail(campaign=c, email=by_entity.get(c.id)) for c in campaigns]
