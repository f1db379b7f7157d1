import asyncio
import logging

from bizintake.models.submission import Submission
from bizintake.repositories.base import AbstractIntakeRepository
from bizintake.schemas.submission import EnrichmentWebhookRequest, SubmissionRequest
from bizintake.services.enrichment_webhook import EnrichmentWebhookClient

logger = logging.getLogger(__name__)


class SubmissionService:
    def __init__(
        self, repository: AbstractIntakeRepository, webhook: EnrichmentWebhookClient
    ) -> None:
        self._repository = repository
        self._webhook = webhook

    async def submit(self, payload: SubmissionRequest) -> Submission:
        """
        Persist a submission and forward it for enrichment.

        The record is not rolled back when the webhook call fails: callers
        receiving UpstreamUnavailable must assume the submission exists.
        """
        self._webhook.ensure_configured()
        submission = await asyncio.to_thread(
            self._repository.create_submission,
            payload.businessType,
            payload.city,
            payload.province,
            payload.country,
        )
        logger.info(
            "[submit] stored | id=%s | type=%s | city=%s",
            submission.id, submission.business_type, submission.city,
        )
        await self._webhook.forward(submission)
        return submission

    async def list_submissions(self) -> list[Submission]:
        return await asyncio.to_thread(self._repository.list_submissions)

    async def update_status(self, submission_id: str, status: str) -> Submission:
        return await asyncio.to_thread(
            self._repository.update_submission_status, submission_id, status
        )

    async def receive_enrichment(self, payload: EnrichmentWebhookRequest) -> Submission:
        logger.info("[enrich] data received | id=%s", payload.submissionId)
        return await asyncio.to_thread(
            self._repository.apply_enriched_data,
            payload.submissionId,
            payload.enrichedData.to_model(),
        )
