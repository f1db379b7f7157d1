import logging

import httpx

from bizintake.errors import ConfigurationError, UpstreamUnavailable
from bizintake.models.submission import Submission
from bizintake.schemas.submission import SubmissionOut

logger = logging.getLogger(__name__)

WEBHOOK_KEY_HEADER = "x-make-apikey"


class EnrichmentWebhookClient:
    """Pushes stored submissions to the external enrichment scenario. Single attempt, no retry."""

    def __init__(self, url: str | None, api_key: str | None, timeout: float = 10.0) -> None:
        self._url = url
        self._api_key = api_key
        self._timeout = timeout

    def ensure_configured(self) -> None:
        if not self._url or not self._api_key:
            logger.error("[webhook] enrichment webhook not configured | url_set=%s | key_set=%s",
                         bool(self._url), bool(self._api_key))
            raise ConfigurationError("Enrichment webhook is not configured")

    async def forward(self, submission: Submission) -> None:
        """POST the submission as camelCase JSON. Raises UpstreamUnavailable on any failure."""
        self.ensure_configured()
        payload = SubmissionOut.model_validate(submission).model_dump(
            mode="json", by_alias=True, exclude_none=True
        )
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    self._url, json=payload, headers={WEBHOOK_KEY_HEADER: self._api_key}
                )
        except httpx.HTTPError as exc:
            logger.error("[webhook] enrichment call failed | id=%s | error=%s", submission.id, exc)
            raise UpstreamUnavailable(
                "Submission saved but the enrichment service is unreachable; please try again later"
            ) from exc

        if not response.is_success:
            logger.error(
                "[webhook] enrichment call rejected | id=%s | status=%s | body=%s",
                submission.id, response.status_code, response.text[:500],
            )
            raise UpstreamUnavailable(
                f"Submission saved but the enrichment service responded with {response.status_code}"
            )
        logger.info("[webhook] enrichment forwarded | id=%s | status=%s", submission.id, response.status_code)
