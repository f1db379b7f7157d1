import logging

import httpx

from bizintake.errors import ConfigurationError, EmailDeliveryFailed

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> str:
    """Resend answers errors as {"name", "message", "statusCode"}; fall back to raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text


class ResendClient:
    def __init__(
        self,
        api_key: str | None,
        sender: str | None,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
    ) -> None:
        self._api_key = api_key
        self._sender = sender
        self._api_url = api_url
        self._timeout = timeout

    def ensure_configured(self) -> None:
        if not self._api_key or not self._sender:
            logger.error("[resend] email provider not configured | key_set=%s | sender_set=%s",
                         bool(self._api_key), bool(self._sender))
            raise ConfigurationError("Email service not configured")

    async def send(self, recipient: str, subject: str, text: str, html: str) -> str | None:
        """Send one message. Returns the provider's message id; raises EmailDeliveryFailed."""
        self.ensure_configured()
        payload = {
            "from": self._sender,
            "to": [recipient],
            "subject": subject,
            "text": text,
            "html": html,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    self._api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.HTTPError as exc:
            logger.error("[resend] request failed | to=%s | error=%s", recipient, exc)
            raise EmailDeliveryFailed("Failed to send email", detail=str(exc)) from exc

        if not response.is_success:
            detail = _error_detail(response)
            logger.error("[resend] send rejected | to=%s | status=%s | detail=%s",
                         recipient, response.status_code, detail)
            raise EmailDeliveryFailed("Failed to send email", detail=detail)

        message_id = None
        try:
            message_id = response.json().get("id")
        except (ValueError, AttributeError):
            logger.debug("[resend] response carried no JSON id | to=%s", recipient)
        return message_id
