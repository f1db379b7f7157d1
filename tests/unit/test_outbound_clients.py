from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from bizintake.errors import ConfigurationError, EmailDeliveryFailed, UpstreamUnavailable
from bizintake.models.submission import Submission
from bizintake.services.email_service import text_to_html
from bizintake.services.enrichment_webhook import EnrichmentWebhookClient
from bizintake.services.resend_client import ResendClient


def _patch_async_client(module: str, post: AsyncMock):
    """Patch httpx.AsyncClient in `module` so that `async with` yields a client using `post`."""
    mock_client = AsyncMock()
    mock_client.post = post
    mock_client_cls = MagicMock()
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return patch(f"{module}.httpx.AsyncClient", mock_client_cls)


def _response(status_code: int, json_body=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.text = text
    if json_body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = json_body
    return response


@pytest.fixture
def submission():
    now = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
    return Submission(
        id="sub-1", business_type="Bakery", city="Austin", province="TX", country="USA",
        created_at=now, updated_at=now,
    )


# -- enrichment webhook -------------------------------------------------------------


@pytest.mark.asyncio
async def test_forward_posts_submission_with_secret(submission):
    post = AsyncMock(return_value=_response(200, text="Accepted"))
    with _patch_async_client("bizintake.services.enrichment_webhook", post):
        await EnrichmentWebhookClient("https://hook.example.test", "s3cret").forward(submission)

    args, kwargs = post.call_args
    assert args[0] == "https://hook.example.test"
    assert kwargs["headers"] == {"x-make-apikey": "s3cret"}
    assert kwargs["json"]["id"] == "sub-1"
    assert kwargs["json"]["businessType"] == "Bakery"
    assert kwargs["json"]["status"] == "pending"
    assert "enrichedData" not in kwargs["json"]


@pytest.mark.asyncio
async def test_forward_non_success_raises(submission):
    with _patch_async_client("bizintake.services.enrichment_webhook", AsyncMock(return_value=_response(500, text="boom"))):
        with pytest.raises(UpstreamUnavailable):
            await EnrichmentWebhookClient("https://hook.example.test", "s3cret").forward(submission)


@pytest.mark.asyncio
async def test_forward_network_error_raises(submission):
    post = AsyncMock(side_effect=httpx.ConnectError("refused"))
    with _patch_async_client("bizintake.services.enrichment_webhook", post):
        with pytest.raises(UpstreamUnavailable):
            await EnrichmentWebhookClient("https://hook.example.test", "s3cret").forward(submission)


def test_webhook_requires_url_and_key():
    with pytest.raises(ConfigurationError):
        EnrichmentWebhookClient(None, "s3cret").ensure_configured()
    with pytest.raises(ConfigurationError):
        EnrichmentWebhookClient("https://hook.example.test", "").ensure_configured()


# -- resend ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_resend_send_success():
    post = AsyncMock(return_value=_response(200, json_body={"id": "msg_42"}))
    with _patch_async_client("bizintake.services.resend_client", post):
        message_id = await ResendClient("re_key", "Ops <ops@example.com>").send(
            recipient="lead@example.com", subject="Hi", text="a\nb", html="a<br>b"
        )

    assert message_id == "msg_42"
    args, kwargs = post.call_args
    assert args[0] == "https://api.resend.com/emails"
    assert kwargs["headers"] == {"Authorization": "Bearer re_key"}
    assert kwargs["json"] == {
        "from": "Ops <ops@example.com>",
        "to": ["lead@example.com"],
        "subject": "Hi",
        "text": "a\nb",
        "html": "a<br>b",
    }


@pytest.mark.asyncio
async def test_resend_rejection_carries_provider_message():
    body = {"name": "validation_error", "message": "The example.com domain is not verified", "statusCode": 403}
    with _patch_async_client("bizintake.services.resend_client", AsyncMock(return_value=_response(403, json_body=body))):
        with pytest.raises(EmailDeliveryFailed) as exc_info:
            await ResendClient("re_key", "ops@example.com").send(
                recipient="lead@example.com", subject="Hi", text="x", html="x"
            )
    assert exc_info.value.detail == "The example.com domain is not verified"


@pytest.mark.asyncio
async def test_resend_timeout():
    with _patch_async_client("bizintake.services.resend_client", AsyncMock(side_effect=httpx.TimeoutException("timeout"))):
        with pytest.raises(EmailDeliveryFailed):
            await ResendClient("re_key", "ops@example.com").send(
                recipient="lead@example.com", subject="Hi", text="x", html="x"
            )


@pytest.mark.asyncio
async def test_resend_unconfigured_does_not_call_provider():
    post = AsyncMock()
    with _patch_async_client("bizintake.services.resend_client", post):
        with pytest.raises(ConfigurationError):
            await ResendClient(None, "ops@example.com").send(
                recipient="lead@example.com", subject="Hi", text="x", html="x"
            )
    post.assert_not_awaited()


def test_text_to_html():
    assert text_to_html("Hi Bob,\r\nThanks & regards\n<Ops>") == "Hi Bob,<br>Thanks &amp; regards<br>&lt;Ops&gt;"
