import hmac
import json
import logging
from typing import TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from bizintake.errors import ConfigurationError, Unauthorized, ValidationFailed
from bizintake.schemas.common import describe_errors
from bizintake.services.enrichment_webhook import WEBHOOK_KEY_HEADER

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


async def require_webhook_api_key(request: Request) -> None:
    """Reject webhook callers without the shared secret. Runs before the body is read."""
    expected = request.app.state.settings.MAKE_WEBHOOK_API_KEY
    if not expected:
        logger.error("[auth] MAKE_WEBHOOK_API_KEY not configured")
        raise ConfigurationError("Server configuration error")

    supplied = request.headers.get(WEBHOOK_KEY_HEADER)
    if not supplied or not hmac.compare_digest(supplied.encode(), expected.encode()):
        logger.warning("[auth] invalid webhook API key | client=%s", request.client.host if request.client else "-")
        raise Unauthorized("Unauthorized: Invalid API key")


async def parse_body(request: Request, model: type[ModelT]) -> ModelT:
    """Decode and validate a JSON body explicitly, for routes that authenticate first."""
    raw = await request.body()
    try:
        data = json.loads(raw) if raw else None
    except ValueError as exc:
        raise ValidationFailed("Validation error: request body is not valid JSON") from exc
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        message, errors = describe_errors(exc.errors())
        raise ValidationFailed(message, errors) from exc
