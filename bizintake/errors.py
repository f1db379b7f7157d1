class IntakeError(Exception):
    """Base error; carries the HTTP status the API layer answers with."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(IntakeError):
    status_code = 400

    def __init__(self, message: str, errors: list[dict] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class Unauthorized(IntakeError):
    status_code = 401


class NotFound(IntakeError):
    status_code = 404


class Conflict(IntakeError):
    status_code = 409


class ConfigurationError(IntakeError):
    status_code = 500


class UpstreamUnavailable(IntakeError):
    status_code = 502


class EmailDeliveryFailed(IntakeError):
    status_code = 500

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail
