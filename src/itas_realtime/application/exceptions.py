from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ForbiddenError(AppError):
    pass


class ValidationError(AppError):
    pass


class ApiError(AppError):
    """Backend call failed: non-2xx status, transport failure or unreadable payload."""

    def __init__(self, detail: str = "", status_code: int | None = None) -> None:
        super().__init__(detail)
        self.status_code = status_code


class ChannelError(AppError):
    pass


class InvalidTransitionError(ChannelError):
    pass


class EnvelopeDecodeError(ChannelError):
    pass
