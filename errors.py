"""
Verifier error hierarchy.

AppError is the base for all typed errors and renders a consistent dict
for the caller's logs or error responses. Transport failures are never
raised out of the verifier; they travel inside the Decision so the
fail-open result is still delivered. Decode failures are raised.
"""

from __future__ import annotations

from typing import Any, Optional


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    error_code: str = "internal_error"

    def __init__(self, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class CaptchaError(AppError):
    error_code = "captcha_error"


class CaptchaTransportError(CaptchaError):
    """The verification service could not be reached or did not answer 2xx."""

    error_code = "captcha_unreachable"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        return payload


class CaptchaDecodeError(CaptchaError):
    """The verification service answered with a body that is not a verdict."""

    error_code = "captcha_decode_error"
