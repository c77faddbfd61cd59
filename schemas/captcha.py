"""
Wire and result models for hCaptcha verification.

VerificationRequest  — what we send to siteverify (form fields)
VerificationResponse — what siteverify answers (JSON body)
Decision             — what the verifier hands back to its caller
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class VerificationRequest(BaseModel):
    """One token to verify, plus the submitter's address (may be empty)."""

    model_config = ConfigDict(frozen=True)

    token: str
    remote_ip: str = ""

    def to_form(self, secret: SecretStr) -> dict[str, str]:
        return {
            "secret": secret.get_secret_value(),
            "response": self.token,
            "remoteip": self.remote_ip,
        }


class VerificationResponse(BaseModel):
    """Body returned by siteverify.

    Every field is optional on the wire. Missing values fall back to their
    zero value, so ``{"success": true}`` reads as a valid solve with score 0.0.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    score: float = 0.0
    hostname: str = ""
    error_codes: list[str] = Field(default_factory=list, alias="error-codes")
    challenge_ts: Optional[datetime] = None

    @field_validator("score", mode="before")
    @classmethod
    def _null_score(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @field_validator("hostname", mode="before")
    @classmethod
    def _null_hostname(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("error_codes", mode="before")
    @classmethod
    def _null_error_codes(cls, v: Any) -> Any:
        return [] if v is None else v


@dataclass(frozen=True)
class Decision:
    """Outcome of one verification call.

    ``transport_failed`` separates "the service said no" from "the service
    could not be asked". In the latter case ``error`` holds the cause.
    """

    accepted: bool
    risk_score: float
    transport_failed: bool = False
    error: Optional[Exception] = field(default=None, compare=False)
    error_codes: tuple[str, ...] = ()
