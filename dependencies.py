"""
Verifier construction.

The host application builds one CaptchaSettings at startup and opens the
verifier once; request handlers share the instance.

    async with captcha_verifier(CaptchaSettings.init(secret, 0.5, 2)) as verifier:
        decision = await verifier.verify(token, client_ip)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from config import CaptchaSettings
from infrastructure.captcha.hcaptcha import HCaptchaVerifier
from infrastructure.captcha.protocol import CaptchaVerifier
from infrastructure.http_client import HttpClient


def build_captcha_verifier(
    settings: Optional[CaptchaSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[HCaptchaVerifier, HttpClient]:
    """Return a verifier and the HttpClient it owns. The caller closes the client."""
    settings = settings or CaptchaSettings()
    http_client = HttpClient(timeout=settings.timeout_seconds, transport=transport)
    return HCaptchaVerifier(settings, http_client), http_client


@asynccontextmanager
async def captcha_verifier(
    settings: Optional[CaptchaSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[CaptchaVerifier]:
    verifier, http_client = build_captcha_verifier(settings, transport)
    async with http_client:
        yield verifier
