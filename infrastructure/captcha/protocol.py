"""CaptchaVerifier protocol — callers depend on this, not the concrete implementation."""

import asyncio
from typing import Optional, Protocol, runtime_checkable

from schemas.captcha import Decision


@runtime_checkable
class CaptchaVerifier(Protocol):
    async def verify(self, token: str, remote_ip: str = "") -> Decision: ...

    async def verify_with_deadline(
        self,
        token: str,
        remote_ip: str,
        deadline: Optional[float],
        cancel: Optional[asyncio.Event] = None,
    ) -> Decision: ...
