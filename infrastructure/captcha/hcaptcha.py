"""hCaptcha implementation of CaptchaVerifier.

One POST to siteverify per call, bounded by the configured timeout. The
reply is reduced to a Decision:

- service unreachable, too slow, cancelled by the caller, or not 2xx:
  accepted (fail open), score 0.0
- ``success`` false: rejected, score 0.0
- ``success`` true: accepted iff score < threshold

A reply that cannot be decoded raises CaptchaDecodeError instead.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx
from pydantic import ValidationError

from config import CaptchaSettings
from errors import CaptchaDecodeError, CaptchaTransportError
from infrastructure.http_client import HttpClient
from schemas.captcha import Decision, VerificationRequest, VerificationResponse
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)

# Business rule: when siteverify cannot give an answer, let the user through.
# A reachable service that rejects the token is still a rejection.
FAIL_OPEN_ON_TRANSPORT_ERROR = True


def decide(response: VerificationResponse, score_threshold: float) -> Decision:
    """Apply the threshold policy to a decoded reply."""
    codes = tuple(response.error_codes)
    if not response.success:
        return Decision(accepted=False, risk_score=0.0, error_codes=codes)
    # Strictly below: a score equal to the threshold is already high risk.
    return Decision(
        accepted=response.score < score_threshold,
        risk_score=response.score,
        error_codes=codes,
    )


def fail_open(error: CaptchaTransportError) -> Decision:
    return Decision(
        accepted=FAIL_OPEN_ON_TRANSPORT_ERROR,
        risk_score=0.0,
        transport_failed=True,
        error=error,
    )


class HCaptchaVerifier:
    def __init__(self, settings: CaptchaSettings, http_client: HttpClient) -> None:
        self._settings = settings
        self._http = http_client
        if not settings.secret.get_secret_value():
            log.warning("hcaptcha_secret_not_configured")

    async def verify(self, token: str, remote_ip: str = "") -> Decision:
        """Verify ``token`` with no deadline beyond the configured timeout."""
        return await self.verify_with_deadline(token, remote_ip, None)

    async def verify_with_deadline(
        self,
        token: str,
        remote_ip: str,
        deadline: Optional[float],
        cancel: Optional[asyncio.Event] = None,
    ) -> Decision:
        """Verify ``token``, giving up after ``deadline`` seconds or when
        ``cancel`` is set.

        The effective bound is the shorter of ``deadline`` and the configured
        timeout. Running out of time and the caller setting ``cancel`` both
        count as transport failures. Task cancellation is not swallowed.
        """
        request = VerificationRequest(token=token, remote_ip=remote_ip)

        bound = self._settings.timeout_seconds
        if deadline is not None:
            bound = min(bound, deadline)

        try:
            response = await self._post(request, bound, cancel)
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            log.warning(
                "hcaptcha_request_failed",
                remote_ip=hash_ip(remote_ip),
                error=str(e) or type(e).__name__,
                error_type=type(e).__name__,
                timeout_seconds=bound,
            )
            error = CaptchaTransportError("hCaptcha verification service unreachable")
            error.__cause__ = e
            return self._logged(request, fail_open(error))

        if response is None:
            log.warning("hcaptcha_request_cancelled", remote_ip=hash_ip(remote_ip))
            error = CaptchaTransportError("hCaptcha verification cancelled by caller")
            return self._logged(request, fail_open(error))

        if not response.is_success:
            log.warning(
                "hcaptcha_api_error",
                remote_ip=hash_ip(remote_ip),
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            error = CaptchaTransportError(
                "hCaptcha verification service returned an error status",
                status_code=response.status_code,
            )
            return self._logged(request, fail_open(error))

        try:
            payload = VerificationResponse.model_validate_json(response.content)
        except ValidationError as e:
            log.error(
                "hcaptcha_decode_failed",
                remote_ip=hash_ip(remote_ip),
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise CaptchaDecodeError(
                "hCaptcha verification service returned an unreadable body",
                details=e.errors(include_url=False, include_input=False),
            ) from e

        log.debug(
            "hcaptcha_payload",
            success=payload.success,
            score=payload.score,
            hostname=payload.hostname,
            error_codes=payload.error_codes,
            challenge_ts=payload.challenge_ts.isoformat()
            if payload.challenge_ts
            else None,
        )

        return self._logged(
            request, decide(payload, self._settings.score_threshold), payload
        )

    def _logged(
        self,
        request: VerificationRequest,
        decision: Decision,
        payload: Optional[VerificationResponse] = None,
    ) -> Decision:
        log_fn = log.info if decision.accepted else log.warning
        log_fn(
            "hcaptcha_verified",
            remote_ip=hash_ip(request.remote_ip),
            accepted=decision.accepted,
            risk_score=decision.risk_score,
            transport_failed=decision.transport_failed,
            threshold=self._settings.score_threshold,
            hostname=payload.hostname if payload else None,
            error_codes=list(decision.error_codes),
        )
        return decision

    async def _post(
        self,
        request: VerificationRequest,
        bound: float,
        cancel: Optional[asyncio.Event],
    ) -> Optional[httpx.Response]:
        """POST the form within ``bound`` seconds.

        Returns None when ``cancel`` is set before the reply arrives.
        """
        call = asyncio.wait_for(
            self._http.post_form(
                self._settings.verify_url,
                data=request.to_form(self._settings.secret),
            ),
            timeout=bound,
        )
        if cancel is None:
            return await call

        post_task = asyncio.ensure_future(call)
        cancel_task = asyncio.ensure_future(cancel.wait())
        try:
            done, pending = await asyncio.wait(
                {post_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (post_task, cancel_task):
                if not task.done():
                    task.cancel()

        if pending:
            await asyncio.wait(pending)
        if post_task in done:
            return post_task.result()
        return None
