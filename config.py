"""
Verifier configuration via pydantic-settings.

Settings are loaded from environment variables (and .env file), or built
explicitly with CaptchaSettings.init() at process start. Either way the
resulting object is frozen and handed to the verifier; nothing reads
configuration from module globals.
"""

from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

HCAPTCHA_VERIFY_URL = "https://hcaptcha.com/siteverify"


class CaptchaSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="HCAPTCHA_", extra="ignore", frozen=True
    )

    secret: SecretStr = SecretStr("")
    # Remote convention: lower is safer. Tokens are accepted strictly below this.
    score_threshold: float = 0.5
    timeout_seconds: float = 2.0
    verify_url: str = HCAPTCHA_VERIFY_URL

    @classmethod
    def init(
        cls, secret: str, score_threshold: float, timeout_seconds: int
    ) -> "CaptchaSettings":
        """Build settings from explicit values.

        Nothing is validated: a zero or negative threshold, or a zero timeout,
        is accepted as given.
        """
        return cls(
            secret=SecretStr(secret),
            score_threshold=score_threshold,
            timeout_seconds=timeout_seconds,
        )


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "development"
    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    @property
    def is_production(self) -> bool:
        return self.env == "production"
