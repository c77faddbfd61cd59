import httpx
import pytest
import structlog

from config import CaptchaSettings

VERIFY_URL = "https://hcaptcha.test/siteverify"


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("HCAPTCHA_VERIFY_URL", VERIFY_URL)
    return CaptchaSettings.init("SOME_KEY", 0.5, 2)


@pytest.fixture
def responder():
    """Build a MockTransport answering every request with a fixed reply."""

    def make(status_code: int, body: str) -> httpx.MockTransport:
        return httpx.MockTransport(
            lambda request: httpx.Response(status_code, text=body)
        )

    return make
