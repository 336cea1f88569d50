"""
reCAPTCHA v3 verification for match requests.

Any failure talking to Google resolves to "not a bot".
"""

import logging
from typing import Optional

import httpx

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class RecaptchaVerifier:
    """Client for the reCAPTCHA `siteverify` endpoint."""

    def __init__(
        self,
        secret: str,
        verify_url: str = "https://www.google.com/recaptcha/api/siteverify",
        score_threshold: float = 0.1,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.secret = secret
        self.verify_url = verify_url
        self.score_threshold = score_threshold
        self._http_client = http_client
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.secret)

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-initialize the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def is_bot(self, token: str) -> bool:
        """Ask Google whether the token belongs to a bot."""
        if not self.is_configured:
            return False

        try:
            response = await self.http_client.post(
                self.verify_url,
                data={"secret": self.secret, "response": token},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Request error at recaptcha website: {e}")
            return False

        if response.status_code > 299:
            logger.warning(f"Recaptcha request result on http error code {response.status_code}")
            return False

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"Error parsing recaptcha payload: {e}")
            return False

        return self.interpret(payload)

    def interpret(self, payload: object) -> bool:
        """Map a `siteverify` response body to a bot / not-bot decision."""
        if not isinstance(payload, dict) or "score" not in payload:
            return False

        # A score field that is present but unusable still counts against the client
        try:
            score = float(payload["score"])
        except (TypeError, ValueError):
            logger.warning(f"Recaptcha returned a non-numeric score: {payload['score']!r}")
            return True

        if payload.get("success") and score > self.score_threshold:
            return False
        return True


def create_recaptcha_verifier(settings: Optional[Settings] = None) -> RecaptchaVerifier:
    """Factory function to create RecaptchaVerifier from settings."""
    settings = settings or get_settings()

    if not settings.recaptcha_key:
        logger.warning("RECAPTCHA_KEY is not set, bot verification disabled")

    return RecaptchaVerifier(
        secret=settings.recaptcha_key,
        verify_url=settings.recaptcha_verify_url,
        score_threshold=settings.recaptcha_score_threshold,
        timeout=settings.recaptcha_timeout,
    )
