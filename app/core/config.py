from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 4000

    # reCAPTCHA v3 (empty key disables verification)
    recaptcha_key: str = ""
    recaptcha_verify_url: str = "https://www.google.com/recaptcha/api/siteverify"
    recaptcha_score_threshold: float = 0.1
    recaptcha_timeout: float = 10.0

    # Matching pass
    match_batch_size: int = 100  # iterations between yields to the event loop
    match_backoff_seconds: float = 0.1

    # Push stream
    keepalive_interval: float = 15.0
    session_cookie_name: str = "user"

    # CORS (production only, development allows any origin)
    allowed_origin_pattern: str = r"^https://([a-z0-9-]+\.)?nunum\.me$"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
