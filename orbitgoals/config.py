from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Remote aggregate store (leaderboards, payment requests). None = backend missing.
    database_url: str | None = None
    orbit_api_key: str | None = None
    log_level: str = "INFO"

    # Identity: ids equal to this (or starting with "guest-") never sync remotely.
    guest_user_id: str = "guest-user-123"

    # Local durable storage. None keeps per-user state in memory only.
    local_store_dir: str | None = None

    # Leaderboard
    leaderboard_limit: int = 20
    friends_allow_list: list[str] = ["m2", "m4", "m6"]

    # Premium (manual QR verification)
    payment_amount: int = 30

    # Generative text service. Absent key = canned responses only.
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
