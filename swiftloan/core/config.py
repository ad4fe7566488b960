from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # -------------------------
    # App core settings
    # -------------------------
    APP_NAME: str = "SwiftLoan Orchestrator"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # -------------------------
    # Gemini
    # -------------------------
    GOOGLE_API_KEY: Optional[str] = None
    GOOGLE_MODEL: str = "gemini-2.5-flash"
    # low temperature keeps the model on the hand-off script
    MODEL_TEMPERATURE: float = 0.4

    # -------------------------
    # Upload gate
    # -------------------------
    # When False the pending document request is only cleared by a turn
    # that actually carries an attachment.
    CLEAR_UPLOAD_ON_ANY_TURN: bool = True
    UPLOAD_DIR: str = "uploads"

    # -------------------------
    # Pydantic v2 config
    # -------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="forbid"
    )


# Singleton
settings = Settings()
