"""Application config from environment."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Without it every transcription request fails with TranscriptionFailed.
    OPENAI_API_KEY: str | None = None
    HOST: str = "0.0.0.0"
    PORT: int = 4000
    # Output of `which yt-dlp` on the target machine, e.g. "/opt/homebrew/bin/yt-dlp"
    YTDLP_PATH: str = "yt-dlp"
    # Each request downloads into its own subdirectory of this one
    SCRATCH_DIR: str = "./tmp"
    TRANSCRIPTION_MODEL: str = "gpt-4o-mini-transcribe"
    TRANSCRIPTION_TEMPERATURE: float = 0.2
    MAX_BODY_BYTES: int = 5 * 1024 * 1024
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    ENV: str | None = None
    OTEL_EXPORTER_OTLP_ENDPOINT: str | None = None


settings = Settings()
