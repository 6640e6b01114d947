# mindmap_engine/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-flash-latest"
    CONCEPT_TEMPERATURE: float = 0.3
    CONCEPT_MAX_OUTPUT_TOKENS: int = 4000
    # Transcript text beyond this many characters is not sent to the model.
    MAX_TRANSCRIPT_CHARS: int = 6000
    MIN_CONTENT_LENGTH: int = 200
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
