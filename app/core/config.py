# app/core/config.py

from typing import List, Tuple

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# .env values become plain environment variables before Settings reads them
load_dotenv()


class Settings(BaseSettings):
    # Mongo connection (falls back to a local server)
    MONGO_URI: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "academic_records"

    LOG_LEVEL: str = "INFO"

    # Pass rule: each component must clear its own minimum
    TA_PASS_RATIO: float = 0.4
    CE_PASS_RATIO: float = 0.5

    # A subject with this max TA has no CE component
    SINGLE_COMPONENT_MAX_TA: int = 100

    # Ordered (label, minimum average); first match wins
    PERFORMANCE_LEVELS: List[Tuple[str, float]] = [
        ("Excellent", 80),
        ("Good", 70),
        ("Average", 60),
        ("Needs Improvement", 0),
    ]
    FAILED_LEVEL: str = "Failed"

    UNASSIGNED_FACULTY: str = "Unassigned"
    NO_CLASS_MARKER: str = "-"

    DEFAULT_TOP_PERFORMERS: int = 10
    MAX_TOP_PERFORMERS: int = 100

    class Config:
        env_prefix = "ACADEMIC_"
        case_sensitive = False


CONFIG = Settings()


def level_labels() -> List[str]:
    """
    Every label a student's performance level may take.
    """
    return [label for label, _ in CONFIG.PERFORMANCE_LEVELS] + [CONFIG.FAILED_LEVEL]
