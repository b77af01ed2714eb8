import os
from dotenv import load_dotenv

load_dotenv()


def _csv(raw: str) -> tuple:
    return tuple(x.strip() for x in (raw or "").split(",") if x.strip())


class Settings:
    API_KEY: str = os.getenv("API_KEY", "")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Deal-size bounds (SetDealSize is clamped into [MIN, MAX])
    MIN_DEAL_SIZE: int = int(os.getenv("MIN_DEAL_SIZE", "50000"))
    MAX_DEAL_SIZE: int = int(os.getenv("MAX_DEAL_SIZE", "500000"))
    DEFAULT_DEAL_SIZE: int = int(os.getenv("DEFAULT_DEAL_SIZE", "200000"))

    # Tiers where the deposit / verification gate stage is entered
    DEPOSIT_REQUIRED_TIERS: tuple = _csv(os.getenv("DEPOSIT_REQUIRED_TIERS", "B,C"))
    # Flags that force an immediate pause
    HARD_STOP_FLAGS: tuple = _csv(os.getenv(
        "HARD_STOP_FLAGS",
        "AML_THIRD_PARTY_PAYER,FRAUD_OWNERSHIP_DOUBT,REGULATORY_CLASSIFICATION_QUESTION",
    ))

    # Observability
    ENGINE_LOG_ENABLED: bool = os.getenv("ENGINE_LOG_ENABLED", "true").lower() == "true"
    # Manual pause notes are free text; keep them out of stdout unless disabled
    ENABLE_NOTE_REDACTION: bool = os.getenv("ENABLE_NOTE_REDACTION", "true").lower() == "true"

    # Presentation may truncate the event view; the model itself never evicts
    EVENT_LOG_VIEW_LIMIT: int = int(os.getenv("EVENT_LOG_VIEW_LIMIT", "80"))

settings = Settings()
