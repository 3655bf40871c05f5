from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "Studio Quote - Quotation Builder")
    environment: str = os.getenv("ENVIRONMENT", "dev")
    debug: bool = _flag("DEBUG", "1")

    # Studio shown on the printed proposal
    studio_name: str = os.getenv("STUDIO_NAME", "Mera Studio & Films")
    history_user: str = os.getenv("HISTORY_USER", "Admin User")

    # Pricing mode: one tax mode and one payment-tracking mode per deployment
    apply_tax: bool = _flag("APPLY_TAX", "0")
    default_tax_rate: float = float(os.getenv("DEFAULT_TAX_RATE", "18") or 0)
    payment_tracking: str = os.getenv("PAYMENT_TRACKING", "advance")

    # Text refinement (OpenAI)
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "").strip()
    refine_model: str = os.getenv("REFINE_MODEL", "gpt-4.1-mini")

    # CORS for the local front-end
    frontend_origins: str = os.getenv(
        "FRONTEND_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
    )


settings = Settings()
