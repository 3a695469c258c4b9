# Loads settings from the environment (and .env) for the API and the assistant
import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")

GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "20"))
AI_HISTORY_LIMIT = int(os.getenv("AI_HISTORY_LIMIT", "20"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

SEED_DEFAULT_DEADLINES = _flag("SEED_DEFAULT_DEADLINES", "true")
QUARTERLY_REPORT_DAY = int(os.getenv("QUARTERLY_REPORT_DAY", "15"))
PSUR_DEADLINE_DAY = int(os.getenv("PSUR_DEADLINE_DAY", "10"))
WEBINAR_DAY = int(os.getenv("WEBINAR_DAY", "25"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "7000"))
