# aidoctor/config.py
import os

from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "production")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DB_USER = os.getenv("DB_USER", "root")
DB_PASS = os.getenv("DB_PASS", "")
DB_HOST = os.getenv("DB_HOST", "127.0.0.1")
DB_NAME = os.getenv("DB_NAME", "ai_doctor")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+mysqlconnector://{DB_USER}:{DB_PASS}@{DB_HOST}/{DB_NAME}",
)

JWT_SECRET = os.getenv("JWT_SECRET", "supersecretkey")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "8"))

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
# tried in order until one answers
GEMINI_MODELS = [
    m.strip()
    for m in os.getenv(
        "GEMINI_MODELS",
        "gemini-2.5-flash,gemini-2.0-flash-exp,gemini-1.5-flash,gemini-1.5-pro",
    ).split(",")
    if m.strip()
]
GEMINI_CHECK_MODELS = GEMINI_MODELS[:3]

PUBLIC_APP_URL = os.getenv("PUBLIC_APP_URL", "http://localhost:5173")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", PUBLIC_APP_URL).split(",") if o.strip()]

DOCTOR_APPROVAL_POINTS = int(os.getenv("DOCTOR_APPROVAL_POINTS", "10"))


def is_development() -> bool:
    return APP_ENV.lower() == "development"
