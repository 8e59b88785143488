import os
from datetime import time

from dotenv import load_dotenv


load_dotenv()

def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_time(value: str | None, default: time) -> time:
    if not value:
        return default
    hours, _, minutes = value.strip().partition(":")
    return time(int(hours), int(minutes or 0))


def _get_list(value: str | None) -> frozenset[str]:
    if not value:
        return frozenset()
    return frozenset(item.strip().lower() for item in value.split(",") if item.strip())


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic.db")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

# Booking form grid
DAY_START = _get_time(os.getenv("DAY_START"), time(8, 0))
DAY_END = _get_time(os.getenv("DAY_END"), time(17, 0))
SLOT_STEP_MINUTES = int(os.getenv("SLOT_STEP_MINUTES", "15"))

LUNCH_BREAK_START = _get_time(os.getenv("LUNCH_BREAK_START"), time(12, 0))
LUNCH_BREAK_END = _get_time(os.getenv("LUNCH_BREAK_END"), time(13, 0))
AVAILABILITY_SESSION_MINUTES = int(os.getenv("AVAILABILITY_SESSION_MINUTES", "30"))
CALENDAR_SLOT_MINUTES = int(os.getenv("CALENDAR_SLOT_MINUTES", "30"))

# Statuses listed here stop occupying their slot, e.g. "canceled,no-show".
CONFLICT_IGNORED_STATUSES = _get_list(os.getenv("CONFLICT_IGNORED_STATUSES"))
STRICT_TIME_PARSING = _get_bool(os.getenv("STRICT_TIME_PARSING"), default=False)

REFERRAL_VALIDITY_DAYS = int(os.getenv("REFERRAL_VALIDITY_DAYS", "90"))
REFERRAL_EXPIRING_WINDOW_DAYS = int(os.getenv("REFERRAL_EXPIRING_WINDOW_DAYS", "30"))

MAX_APPOINTMENT_NOTES_LENGTH = 600
MAX_KPI_RANGE_DAYS = int(os.getenv("MAX_KPI_RANGE_DAYS", "366"))

KNOWN_STATUSES = {"scheduled", "completed", "no-show", "canceled"}


def validate_runtime_config() -> None:
    if DAY_START >= DAY_END:
        raise RuntimeError("DAY_START must be earlier than DAY_END.")
    if LUNCH_BREAK_START >= LUNCH_BREAK_END:
        raise RuntimeError("LUNCH_BREAK_START must be earlier than LUNCH_BREAK_END.")
    if SLOT_STEP_MINUTES <= 0 or AVAILABILITY_SESSION_MINUTES <= 0 or CALENDAR_SLOT_MINUTES <= 0:
        raise RuntimeError("Slot lengths must be positive.")
    if MAX_KPI_RANGE_DAYS <= 0:
        raise RuntimeError("MAX_KPI_RANGE_DAYS must be positive.")
    unknown = CONFLICT_IGNORED_STATUSES - KNOWN_STATUSES
    if unknown:
        raise RuntimeError(f"Unknown statuses in CONFLICT_IGNORED_STATUSES: {', '.join(sorted(unknown))}")
