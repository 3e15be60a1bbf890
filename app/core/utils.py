import hashlib
import re
import secrets
import string
from datetime import date

from app.core.config import settings


def generate_confirmation_code(length: int = 8) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def video_room_name(participant_a, participant_b) -> str:
    # Order-independent so both sides of the call land in the same room
    first, second = sorted([str(participant_a), str(participant_b)])
    digest = hashlib.sha256(f"{first}:{second}".encode("utf-8")).hexdigest()[:16]
    return f"{settings.VIDEO_ROOM_PREFIX}-{digest}"


def video_room_url(room_name: str) -> str:
    return f"https://{settings.VIDEO_DOMAIN}/{room_name}"


def safe_filename(name: str) -> str:
    # Keep the extension, drop path separators and odd characters
    name = name.replace("\\", "/").split("/")[-1]
    name = re.sub(r'[^A-Za-z0-9._-]', '_', name)
    name = name.strip('._')
    return name or "report"


def sunday_first_weekday(day: date) -> int:
    """Day of week with 0=Sunday..6=Saturday (Python's weekday() is 0=Monday)."""
    python_day = day.weekday()
    return 0 if python_day == 6 else python_day + 1
