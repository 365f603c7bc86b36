"""
Service configuration.

Values are read from the environment after loading the project's .env file.
Components take explicit constructor arguments that default to these values.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent

env_path = PROJECT_ROOT / ".env"
load_dotenv(env_path)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(float(raw), 1.0)
    except (TypeError, ValueError):
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if not raw:
        return default
    path = Path(raw)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


# ================================
# FOOTAGE (Pexels)
# ================================

# Never hardcode the key; set PEXELS_API_KEY in .env or the environment
PEXELS_API_KEY = os.getenv("PEXELS_API_KEY", "").strip() or None
PEXELS_SEARCH_URL = os.getenv("PEXELS_SEARCH_URL", "https://api.pexels.com/videos/search")
PEXELS_PER_PAGE = int(os.getenv("PEXELS_PER_PAGE", "5"))
PEXELS_ORIENTATION = os.getenv("PEXELS_ORIENTATION", "portrait")

FOOTAGE_PROVIDER = os.getenv("FOOTAGE_PROVIDER", "pexels")
DEFAULT_SEARCH_TERM = os.getenv("DEFAULT_SEARCH_TERM", "nature")
PREFERRED_QUALITY = os.getenv("PREFERRED_QUALITY", "hd")

# ================================
# SPEECH (StreamElements)
# ================================

TTS_API_URL = os.getenv("TTS_API_URL", "https://api.streamelements.com/kappa/v2/speech")
TTS_VOICE = os.getenv("TTS_VOICE", "Brian")

SPEECH_PROVIDER = os.getenv("SPEECH_PROVIDER", "streamelements")

# Seconds. The upstream services have no documented limits, keep these bounded.
TTS_TIMEOUT = _env_float("TTS_TIMEOUT", 30.0)
SEARCH_TIMEOUT = _env_float("SEARCH_TIMEOUT", 30.0)
FETCH_TIMEOUT = _env_float("FETCH_TIMEOUT", 120.0)

# ================================
# STORAGE
# ================================

AUDIO_DIR = _env_path("AUDIO_DIR", PROJECT_ROOT / "audio")
VIDEO_DIR = _env_path("VIDEO_DIR", PROJECT_ROOT / "videos")

AUDIO_EXTENSION = "mp3"
VIDEO_EXTENSION = "mp4"

# ================================
# API
# ================================

MUSIC_TAGS = [
    "upbeat",
    "relaxing",
    "epic",
    "inspiring",
    "happy",
    "sad",
    "energetic",
    "calm",
    "dramatic",
    "peaceful",
    "intense",
    "cheerful",
]

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
