# ENV vars: Gemini credentials, logging, engine defaults
import os
from dotenv import load_dotenv

from tileplan.settings import GenerationSettings

load_dotenv()


def _optional_int(name: str):
    value = os.getenv(name, "").strip()
    return int(value) if value else None


class Config:
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

    DEFAULT_STYLE = os.getenv("DEFAULT_STYLE", "").strip().lower() or None
    DEFAULT_SEED = _optional_int("DEFAULT_SEED")
    DOOR_WIDTH = int(os.getenv("DOOR_WIDTH", "2"))
    CORRIDOR_WIDTH = int(os.getenv("CORRIDOR_WIDTH", "2"))
    GENERATION_TIMEOUT_S = float(os.getenv("GENERATION_TIMEOUT_S", "10"))

    CORS_ORIGINS = [o.strip() for o in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000",  # Vite, Create React App
    ).split(",") if o.strip()]

    @classmethod
    def generation_settings(cls) -> GenerationSettings:
        return GenerationSettings(door_width=cls.DOOR_WIDTH, corridor_width=cls.CORRIDOR_WIDTH)
