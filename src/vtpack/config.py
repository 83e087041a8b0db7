import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .logging_utils import apply_log_level, get_logger

logger = get_logger(__name__)


@dataclass
class Settings:
    output_dir: str = "."
    watch_cooldown: int = 10


def load_settings() -> Settings:
    """Read settings from the environment, including a .env file if present."""
    load_dotenv()
    apply_log_level()
    settings = Settings()
    settings.output_dir = os.getenv("VTPACK_OUTPUT_DIR", settings.output_dir)
    cooldown = os.getenv("VTPACK_WATCH_COOLDOWN")
    if cooldown:
        try:
            settings.watch_cooldown = int(cooldown)
        except ValueError:
            logger.warning("Ignoring non-integer VTPACK_WATCH_COOLDOWN=%r", cooldown)
    return settings
