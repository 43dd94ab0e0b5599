# config.py
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATA_PATH = "transactions.json"
DEFAULT_MODEL = "gpt-4.1"


@dataclass(frozen=True)
class Settings:
    data_path: str = DEFAULT_DATA_PATH
    openai_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment, after loading a local .env file if present."""
    load_dotenv()
    return Settings(
        data_path=os.getenv("SMARTSPEND_DATA_PATH", DEFAULT_DATA_PATH),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        model=os.getenv("SMARTSPEND_MODEL", DEFAULT_MODEL),
        log_level=os.getenv("SMARTSPEND_LOG_LEVEL", "INFO"),
    )
