# aidoctor/config_store.py
import json
import os
from pathlib import Path
from typing import Optional

from . import config

CONFIG_PATH = Path(os.getenv("CONFIG_STORE_PATH", Path(__file__).parent / "config.json"))


def save_api_key(key: str) -> None:
    CONFIG_PATH.write_text(json.dumps({"GEMINI_API_KEY": key.strip()}))


def load_api_key() -> Optional[str]:
    if CONFIG_PATH.exists():
        data = json.loads(CONFIG_PATH.read_text() or "{}")
        return data.get("GEMINI_API_KEY")
    return None


def resolve_api_key() -> Optional[str]:
    """Environment key wins over the one saved through /save-key."""
    return config.GEMINI_API_KEY or load_api_key()


def mask_key(key: str) -> str:
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}{'*' * (len(key) - 8)}{key[-4:]}"
