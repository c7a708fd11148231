# config.py
# Description: Configuration settings for the textdrop server application.
#
# Imports
import os
from pathlib import Path
from typing import Optional
#
# 3rd-party Libraries
from dotenv import load_dotenv
from loguru import logger
#
# Local Imports
from textdrop_Server_API.app.core.Code_Store.codes import DEFAULT_MAX_TEXT_LENGTH
from textdrop_Server_API.app.core.Code_Store.config import CodeStoreConfig
#
########################################################################################################################
#
# Functions:

load_dotenv()

# --- Constants ---
API_V1_PREFIX = "/api/v1"
DEFAULT_SHARE_RATE_LIMIT = "30/minute"


def _split_origins(raw: str) -> list:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def _parse_length_cap(raw: str) -> Optional[int]:
    if raw.strip().lower() in ("", "0", "none", "off", "false"):
        return None
    return int(raw)


def load_settings():
    """Loads all settings from environment variables or defaults into a dictionary."""

    # --- Logging ---
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    # --- CORS ---
    allowed_origins = _split_origins(os.getenv("ALLOWED_ORIGINS", ""))

    # --- Code Store ---
    code_store_config_path = os.getenv("CODE_STORE_CONFIG_PATH")

    # --- Rate Limiting (per client address, applied to share creation) ---
    share_rate_limit = os.getenv("SHARE_RATE_LIMIT", DEFAULT_SHARE_RATE_LIMIT)
    rate_limit_enabled = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

    # --- Share size cap (characters, after trimming); 0 or "none" disables it ---
    share_max_text_length = _parse_length_cap(os.getenv("SHARE_MAX_TEXT_LENGTH", str(DEFAULT_MAX_TEXT_LENGTH)))

    config_dict = {
        "LOG_LEVEL": log_level,
        "ALLOWED_ORIGINS": allowed_origins,
        "CODE_STORE_CONFIG_PATH": Path(code_store_config_path) if code_store_config_path else None,
        "SHARE_RATE_LIMIT": share_rate_limit,
        "RATE_LIMIT_ENABLED": rate_limit_enabled,
        "SHARE_MAX_TEXT_LENGTH": share_max_text_length,
    }

    if not allowed_origins:
        logger.debug("ALLOWED_ORIGINS not set; CORS will allow any origin")

    return config_dict


def load_code_store_config(config_path: Optional[Path] = None) -> CodeStoreConfig:
    """Load the code store configuration, preferring an explicit path over CODE_STORE_CONFIG_PATH."""
    path = config_path or settings.get("CODE_STORE_CONFIG_PATH")
    return CodeStoreConfig.from_toml(path)


settings = load_settings()

ALLOWED_ORIGINS = settings["ALLOWED_ORIGINS"]

#
# End of config.py
########################################################################################################################
