"""
Configuration management for the ephemeral code store.

Settings are read from the ``[code_store]`` table of a TOML file and can be
overridden with ``CODE_STORE_*`` environment variables.
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, asdict
import tomli
from loguru import logger

from .codes import (
    DEFAULT_ALPHABET,
    DEFAULT_CODE_LENGTH,
    DEFAULT_MAX_GENERATION_ATTEMPTS,
    DEFAULT_TTL_SECONDS,
)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_optional_int(value: str) -> Optional[int]:
    if value.strip().lower() in ("", "0", "none", "off", "false"):
        return None
    return int(value)


def _optional_cap(value: Any) -> Optional[int]:
    # TOML has no null, so 0 and false stand for "no cap"
    if value is None or value is False or value == 0:
        return None
    return value


@dataclass
class CodeStoreConfig:
    """Configuration for the ephemeral code store."""
    ttl_seconds: float = DEFAULT_TTL_SECONDS
    code_length: int = DEFAULT_CODE_LENGTH
    alphabet: str = DEFAULT_ALPHABET
    max_generation_attempts: int = DEFAULT_MAX_GENERATION_ATTEMPTS
    max_text_length: Optional[int] = None  # no cap unless configured

    # Eviction
    sweep_on_put: bool = True
    reaper_interval_seconds: float = 60.0  # <= 0 disables the background reaper

    @property
    def code_space(self) -> int:
        """Number of distinct codes the alphabet and length allow."""
        return len(self.alphabet) ** self.code_length

    @classmethod
    def from_toml(cls, config_path: Optional[Path] = None) -> 'CodeStoreConfig':
        """
        Load configuration from TOML file.

        Args:
            config_path: Path to config file. If None, uses default locations.

        Returns:
            CodeStoreConfig instance
        """
        if config_path is None:
            possible_paths = [
                Path.home() / ".config" / "textdrop" / "config.toml",
                Path("config.toml"),
                Path(__file__).resolve().parent.parent.parent.parent / "Config_Files" / "code_store.toml"
            ]

            for path in possible_paths:
                if path.exists():
                    config_path = path
                    break
            else:
                logger.warning("No code store config file found, using defaults")
                config = cls()
                config._apply_env_overrides()
                return config

        logger.info(f"Loading code store config from: {config_path}")

        try:
            with open(config_path, "rb") as f:
                toml_data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")
            logger.warning("Using default code store configuration")
            config = cls()
            config._apply_env_overrides()
            return config

        store_section = dict(toml_data.get("code_store", {}))
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(store_section) - known)
        if unknown:
            logger.warning(f"Ignoring unknown code_store settings: {unknown}")
        if "max_text_length" in store_section:
            store_section["max_text_length"] = _optional_cap(store_section["max_text_length"])
        config = cls(**{k: v for k, v in store_section.items() if k in known})
        config._apply_env_overrides()
        return config

    def _apply_env_overrides(self):
        """Apply environment variable overrides."""
        env_mappings = {
            "CODE_STORE_TTL_SECONDS": ("ttl_seconds", float),
            "CODE_STORE_CODE_LENGTH": ("code_length", int),
            "CODE_STORE_ALPHABET": ("alphabet", str),
            "CODE_STORE_MAX_ATTEMPTS": ("max_generation_attempts", int),
            "CODE_STORE_MAX_TEXT_LENGTH": ("max_text_length", _parse_optional_int),
            "CODE_STORE_SWEEP_ON_PUT": ("sweep_on_put", _parse_bool),
            "CODE_STORE_REAPER_INTERVAL": ("reaper_interval_seconds", float),
        }

        for env_var, (attr, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                try:
                    setattr(self, attr, converter(value))
                    logger.debug(f"Override from env: {env_var} -> {attr} = {value}")
                except ValueError as e:
                    logger.warning(f"Failed to apply env override {env_var}: {e}")

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if self.ttl_seconds <= 0:
            errors.append("ttl_seconds must be > 0")
        if self.code_length < 1:
            errors.append("code_length must be >= 1")
        if len(self.alphabet) < 2:
            errors.append("alphabet must contain at least 2 characters")
        if len(set(self.alphabet)) != len(self.alphabet):
            errors.append("alphabet must not contain duplicate characters")
        if self.max_generation_attempts < 1:
            errors.append("max_generation_attempts must be >= 1")
        if self.max_text_length is not None and self.max_text_length < 1:
            errors.append("max_text_length must be >= 1 or None")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)
