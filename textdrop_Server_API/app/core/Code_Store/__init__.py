"""
Ephemeral Code Store

In-memory, thread-safe storage for short-lived text addressed by short
human-typeable codes.

Main components:
- code_store.py: EphemeralCodeStore and its immutable Entry
- codes.py: code generation, fallback and normalization helpers
- config.py: configuration management with TOML integration
- reaper.py: background sweeping of expired entries
- exceptions.py: error hierarchy
"""

from .code_store import EphemeralCodeStore, Entry
from .config import CodeStoreConfig
from .exceptions import CodeStoreError, EmptyInputError, TextTooLongError, CodeNotFoundError
from .reaper import CodeStoreReaper

__all__ = [
    'EphemeralCodeStore',
    'Entry',
    'CodeStoreConfig',
    'CodeStoreReaper',
    'CodeStoreError',
    'EmptyInputError',
    'TextTooLongError',
    'CodeNotFoundError',
]
