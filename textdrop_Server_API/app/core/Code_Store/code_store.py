"""
Ephemeral code-addressed text store.

Text is stored under a short random code and stays readable until its TTL
runs out. All state lives in one dict guarded by one lock; every public
operation holds the lock for its whole duration, so callers never observe a
half-inserted or half-evicted entry.
"""

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from .codes import random_code, timestamp_fallback_code
from .config import CodeStoreConfig
from .exceptions import EmptyInputError, TextTooLongError


@dataclass(frozen=True)
class Entry:
    """A single stored text with its expiry bookkeeping."""
    code: str
    text: str
    created_at: float
    expires_at: float

    def is_live(self, now: float) -> bool:
        """An entry is live strictly before its expiry instant."""
        return now < self.expires_at

    def seconds_remaining(self, now: float) -> float:
        return max(0.0, self.expires_at - now)


class EphemeralCodeStore:
    """
    Thread-safe in-memory store mapping short codes to text.

    Entries are immutable and expire ``ttl_seconds`` after creation. Expired
    entries are removed lazily on lookup, swept before each ``put`` (when
    ``sweep_on_put`` is set) and by :class:`CodeStoreReaper` if one is running.
    """

    def __init__(
        self,
        config: Optional[CodeStoreConfig] = None,
        clock: Callable[[], float] = time.time,
        rng: Any = None
    ):
        """
        Initialize the store.

        Args:
            config: Store configuration (defaults if None)
            clock: Returns the current time in epoch seconds
            rng: Random source exposing ``choice(seq)``; a CSPRNG if None
        """
        self.config = config or CodeStoreConfig()
        errors = self.config.validate()
        if errors:
            raise ValueError(f"Invalid code store configuration: {'; '.join(errors)}")

        self._clock = clock
        self._rng = rng if rng is not None else secrets.SystemRandom()
        self._entries: Dict[str, Entry] = {}
        self._lock = threading.RLock()

        self._puts = 0
        self._hits = 0
        self._misses = 0
        self._evicted = 0
        self._fallbacks = 0

        logger.info(
            f"Code store initialized: ttl={self.config.ttl_seconds}s, "
            f"code_length={self.config.code_length}, code_space={self.config.code_space}"
        )

    def put(self, text: str) -> str:
        """
        Store text and return the code it can be retrieved with.

        Args:
            text: Text to share; stored exactly as given

        Returns:
            A code not held by any other live entry (except after a
            generation fallback, see ``_generate_code``)

        Raises:
            EmptyInputError: If the text is empty or whitespace only
            TextTooLongError: If the text exceeds ``max_text_length``
        """
        return self.put_entry(text).code

    def put_entry(self, text: str) -> Entry:
        """Like :meth:`put` but returns the whole new entry."""
        self._validate_text(text)

        with self._lock:
            now = self._clock()
            if self.config.sweep_on_put:
                self._sweep_locked(now)

            code = self._generate_code(now)
            entry = Entry(
                code=code,
                text=text,
                created_at=now,
                expires_at=now + self.config.ttl_seconds
            )
            self._entries[code] = entry
            self._puts += 1

        logger.debug(f"Stored {len(text)} characters under code {code}")
        return entry

    def get(self, code: str) -> Optional[str]:
        """
        Look up the text for a code.

        The lookup is exact; callers normalize user input beforehand. Reads
        do not consume the entry.

        Returns:
            The stored text, or None if the code is unknown or expired
        """
        entry = self.get_entry(code)
        return entry.text if entry is not None else None

    def get_entry(self, code: str) -> Optional[Entry]:
        """Like :meth:`get` but returns the whole entry."""
        with self._lock:
            return self._lookup_locked(code, self._clock())

    def take(self, code: str) -> Optional[Entry]:
        """
        Atomically return and remove a live entry (single-use read).

        Returns:
            The entry, or None if the code is unknown or expired
        """
        with self._lock:
            entry = self._lookup_locked(code, self._clock())
            if entry is not None:
                del self._entries[code]
                logger.debug(f"Code {code} burned after read")
            return entry

    def sweep_expired(self) -> int:
        """
        Remove all expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            return self._sweep_locked(self._clock())

    def live_codes(self) -> List[str]:
        """Sorted codes of all live entries."""
        with self._lock:
            now = self._clock()
            return sorted(code for code, entry in self._entries.items() if entry.is_live(now))

    def clear(self) -> None:
        """Drop every entry and reset counters."""
        with self._lock:
            self._entries.clear()
            self._puts = self._hits = self._misses = 0
            self._evicted = self._fallbacks = 0
            logger.info("Code store cleared")

    def get_stats(self) -> Dict[str, Any]:
        """Get store statistics."""
        with self._lock:
            now = self._clock()
            live = sum(1 for entry in self._entries.values() if entry.is_live(now))
            return {
                "size": len(self._entries),
                "live": live,
                "puts": self._puts,
                "hits": self._hits,
                "misses": self._misses,
                "evicted": self._evicted,
                "fallbacks": self._fallbacks,
                "ttl_seconds": self.config.ttl_seconds,
                "code_space": self.config.code_space
            }

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for entry in self._entries.values() if entry.is_live(now))

    def __contains__(self, code: object) -> bool:
        with self._lock:
            entry = self._entries.get(code) if isinstance(code, str) else None
            return entry is not None and entry.is_live(self._clock())

    # Internal helpers; callers must hold self._lock

    def _validate_text(self, text: str) -> None:
        if text is None or not text.strip():
            raise EmptyInputError()
        max_length = self.config.max_text_length
        if max_length is not None and len(text) > max_length:
            raise TextTooLongError(len(text), max_length)

    def _lookup_locked(self, code: str, now: float) -> Optional[Entry]:
        entry = self._entries.get(code)
        if entry is None:
            self._misses += 1
            return None
        if not entry.is_live(now):
            del self._entries[code]
            self._evicted += 1
            self._misses += 1
            logger.debug(f"Code {code} expired, evicted on access")
            return None
        self._hits += 1
        return entry

    def _sweep_locked(self, now: float) -> int:
        expired = [code for code, entry in self._entries.items() if not entry.is_live(now)]
        for code in expired:
            del self._entries[code]
        if expired:
            self._evicted += len(expired)
            logger.debug(f"Swept {len(expired)} expired entries")
        return len(expired)

    def _is_code_taken(self, code: str, now: float) -> bool:
        entry = self._entries.get(code)
        return entry is not None and entry.is_live(now)

    def _generate_code(self, now: float) -> str:
        """
        Draw random codes until one is free or the attempt budget runs out.

        On exhaustion the code is derived from the timestamp instead. That
        code may belong to a live entry, which the new entry then replaces.
        """
        alphabet = self.config.alphabet
        length = self.config.code_length
        attempts = self.config.max_generation_attempts

        for _ in range(attempts):
            code = random_code(self._rng, alphabet, length)
            if not self._is_code_taken(code, now):
                return code

        code = timestamp_fallback_code(now, length)
        self._fallbacks += 1
        logger.warning(
            f"No free code after {attempts} attempts "
            f"({len(self._entries)} entries stored, code space {self.config.code_space}); "
            f"falling back to timestamp code {code}"
        )
        if self._is_code_taken(code, now):
            logger.warning(f"Fallback code {code} replaces a live entry")
        return code
