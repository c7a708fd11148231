# textdrop_Server_API/app/api/v1/API_Deps/Code_Store_Deps.py
#
# Imports
import threading
from typing import Optional
#
# Third-party imports
from loguru import logger
#
# Local Imports
from textdrop_Server_API.app.core.Code_Store import EphemeralCodeStore, CodeStoreReaper
from textdrop_Server_API.app.core.config import load_code_store_config
#
########################################################################################################################
#
# Functions:

# --- Process-wide store instance ---
_code_store: Optional[EphemeralCodeStore] = None
_code_store_reaper: Optional[CodeStoreReaper] = None
_code_store_lock = threading.Lock()


def get_code_store() -> EphemeralCodeStore:
    """FastAPI dependency returning the shared code store, created on first use."""
    global _code_store
    if _code_store is None:
        with _code_store_lock:
            if _code_store is None:
                config = load_code_store_config()
                _code_store = EphemeralCodeStore(config)
                logger.info("Created process-wide code store")
    return _code_store


def start_code_store_reaper() -> Optional[CodeStoreReaper]:
    """Start the background reaper for the shared store. Called from the app lifespan."""
    global _code_store_reaper
    store = get_code_store()
    with _code_store_lock:
        if _code_store_reaper is None:
            _code_store_reaper = CodeStoreReaper(store)
        if not _code_store_reaper.start() and not _code_store_reaper.running:
            return None
    return _code_store_reaper


def stop_code_store_reaper() -> None:
    global _code_store_reaper
    with _code_store_lock:
        if _code_store_reaper is not None:
            _code_store_reaper.stop()
            # A reaper that outlived its join timeout is kept so it is not started twice
            if not _code_store_reaper.running:
                _code_store_reaper = None


def reset_code_store() -> None:
    """Stop the reaper and drop the shared store; the next request builds a fresh one."""
    global _code_store
    stop_code_store_reaper()
    with _code_store_lock:
        _code_store = None

#
# End of Code_Store_Deps.py
########################################################################################################################
