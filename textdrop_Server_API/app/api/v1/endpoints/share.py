# textdrop_Server_API/app/api/v1/endpoints/share.py
# Description: FastAPI endpoints for sharing text under short-lived codes.
#
# Imports
from datetime import datetime, timezone
#
# 3rd-party imports
from fastapi import (
    APIRouter,
    Body,
    Depends,
    HTTPException,
    Path,
    Query,
    Request,
    status
)
# API Rate Limiter
from slowapi import Limiter
from slowapi.util import get_remote_address
from loguru import logger
#
# Local Imports
from textdrop_Server_API.app.api.v1.API_Deps.Code_Store_Deps import get_code_store
from textdrop_Server_API.app.api.v1.schemas.share_schemas import (
    CodeStoreStatsResponse,
    ShareCreateRequest,
    ShareCreateResponse,
    ShareRetrieveResponse
)
from textdrop_Server_API.app.core.Code_Store import (
    CodeNotFoundError,
    EmptyInputError,
    Entry,
    EphemeralCodeStore,
    TextTooLongError
)
from textdrop_Server_API.app.core.Code_Store.codes import normalize_code
from textdrop_Server_API.app.core.config import settings
#
#######################################################################################################################
#
# Functions:

router = APIRouter()
# Mounted outside the share prefix so no typed code can shadow it
stats_router = APIRouter()

# Throttles share creation per client address; the store itself has no rate limiting.
limiter = Limiter(key_func=get_remote_address, enabled=settings["RATE_LIMIT_ENABLED"])


def _to_utc(epoch_seconds: float) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)


def _resolve_entry(store: EphemeralCodeStore, raw_code: str, burn: bool) -> Entry:
    """Normalize the typed code and look it up, raising CodeNotFoundError on a miss."""
    code = normalize_code(raw_code, store.config.alphabet, store.config.code_length)
    entry = store.take(code) if burn else store.get_entry(code)
    if entry is None:
        raise CodeNotFoundError(code)
    return entry


@router.post(
    "",
    summary="Share a text and receive a short code for it.",
    status_code=status.HTTP_201_CREATED,
    response_model=ShareCreateResponse,
    responses={
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: {"description": "Text exceeds the configured length limit."},
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"description": "Text is empty or whitespace only."},
        status.HTTP_429_TOO_MANY_REQUESTS: {"description": "Rate limit exceeded."},
    }
)
@limiter.limit(settings["SHARE_RATE_LIMIT"])
def create_share(
    request: Request,
    payload: ShareCreateRequest = Body(...),
    store: EphemeralCodeStore = Depends(get_code_store)
):
    """
    Stores the text and returns a code that retrieves it until it expires.

    - **text**: The text to share. Surrounding whitespace is trimmed.
    """
    text = payload.text.strip()
    max_length = settings["SHARE_MAX_TEXT_LENGTH"]
    try:
        if max_length is not None and len(text) > max_length:
            raise TextTooLongError(len(text), max_length)
        entry = store.put_entry(text)
    except EmptyInputError as e:
        logger.info(f"Rejected share request: {e}")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)
    except TextTooLongError as e:
        logger.info(f"Rejected share request: {e}")
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=e.message)

    logger.info(f"Created share code {entry.code}")
    return ShareCreateResponse(
        code=entry.code,
        expires_at=_to_utc(entry.expires_at),
        expires_in_seconds=int(entry.expires_at - entry.created_at)
    )


@stats_router.get(
    "/share",
    summary="Statistics about the code store.",
    response_model=CodeStoreStatsResponse
)
def get_share_stats(store: EphemeralCodeStore = Depends(get_code_store)):
    return CodeStoreStatsResponse(**store.get_stats())


@router.get(
    "/{code}",
    summary="Retrieve shared text by its code.",
    response_model=ShareRetrieveResponse,
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "Code not found or expired."},
    }
)
def retrieve_share(
    code: str = Path(..., min_length=1, max_length=64, description="Share code; case-insensitive."),
    burn: bool = Query(False, description="Delete the text after this read."),
    store: EphemeralCodeStore = Depends(get_code_store)
):
    """
    Returns the text stored under the code. Reads are repeatable until the
    code expires unless **burn** is set, in which case this read is the last.
    """
    try:
        entry = _resolve_entry(store, code, burn)
    except CodeNotFoundError as e:
        logger.debug(f"Lookup miss for code {e.code}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    return ShareRetrieveResponse(
        code=entry.code,
        text=entry.text,
        expires_at=_to_utc(entry.expires_at),
        burned=burn
    )

#
# End of share.py
#######################################################################################################################
