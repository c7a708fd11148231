# share_schemas.py
#
# Imports
from datetime import datetime
#
# Third-party Libraries
from pydantic import BaseModel, Field
#
###########################################################################################################################
#
# Functions:

# --- Pydantic Schemas for Request and Response ---

class ShareCreateRequest(BaseModel):
    """
    Text to share. Whitespace-only text and text over the configured length
    cap are rejected by the store, so the limits follow the server config.
    """
    text: str = Field(..., description="Text to share. Surrounding whitespace is trimmed.")


class ShareCreateResponse(BaseModel):
    code: str = Field(..., description="Short code that retrieves the text until it expires.")
    expires_at: datetime = Field(..., description="UTC instant after which the code stops working.")
    expires_in_seconds: int = Field(..., ge=0, description="Seconds until expiry at the time of the response.")


class ShareRetrieveResponse(BaseModel):
    code: str
    text: str
    expires_at: datetime
    burned: bool = Field(False, description="True if the entry was deleted by this read.")


class CodeStoreStatsResponse(BaseModel):
    size: int = Field(..., description="Entries physically held, including expired ones not yet swept.")
    live: int
    puts: int
    hits: int
    misses: int
    evicted: int
    fallbacks: int = Field(..., description="Times code generation ran out of attempts.")
    ttl_seconds: float
    code_space: int

#
# End of share_schemas.py
###########################################################################################################################
