from pydantic import BaseModel, ConfigDict
from typing import Any


class CacheEntry(BaseModel):
    # Entries are replaced, never edited
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str
    payload: Any
    inserted_at: float  # clock reading, seconds
