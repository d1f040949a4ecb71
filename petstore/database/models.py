"""
Pet value record shared by the store, the service, the API and the client.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class Pet(BaseModel):
    """
    Immutable pet record.

    `id` is 0 when the caller wants one assigned; the store never keeps a
    pet with a non-positive id unless a caller explicitly asked for it.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(default=0, ge=INT64_MIN, le=INT64_MAX, description="Identifier, 0 means 'assign one'")
    name: str
    type: str
    age: int
    breed: Optional[str] = None
    description: Optional[str] = None

    def with_id(self, pet_id: int) -> "Pet":
        return self.model_copy(update={"id": pet_id})
