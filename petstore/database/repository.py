"""
Storage capability used by PetService and by provider-state fixtures.

Both the in-memory store and test doubles implement this interface, so the
service never depends on a concrete store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ContextManager, Iterable, List, Optional

from petstore.database.models import Pet


class PetRepository(ABC):
    """Every pet store must implement this interface."""

    # -- Reads --

    @abstractmethod
    def list(self) -> List[Pet]:
        """Return a snapshot of all pets in insertion order."""

    @abstractmethod
    def get(self, pet_id: int) -> Optional[Pet]:
        """Fetch a pet by id, None when absent."""

    # -- Mutations --

    @abstractmethod
    def next_id(self) -> int:
        """Return the current counter value and advance it."""

    @abstractmethod
    def insert(self, pet: Pet) -> Pet:
        """Append a pet to the collection."""

    @abstractmethod
    def replace(self, pet_id: int, pet: Pet) -> Optional[Pet]:
        """Overwrite the pet stored under pet_id in place, None when absent."""

    @abstractmethod
    def remove(self, pet_id: int) -> bool:
        """Remove the pet stored under pet_id, reporting whether one was removed."""

    # -- Coordination / fixtures --

    @abstractmethod
    def atomic(self) -> ContextManager[None]:
        """Hold the store's lock for a check-then-act sequence."""

    @abstractmethod
    def reset(self, pets: Iterable[Pet] = (), next_id: int = 1) -> None:
        """Replace the whole collection and the id counter."""
