"""
In-memory pet store.

Volatile, process-local storage for the API. Contents live as long as the
store object (normally the lifetime of the FastAPI app that owns it). It is
NOT intended for durable storage.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from petstore.database.models import Pet
from petstore.database.repository import PetRepository

logger = logging.getLogger(__name__)


class InMemoryPetStore(PetRepository):
    """
    Ordered list of pets plus a monotonic id counter.

    A single re-entrant lock guards both the counter and the list, so every
    operation is atomic as observed by readers and `atomic()` blocks can call
    the other methods freely.
    """

    def __init__(self, pets: Iterable[Pet] = (), next_id: int = 1) -> None:
        self._lock = threading.RLock()
        self._pets: List[Pet] = list(pets)
        self._counter = next_id

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #
    def list(self) -> List[Pet]:
        with self._lock:
            return list(self._pets)

    def get(self, pet_id: int) -> Optional[Pet]:
        with self._lock:
            for pet in self._pets:
                if pet.id == pet_id:
                    return pet
            return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._pets)

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    def next_id(self) -> int:
        with self._lock:
            value = self._counter
            self._counter += 1
            return value

    def insert(self, pet: Pet) -> Pet:
        with self._lock:
            self._pets.append(pet)
        logger.debug("Inserted pet id=%s", pet.id)
        return pet

    def replace(self, pet_id: int, pet: Pet) -> Optional[Pet]:
        with self._lock:
            for index, existing in enumerate(self._pets):
                if existing.id == pet_id:
                    self._pets[index] = pet
                    logger.debug("Replaced pet id=%s at position %d", pet_id, index)
                    return pet
        return None

    def remove(self, pet_id: int) -> bool:
        with self._lock:
            for index, existing in enumerate(self._pets):
                if existing.id == pet_id:
                    del self._pets[index]
                    logger.debug("Removed pet id=%s", pet_id)
                    return True
        return False

    # ------------------------------------------------------------------ #
    # Coordination / fixtures
    # ------------------------------------------------------------------ #
    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            yield

    def reset(self, pets: Iterable[Pet] = (), next_id: int = 1) -> None:
        with self._lock:
            self._pets = list(pets)
            self._counter = next_id
        logger.debug("Store reset with %d pets, next id %d", len(self._pets), next_id)
