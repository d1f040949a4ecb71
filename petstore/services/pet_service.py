"""
Pet Service

CRUD operations over a PetRepository, including the id-assignment policy
applied on creation and the id-forcing policy applied on update.
"""

import logging
from typing import List, Optional

from petstore.database.models import Pet
from petstore.database.repository import PetRepository

logger = logging.getLogger(__name__)


class PetService:
    def __init__(self, repository: PetRepository):
        self.repository = repository

    def get_all_pets(self) -> List[Pet]:
        return self.repository.list()

    def get_pet_by_id(self, pet_id: int) -> Optional[Pet]:
        return self.repository.get(pet_id)

    def create_pet(self, candidate: Pet) -> Pet:
        """
        Store a new pet.

        A caller-supplied id is kept only when it is positive and not already
        in use; otherwise a fresh id comes from the repository counter.
        Counter values already taken by caller-supplied ids are skipped.
        """
        with self.repository.atomic():
            if candidate.id <= 0 or self.repository.get(candidate.id) is not None:
                new_id = self.repository.next_id()
                while self.repository.get(new_id) is not None:
                    new_id = self.repository.next_id()
                if candidate.id > 0:
                    logger.info(f"Pet id {candidate.id} already in use, assigned {new_id}")
            else:
                new_id = candidate.id
            return self.repository.insert(candidate.with_id(new_id))

    def update_pet(self, pet_id: int, pet: Pet) -> Optional[Pet]:
        # The path id always wins over whatever id the body carries.
        updated = self.repository.replace(pet_id, pet.with_id(pet_id))
        if updated is None:
            logger.info("Update skipped, pet %s not found", pet_id)
        return updated

    def delete_pet(self, pet_id: int) -> bool:
        return self.repository.remove(pet_id)
