"""
/api/pets routes.

Routes are declared in PET_ROUTES and bound to a PetService when the router
is built, so the whole HTTP surface is visible in one table.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from petstore.database.models import INT64_MAX, INT64_MIN, Pet
from petstore.services.pet_service import PetService


class PetBody(BaseModel):
    """Request body for create/update; id may be omitted or null."""

    id: Optional[int] = Field(default=None, ge=INT64_MIN, le=INT64_MAX, description="Requested id, ignored on update")
    name: str
    type: str
    age: int
    breed: Optional[str] = None
    description: Optional[str] = None

    def to_pet(self) -> Pet:
        return Pet(**self.model_dump(exclude={"id"}), id=self.id or 0)


class PetHandlers:
    def __init__(self, service: PetService):
        self.service = service

    def get_all_pets(self) -> List[Pet]:
        return self.service.get_all_pets()

    def get_pet_by_id(self, pet_id: int) -> Pet:
        pet = self.service.get_pet_by_id(pet_id)
        if pet is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Pet {pet_id} not found")
        return pet

    def create_pet(self, pet: PetBody) -> Pet:
        return self.service.create_pet(pet.to_pet())

    def update_pet(self, pet_id: int, pet: PetBody) -> Pet:
        updated = self.service.update_pet(pet_id, pet.to_pet())
        if updated is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Pet {pet_id} not found")
        return updated

    def delete_pet(self, pet_id: int) -> Response:
        if not self.service.delete_pet(pet_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Pet {pet_id} not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    handler: str
    status_code: int
    response_model: Any = None


PET_ROUTES = (
    Route("GET", "", "get_all_pets", status.HTTP_200_OK, List[Pet]),
    Route("GET", "/{pet_id}", "get_pet_by_id", status.HTTP_200_OK, Pet),
    Route("POST", "", "create_pet", status.HTTP_201_CREATED, Pet),
    Route("PUT", "/{pet_id}", "update_pet", status.HTTP_200_OK, Pet),
    Route("DELETE", "/{pet_id}", "delete_pet", status.HTTP_204_NO_CONTENT),
)


def build_pet_router(service: PetService) -> APIRouter:
    handlers = PetHandlers(service)
    router = APIRouter(prefix="/api/pets", tags=["Pets"])
    for route in PET_ROUTES:
        router.add_api_route(
            route.path,
            getattr(handlers, route.handler),
            methods=[route.method],
            status_code=route.status_code,
            response_model=route.response_model,
            response_model_exclude_none=True,
        )
    return router
