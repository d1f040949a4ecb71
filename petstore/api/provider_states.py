"""
Provider states for contract verification of the pet API.

Each state reseeds the repository with fixed data so a replayed interaction
always sees the same backing store. The state-change route lets a verifier
running in another process trigger the same fixtures over HTTP; it is only
mounted when contracts.provider_states_enabled is set.
"""

from typing import Any, Dict, Literal

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from petstore.contracts.errors import ProviderStateError
from petstore.contracts.states import ProviderStateRegistry
from petstore.database.models import Pet
from petstore.database.repository import PetRepository

STATE_PETS_EXIST = "Pets exist in the system"
STATE_PET_1_EXISTS = "Pet with ID 1 exists"
STATE_SERVICE_AVAILABLE = "Pet service is available"

BUDDY = Pet(id=1, name="Buddy", type="Dog", age=3, breed="Golden Retriever", description="Friendly and playful")
WHISKERS = Pet(id=2, name="Whiskers", type="Cat", age=5, breed="Siamese", description="Independent and curious")

SEEDED_PETS = [
    BUDDY,
    WHISKERS,
    Pet(id=3, name="Nemo", type="Fish", age=1, breed="Clownfish"),
    Pet(id=4, name="Kiwi", type="Bird", age=2, breed="Budgerigar", description="Chatty in the mornings"),
    Pet(id=5, name="Shadow", type="Cat", age=7),
]


def build_pet_states(repository: PetRepository) -> ProviderStateRegistry:
    registry = ProviderStateRegistry()

    @registry.register(STATE_PETS_EXIST)
    def pets_exist() -> None:
        repository.reset([BUDDY, WHISKERS], next_id=3)

    @registry.register(STATE_PET_1_EXISTS)
    def pet_1_exists() -> None:
        repository.reset([BUDDY], next_id=2)

    @registry.register(STATE_SERVICE_AVAILABLE)
    def service_available() -> None:
        # Five pets already stored, so the next generated id is 6.
        repository.reset(SEEDED_PETS, next_id=6)

    return registry


class ProviderStateChange(BaseModel):
    state: str
    params: Dict[str, Any] = Field(default_factory=dict)
    action: Literal["setup", "teardown"] = "setup"


def build_provider_state_router(registry: ProviderStateRegistry) -> APIRouter:
    router = APIRouter(tags=["Contract Testing"])

    def change_state(body: ProviderStateChange) -> Dict[str, Any]:
        try:
            registry.apply(body.state, body.params, action=body.action)
        except ProviderStateError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        return {"state": body.state, "action": body.action, "applied": True}

    router.add_api_route("/_pact/provider-states", change_state, methods=["POST"])
    return router
