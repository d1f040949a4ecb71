"""
FastAPI application - Main entry point
"""

import logging
from typing import Optional

from fastapi import FastAPI

from petstore.api.pets_router import build_pet_router
from petstore.api.provider_states import build_pet_states, build_provider_state_router
from petstore.database.memory import InMemoryPetStore
from petstore.database.repository import PetRepository
from petstore.error_handler import register_exception_handlers
from petstore.services.pet_service import PetService
from petstore.utils.config_loader import Settings, load_settings

logger = logging.getLogger(__name__)


def create_app(
    repository: Optional[PetRepository] = None,
    settings: Optional[Settings] = None,
    provider_states_enabled: Optional[bool] = None,
) -> FastAPI:
    """
    Build the pet API around an explicit repository.

    The repository defaults to a fresh in-memory store; tests pass their own
    (or a fixture-seeding double) to control the backing data.
    """
    settings = settings or load_settings()
    if repository is None:
        repository = InMemoryPetStore()
    service = PetService(repository)

    app = FastAPI(
        title="Pet API",
        description="In-memory pet resource API with consumer-driven contract tests",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.repository = repository
    app.state.pet_service = service

    register_exception_handlers(app)
    app.include_router(build_pet_router(service))

    if provider_states_enabled is None:
        provider_states_enabled = settings.contracts.provider_states_enabled
    if provider_states_enabled:
        app.include_router(build_provider_state_router(build_pet_states(repository)))
        logger.warning("Provider state endpoint enabled; do not expose this instance publicly")

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "healthy", "pets": len(repository.list())}

    return app


settings = load_settings()
logging.basicConfig(level=settings.logging.level)

app = create_app(settings=settings)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_level=settings.logging.level.lower())
