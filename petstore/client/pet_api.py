"""
Pet API HTTP Client.

Consumer-side client for the /api/pets resource. Contract tests run it
against the mock provider; applications point it at a real deployment.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from petstore.database.models import Pet

logger = logging.getLogger(__name__)


class PetApiClient:
    def __init__(self, base_url: Optional[str] = None, timeout_seconds: float = 10.0) -> None:
        self.base_url = (base_url or os.getenv("PET_API_URL", "")).rstrip("/")
        self.timeout_seconds = timeout_seconds
        if not self.base_url:
            raise ValueError("PET_API_URL is not configured.")

    def _url(self, suffix: str = "") -> str:
        return f"{self.base_url}/api/pets{suffix}"

    @staticmethod
    def _payload(pet: Pet) -> Dict[str, Any]:
        payload = pet.model_dump(exclude_none=True)
        if payload.get("id", 0) <= 0:
            payload.pop("id", None)
        return payload

    async def get_all_pets(self) -> List[Pet]:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.get(self._url())
            response.raise_for_status()
            return [Pet.model_validate(item) for item in response.json()]

    async def get_pet_by_id(self, pet_id: int) -> Optional[Pet]:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.get(self._url(f"/{pet_id}"))
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return Pet.model_validate(response.json())

    async def create_pet(self, pet: Pet) -> Pet:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.post(self._url(), json=self._payload(pet))
            response.raise_for_status()
            created = Pet.model_validate(response.json())
            logger.info("Created pet id=%s", created.id)
            return created

    async def update_pet(self, pet_id: int, pet: Pet) -> Optional[Pet]:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.put(self._url(f"/{pet_id}"), json=self._payload(pet))
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return Pet.model_validate(response.json())

    async def delete_pet(self, pet_id: int) -> bool:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.delete(self._url(f"/{pet_id}"))
            if response.status_code == 404:
                return False
            response.raise_for_status()
            return True
