"""
Pact Broker HTTP client.

Fetches the latest contract of every consumer of a provider and publishes
verification results back:

    broker = PactBrokerClient("http://localhost:9292", username="pact", password="pact")
    for fetched in broker.fetch_contracts("pet_provider"):
        result = verifier.verify_contract(fetched.contract)
        broker.publish_result(fetched, result, provider_version="1.0.0")

Only the HAL links the broker returns are followed, so the client works with
any broker that serves the standard pacts-for-provider resource.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from petstore.contracts.errors import BrokerError
from petstore.contracts.models import Contract

if TYPE_CHECKING:
    from petstore.contracts.verifier import VerificationResult

logger = logging.getLogger(__name__)

PUBLISH_RELATION = "pb:publish-verification-results"
_HAL_HEADERS = {"Accept": "application/hal+json, application/json"}


@dataclass
class BrokerContract:
    """A contract fetched from the broker plus where to report its verification."""

    contract: Contract
    url: str
    publish_url: Optional[str] = None


class PactBrokerClient:
    def __init__(
        self,
        base_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth = (username, password or "") if username else None
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            auth=self.auth,
            headers=_HAL_HEADERS,
            timeout=self.timeout_seconds,
            transport=self._transport,
        )

    def _request(self, client: httpx.Client, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise BrokerError(f"Pact Broker request {method} {url} failed: {e}", url=url) from e
        if response.status_code == 401:
            raise BrokerError(f"Pact Broker rejected the credentials for {url}", url=url, status_code=401)
        return response

    def fetch_contracts(self, provider: str) -> List[BrokerContract]:
        url = f"{self.base_url}/pacts/provider/{quote(provider, safe='')}/latest"
        with self._client() as client:
            response = self._request(client, "GET", url)
            if response.status_code == 404:
                logger.info("Pact Broker has no contracts for provider '%s'", provider)
                return []
            _raise_for_status(response, url)

            links = response.json().get("_links", {})
            entries = links.get("pb:pacts") or links.get("pacts") or []
            fetched = [self._fetch_contract(client, entry["href"]) for entry in entries]

        logger.info("Fetched %d contract(s) for '%s' from %s", len(fetched), provider, self.base_url)
        return fetched

    def _fetch_contract(self, client: httpx.Client, url: str) -> BrokerContract:
        response = self._request(client, "GET", url)
        _raise_for_status(response, url)
        document = response.json()
        try:
            contract = Contract.model_validate(document)
        except ValidationError as e:
            raise BrokerError(f"Contract at {url} has an invalid layout: {e}", url=url) from e

        publish = document.get("_links", {}).get(PUBLISH_RELATION, {})
        return BrokerContract(contract=contract, url=url, publish_url=publish.get("href"))

    def publish_result(
        self,
        fetched: BrokerContract,
        result: "VerificationResult",
        provider_version: str,
    ) -> bool:
        """
        Report one contract's verification outcome to the broker.

        Returns False when the broker offered no publish link for the contract.
        """
        if not fetched.publish_url:
            logger.warning("No %s link for %s; result not published", PUBLISH_RELATION, fetched.url)
            return False

        payload: Dict[str, Any] = {
            "success": result.passed,
            "providerApplicationVersion": provider_version,
            "verifiedBy": {"implementation": "petstore-contracts", "version": "1.0.0"},
            "testResults": [
                {
                    "interactionDescription": r.description,
                    "success": r.passed,
                    "mismatches": [m.to_dict() for m in r.mismatches],
                }
                for r in result.results
            ],
        }
        with self._client() as client:
            response = self._request(client, "POST", fetched.publish_url, json=payload)
        _raise_for_status(response, fetched.publish_url)
        logger.info(
            "Published %s verification of %s-%s (provider version %s)",
            "successful" if result.passed else "failed",
            result.consumer,
            result.provider,
            provider_version,
        )
        return True


def _raise_for_status(response: httpx.Response, url: str) -> None:
    if response.status_code >= 400:
        raise BrokerError(
            f"Pact Broker returned {response.status_code} for {url}: {response.text[:200]}",
            url=url,
            status_code=response.status_code,
        )
