"""
Consumer-side assembly of contract interactions.

    pact = ContractBuilder("pet_consumer", "pet_provider")
    interaction = (
        pact.given("Pet with ID 1 exists")
        .upon_receiving("GET /api/pets/1 returns specific pet")
        .with_request("GET", "/api/pets/1")
        .will_respond_with(200, body=JsonBody().string_type("name", "Buddy"))
    )
    contract = pact.build()

Each call to will_respond_with() freezes one Interaction and records it on
the builder; build() snapshots every recorded interaction into a Contract.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from petstore.contracts.matchers import to_body
from petstore.contracts.models import (
    Contract,
    Interaction,
    InteractionRequest,
    InteractionResponse,
    Participant,
    ProviderState,
)


class InteractionBuilder:
    def __init__(self, contract: "ContractBuilder") -> None:
        self._contract = contract
        self._states: List[ProviderState] = []
        self._description: Optional[str] = None
        self._request: Optional[InteractionRequest] = None

    def given(self, state: str, **params: Any) -> "InteractionBuilder":
        self._states.append(ProviderState(name=state, params=params))
        return self

    def upon_receiving(self, description: str) -> "InteractionBuilder":
        self._description = description
        return self

    def with_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, str]] = None,
    ) -> "InteractionBuilder":
        if not path.startswith("/"):
            raise ValueError(f"Request path must start with '/': {path!r}")
        example, rules = to_body(body)
        self._request = InteractionRequest(
            method=method.upper(),
            path=path,
            query=query,
            headers=headers,
            body=example,
            matching_rules={"body": rules} if rules else {},
        )
        return self

    def will_respond_with(
        self,
        status: int,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Interaction:
        if not self._description:
            raise ValueError("upon_receiving() must be called before will_respond_with()")
        if self._request is None:
            raise ValueError("with_request() must be called before will_respond_with()")
        example, rules = to_body(body)
        interaction = Interaction(
            description=self._description,
            provider_states=list(self._states),
            request=self._request,
            response=InteractionResponse(
                status=status,
                headers=headers,
                body=example,
                matching_rules={"body": rules} if rules else {},
            ),
        )
        self._contract._add(interaction)
        return interaction


class ContractBuilder:
    def __init__(self, consumer: str, provider: str) -> None:
        self.consumer = consumer
        self.provider = provider
        self._interactions: List[Interaction] = []

    def given(self, state: str, **params: Any) -> InteractionBuilder:
        return InteractionBuilder(self).given(state, **params)

    def upon_receiving(self, description: str) -> InteractionBuilder:
        return InteractionBuilder(self).upon_receiving(description)

    @property
    def interactions(self) -> Tuple[Interaction, ...]:
        return tuple(self._interactions)

    def _add(self, interaction: Interaction) -> None:
        if any(i.description == interaction.description for i in self._interactions):
            raise ValueError(f"Duplicate interaction description: {interaction.description!r}")
        self._interactions.append(interaction)

    def build(self) -> Contract:
        return Contract(
            consumer=Participant(name=self.consumer),
            provider=Participant(name=self.provider),
            interactions=list(self._interactions),
        )
