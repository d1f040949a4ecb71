"""
Contract artifact models.

The on-disk layout follows the Pact specification v3 JSON document so the
files stay readable by other contract tooling:

    {"consumer": {"name": ...}, "provider": {"name": ...},
     "interactions": [{"description", "providerStates", "request", "response"}],
     "metadata": {"pactSpecification": {"version": "3.0.0"}}}

Request and response bodies are optional; when a body is present its
matching rules live under "matchingRules" -> "body".
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

PACT_SPECIFICATION_VERSION = "3.0.0"


class Participant(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str


class ProviderState(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    params: Dict[str, Any] = Field(default_factory=dict)


class _HttpPart(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    headers: Optional[Dict[str, str]] = None
    body: Optional[Any] = None
    matching_rules: Dict[str, Dict[str, Any]] = Field(default_factory=dict, alias="matchingRules")

    @property
    def body_rules(self) -> Dict[str, Dict[str, Any]]:
        return self.matching_rules.get("body", {})

    @property
    def is_literal(self) -> bool:
        return not self.body_rules

    def _document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {}
        if self.headers:
            doc["headers"] = dict(self.headers)
        if self.body is not None:
            doc["body"] = self.body
        if self.body_rules:
            doc["matchingRules"] = {"body": dict(self.body_rules)}
        return doc


class InteractionRequest(_HttpPart):
    method: str
    path: str
    query: Optional[Dict[str, str]] = None

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {"method": self.method, "path": self.path}
        if self.query:
            doc["query"] = dict(self.query)
        doc.update(self._document())
        return doc


class InteractionResponse(_HttpPart):
    status: int

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {"status": self.status}
        doc.update(self._document())
        return doc


class Interaction(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    description: str
    provider_states: List[ProviderState] = Field(default_factory=list, alias="providerStates")
    request: InteractionRequest
    response: InteractionResponse

    @property
    def state_names(self) -> List[str]:
        return [state.name for state in self.provider_states]

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {"description": self.description}
        if self.provider_states:
            doc["providerStates"] = [
                {"name": s.name, "params": dict(s.params)} if s.params else {"name": s.name}
                for s in self.provider_states
            ]
        doc["request"] = self.request.to_document()
        doc["response"] = self.response.to_document()
        return doc


class Contract(BaseModel):
    model_config = ConfigDict(frozen=True)

    consumer: Participant
    provider: Participant
    interactions: List[Interaction] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(
        default_factory=lambda: {"pactSpecification": {"version": PACT_SPECIFICATION_VERSION}}
    )

    @property
    def file_name(self) -> str:
        return f"{self.consumer.name}-{self.provider.name}.json"

    def to_document(self) -> Dict[str, Any]:
        return {
            "consumer": {"name": self.consumer.name},
            "provider": {"name": self.provider.name},
            "interactions": [interaction.to_document() for interaction in self.interactions],
            "metadata": dict(self.metadata),
        }
