"""
Consumer-driven contract tooling.

- builder:        consumers describe interactions (ContractBuilder, JsonBody, each_like)
- mock_provider:  consumers test their HTTP client against those interactions
- storage:        contracts are persisted as Pact v3 JSON documents
- broker:         contracts are fetched from, and results published to, a Pact Broker
- verifier:       providers replay the persisted interactions against a live server
- states:         providers register fixture routines per provider state label
"""

from .broker import BrokerContract, PactBrokerClient
from .builder import ContractBuilder, InteractionBuilder
from .errors import (
    BrokerError,
    ContractError,
    ContractFileError,
    MockVerificationError,
    ProviderStateError,
    ProviderUnreachableError,
)
from .matchers import JsonBody, Mismatch, each_like, match_body
from .mock_provider import MockProvider
from .models import Contract, Interaction, ProviderState
from .states import ProviderStateRegistry
from .storage import find_contracts, load_contract, write_contract
from .verifier import InteractionResult, InteractionStatus, ProviderVerifier, VerificationResult

__all__ = [
    # builder
    "ContractBuilder", "InteractionBuilder", "JsonBody", "each_like",
    # models
    "Contract", "Interaction", "ProviderState",
    # matching
    "Mismatch", "match_body",
    # consumer side
    "MockProvider",
    # persistence
    "load_contract", "write_contract", "find_contracts",
    "PactBrokerClient", "BrokerContract",
    # provider side
    "ProviderStateRegistry", "ProviderVerifier", "VerificationResult",
    "InteractionResult", "InteractionStatus",
    # errors
    "BrokerError", "ContractError", "ContractFileError", "MockVerificationError",
    "ProviderStateError", "ProviderUnreachableError",
]
