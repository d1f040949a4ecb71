"""
Provider-side contract verification.

For every interaction of a contract the verifier
1. applies the interaction's provider states (in-process registry or a
   provider-state-change URL),
2. replays the request against the running provider,
3. checks status, expected headers and body against the interaction,
4. tears the applied states down again in reverse order.

Each interaction walks pending -> state_applied -> requested -> passed/failed
independently; a failure never stops the remaining interactions. A provider
that refuses connections aborts the run with ProviderUnreachableError; any
other transport fault only fails the interaction it happened in.
"""

from __future__ import annotations

import difflib
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx

from petstore.contracts.broker import PactBrokerClient
from petstore.contracts.errors import ContractError, ProviderStateError, ProviderUnreachableError
from petstore.contracts.matchers import Mismatch, match_body, match_headers
from petstore.contracts.models import Contract, Interaction, InteractionResponse, ProviderState
from petstore.contracts.states import ProviderStateRegistry
from petstore.contracts.storage import find_contracts, load_contract

logger = logging.getLogger(__name__)


class InteractionStatus(str, Enum):
    PENDING = "pending"
    STATE_APPLIED = "state_applied"
    REQUESTED = "requested"
    PASSED = "passed"
    FAILED = "failed"


_TRANSITIONS = {
    InteractionStatus.PENDING: {InteractionStatus.STATE_APPLIED, InteractionStatus.FAILED},
    InteractionStatus.STATE_APPLIED: {InteractionStatus.REQUESTED, InteractionStatus.FAILED},
    InteractionStatus.REQUESTED: {InteractionStatus.PASSED, InteractionStatus.FAILED},
    InteractionStatus.PASSED: set(),
    InteractionStatus.FAILED: set(),
}


@dataclass
class InteractionResult:
    description: str
    provider_states: List[str]
    status: InteractionStatus = InteractionStatus.PENDING
    history: List[InteractionStatus] = field(default_factory=lambda: [InteractionStatus.PENDING])
    mismatches: List[Mismatch] = field(default_factory=list)
    diff: str = ""
    error: Optional[str] = None

    def advance(self, status: InteractionStatus) -> None:
        if status not in _TRANSITIONS[self.status]:
            raise ContractError(f"Illegal transition {self.status.value} -> {status.value} for '{self.description}'")
        self.status = status
        self.history.append(status)

    def fail(self, error: Optional[str] = None) -> None:
        self.error = error
        self.advance(InteractionStatus.FAILED)

    @property
    def passed(self) -> bool:
        return self.status == InteractionStatus.PASSED


@dataclass
class VerificationResult:
    consumer: str
    provider: str
    results: List[InteractionResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> List[InteractionResult]:
        return [r for r in self.results if not r.passed]

    def summary(self) -> str:
        lines = [f"Verifying a contract between {self.consumer} and {self.provider}"]
        for result in self.results:
            states = ", ".join(result.provider_states) or "no provider state"
            lines.append(f"  {result.description} (given {states}) ... {'OK' if result.passed else 'FAILED'}")
            if result.error:
                lines.append(f"      {result.error}")
            for mismatch in result.mismatches:
                lines.append(f"      {mismatch.path}: {mismatch.message}")
        passed = sum(1 for r in self.results if r.passed)
        lines.append(f"{passed}/{len(self.results)} interaction(s) passed")
        return "\n".join(lines)


def body_diff(expected: Any, actual: Any) -> str:
    def _dump(value: Any) -> List[str]:
        return json.dumps(value, indent=2, sort_keys=True).splitlines()

    return "\n".join(difflib.unified_diff(_dump(expected), _dump(actual), "expected", "actual", lineterm=""))


class ProviderVerifier:
    def __init__(
        self,
        provider: str,
        base_url: str,
        state_registry: Optional[ProviderStateRegistry] = None,
        state_change_url: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self.state_registry = state_registry
        self.state_change_url = state_change_url
        self.timeout = timeout
        self._transport = transport

    # ------------------------------------------------------------------ #
    # Entry points
    # ------------------------------------------------------------------ #
    def verify_contract(self, contract: Contract) -> VerificationResult:
        if contract.provider.name != self.provider:
            raise ContractError(
                f"Contract is for provider '{contract.provider.name}', not '{self.provider}'"
            )

        result = VerificationResult(consumer=contract.consumer.name, provider=self.provider)
        with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
            for interaction in contract.interactions:
                result.results.append(self._verify_interaction(client, interaction))

        self._report(result)
        return result

    def verify_file(self, path: Union[str, Path]) -> VerificationResult:
        return self.verify_contract(load_contract(path))

    def verify_directory(self, pact_dir: Union[str, Path]) -> List[VerificationResult]:
        contracts = find_contracts(pact_dir, self.provider)
        if not contracts:
            logger.warning("No contracts for provider '%s' found in %s", self.provider, pact_dir)
        return [self.verify_contract(contract) for contract in contracts]

    def verify_broker(
        self,
        broker: PactBrokerClient,
        publish: bool = False,
        provider_version: Optional[str] = None,
    ) -> List[VerificationResult]:
        """Verify the latest contracts the broker holds for this provider, optionally publishing each outcome."""
        if publish and not provider_version:
            raise ContractError("A provider version is required to publish verification results")

        fetched = broker.fetch_contracts(self.provider)
        if not fetched:
            logger.warning("No contracts for provider '%s' on %s", self.provider, broker.base_url)

        results = []
        for item in fetched:
            result = self.verify_contract(item.contract)
            if publish:
                broker.publish_result(item, result, provider_version)
            results.append(result)
        return results

    # ------------------------------------------------------------------ #
    # Per interaction
    # ------------------------------------------------------------------ #
    def _verify_interaction(self, client: httpx.Client, interaction: Interaction) -> InteractionResult:
        result = InteractionResult(description=interaction.description, provider_states=interaction.state_names)
        applied: List[ProviderState] = []
        try:
            self._run_interaction(client, interaction, result, applied)
        finally:
            self._teardown_states(client, applied)
        return result

    def _run_interaction(
        self,
        client: httpx.Client,
        interaction: Interaction,
        result: InteractionResult,
        applied: List[ProviderState],
    ) -> None:
        try:
            self._apply_states(client, interaction, applied)
        except ProviderUnreachableError:
            raise
        except Exception as e:
            logger.error("Provider state setup failed for '%s': %s", interaction.description, e)
            result.fail(f"Provider state setup failed: {e}")
            return
        result.advance(InteractionStatus.STATE_APPLIED)

        request = interaction.request
        try:
            response = client.request(
                request.method,
                request.path,
                params=request.query,
                headers=request.headers,
                json=request.body,
            )
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            raise ProviderUnreachableError(f"Cannot reach provider at {self.base_url}: {e}", base_url=self.base_url) from e
        except httpx.TimeoutException as e:
            result.fail(f"Request timed out after {self.timeout}s: {e}")
            return
        except httpx.TransportError as e:
            logger.error("Transport error replaying '%s': %s", interaction.description, e)
            result.fail(f"Transport error ({type(e).__name__}): {e}")
            return
        result.advance(InteractionStatus.REQUESTED)

        result.mismatches = self._compare_response(interaction.response, response)
        if result.mismatches:
            if interaction.response.body is not None:
                result.diff = body_diff(interaction.response.body, _json_or_text(response))
            result.fail()
        else:
            result.advance(InteractionStatus.PASSED)

    def _apply_states(self, client: httpx.Client, interaction: Interaction, applied: List[ProviderState]) -> None:
        for state in interaction.provider_states:
            if self.state_registry is not None and state.name in self.state_registry:
                self.state_registry.apply(state.name, state.params)
            elif self.state_change_url:
                self._post_state_change(client, state.name, state.params)
            else:
                raise ProviderStateError(f"No provider state handler registered for '{state.name}'")
            applied.append(state)

    def _teardown_states(self, client: httpx.Client, applied: List[ProviderState]) -> None:
        """Undo applied states in reverse order; a failed teardown never changes the result."""
        for state in reversed(applied):
            try:
                if self.state_registry is not None and state.name in self.state_registry:
                    self.state_registry.apply(state.name, state.params, action="teardown")
                elif self.state_change_url:
                    self._post_state_change(client, state.name, state.params, action="teardown")
            except Exception as e:
                logger.warning("Provider state teardown failed for '%s': %s", state.name, e)

    def _post_state_change(self, client: httpx.Client, name: str, params: Dict[str, Any], action: str = "setup") -> None:
        try:
            response = client.post(self.state_change_url, json={"state": name, "params": params, "action": action})
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            raise ProviderUnreachableError(
                f"Cannot reach provider state endpoint {self.state_change_url}: {e}", base_url=self.base_url
            ) from e
        if response.status_code >= 300:
            raise ProviderStateError(
                f"State change for '{name}' returned {response.status_code}: {response.text[:200]}"
            )

    def _compare_response(self, expected: InteractionResponse, response: httpx.Response) -> List[Mismatch]:
        mismatches: List[Mismatch] = []
        if response.status_code != expected.status:
            mismatches.append(
                Mismatch(
                    "status",
                    "status",
                    f"Expected status {expected.status} but received {response.status_code}",
                    expected.status,
                    response.status_code,
                )
            )
        mismatches.extend(match_headers(expected.headers, response.headers))

        if expected.body is not None:
            if not response.content:
                mismatches.append(Mismatch("$", "body", "Expected a response body but none was returned", expected.body, None))
                return mismatches
            try:
                actual = response.json()
            except ValueError:
                mismatches.append(
                    Mismatch("$", "body", "Response body is not valid JSON", expected.body, response.text[:200])
                )
                return mismatches
            mismatches.extend(
                match_body(expected.body, actual, expected.body_rules, allow_unexpected_keys=not expected.is_literal)
            )
        return mismatches

    def _report(self, result: VerificationResult) -> None:
        if result.passed:
            logger.info(result.summary())
            return
        logger.error(result.summary())
        for failure in result.failures:
            if failure.diff:
                logger.error("Body diff for '%s':\n%s", failure.description, failure.diff)


def _json_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
