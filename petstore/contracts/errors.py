from __future__ import annotations

from typing import List, Optional


class ContractError(Exception):
    """Base class for contract tooling failures."""


class ContractFileError(ContractError):
    """A contract artifact could not be read, parsed or validated."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class ProviderStateError(ContractError):
    """Provider state setup failed or the state is unknown."""


class ProviderUnreachableError(ContractError):
    """The provider under verification did not accept connections."""

    def __init__(self, message: str, *, base_url: str) -> None:
        super().__init__(message)
        self.base_url = base_url


class MockVerificationError(ContractError):
    """The consumer did not exercise the mock provider as described."""

    def __init__(
        self,
        message: str,
        *,
        missing: Optional[List[str]] = None,
        unexpected: Optional[List[str]] = None,
    ) -> None:
        super().__init__(message)
        self.missing = missing or []
        self.unexpected = unexpected or []


class BrokerError(ContractError):
    """The Pact Broker rejected a request or could not be reached."""

    def __init__(self, message: str, *, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
