"""
Provider state registry.

Maps the state labels used by consumers ("Pet with ID 1 exists") to the
fixture routines that prepare the provider before an interaction is replayed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from petstore.contracts.errors import ProviderStateError

logger = logging.getLogger(__name__)

StateHandler = Callable[..., None]


class ProviderStateRegistry:
    def __init__(self) -> None:
        self._setup: Dict[str, StateHandler] = {}
        self._teardown: Dict[str, StateHandler] = {}

    def register(self, name: str, action: str = "setup") -> Callable[[StateHandler], StateHandler]:
        def decorator(handler: StateHandler) -> StateHandler:
            self.add(name, handler, action=action)
            return handler

        return decorator

    def add(self, name: str, handler: StateHandler, action: str = "setup") -> None:
        if action == "setup":
            self._setup[name] = handler
        elif action == "teardown":
            self._teardown[name] = handler
        else:
            raise ValueError(f"Unknown provider state action '{action}'")

    @property
    def names(self) -> List[str]:
        return sorted(self._setup)

    def __contains__(self, name: object) -> bool:
        return name in self._setup

    def apply(self, name: str, params: Optional[Dict[str, Any]] = None, action: str = "setup") -> None:
        if action == "teardown":
            handler = self._teardown.get(name)
            if handler is not None:
                handler(**(params or {}))
            return

        handler = self._setup.get(name)
        if handler is None:
            raise ProviderStateError(f"No provider state handler registered for '{name}'")
        logger.debug("Applying provider state '%s'", name)
        handler(**(params or {}))
