"""
Consumer-side mock provider.

Serves the example responses of a set of interactions on a real local port so
a consumer's HTTP client can be exercised against them:

    with MockProvider([interaction]) as mock:
        pets = await PetApiClient(mock.url).get_all_pets()

Requests are matched on method, path, query, expected headers and body (with
the interaction's request matching rules). Anything unmatched gets a 500 with
the mismatch details. Leaving the block without an exception raises
MockVerificationError when an interaction was never requested or an
unexpected request arrived.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from petstore.contracts.errors import MockVerificationError
from petstore.contracts.matchers import Mismatch, match_body, match_headers
from petstore.contracts.models import Interaction, InteractionRequest, InteractionResponse
from petstore.utils.server_thread import ServerThread

logger = logging.getLogger(__name__)

_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def match_request(
    expected: InteractionRequest,
    method: str,
    path: str,
    query: Mapping[str, str],
    headers: Mapping[str, str],
    body: Any,
) -> List[Mismatch]:
    if method.upper() != expected.method:
        return [Mismatch("method", "value", f"Expected method {expected.method} but received {method}", expected.method, method)]
    if path != expected.path:
        return [Mismatch("path", "value", f"Expected path {expected.path} but received {path}", expected.path, path)]

    mismatches: List[Mismatch] = []
    if dict(query) != dict(expected.query or {}):
        mismatches.append(Mismatch("query", "value", "Query parameters differ", expected.query or {}, dict(query)))
    mismatches.extend(match_headers(expected.headers, headers))
    if expected.body is not None:
        if body is None:
            mismatches.append(Mismatch("$", "body", "Expected a request body but none was sent", expected.body, None))
        else:
            mismatches.extend(match_body(expected.body, body, expected.body_rules, allow_unexpected_keys=False))
    return mismatches


class MockProvider:
    def __init__(self, interactions: Iterable[Interaction], host: str = "127.0.0.1", port: int = 0) -> None:
        self.interactions: List[Interaction] = list(interactions)
        self._received: Dict[str, int] = {i.description: 0 for i in self.interactions}
        self._unexpected: List[str] = []
        self._lock = threading.Lock()
        self._server = ServerThread(self._build_app(), host=host, port=port)

    @property
    def url(self) -> str:
        return self._server.url

    def _build_app(self) -> FastAPI:
        app = FastAPI(title="Contract Mock Provider", docs_url=None, redoc_url=None, openapi_url=None)

        @app.api_route("/{path:path}", methods=_METHODS)
        async def dispatch(request: Request, path: str) -> Response:
            return await self._handle(request)

        return app

    async def _handle(self, request: Request) -> Response:
        raw = await request.body()
        body: Optional[Any] = None
        if raw:
            try:
                body = json.loads(raw)
            except ValueError:
                body = raw.decode("utf-8", errors="replace")

        method = request.method
        path = request.url.path
        attempts = []
        for interaction in self.interactions:
            mismatches = match_request(
                interaction.request, method, path, request.query_params, request.headers, body
            )
            if not mismatches:
                with self._lock:
                    self._received[interaction.description] += 1
                logger.debug("Mock matched '%s'", interaction.description)
                return self._respond(interaction.response)
            if mismatches[0].path not in ("method", "path"):
                attempts.append(
                    {"interaction": interaction.description, "mismatches": [m.to_dict() for m in mismatches]}
                )

        with self._lock:
            self._unexpected.append(f"{method} {path}")
        logger.warning("Mock provider received unexpected request %s %s", method, path)
        return JSONResponse(
            status_code=500,
            content={"error": "No interaction matched the request", "method": method, "path": path, "attempts": attempts},
        )

    @staticmethod
    def _respond(expected: InteractionResponse) -> Response:
        headers = dict(expected.headers or {})
        if expected.body is None:
            return Response(status_code=expected.status, headers=headers)
        headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}
        return JSONResponse(content=expected.body, status_code=expected.status, headers=headers)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def start(self) -> "MockProvider":
        self._server.start()
        logger.debug("Mock provider with %d interaction(s) on %s", len(self.interactions), self.url)
        return self

    def stop(self) -> None:
        self._server.stop()

    def verify(self) -> None:
        with self._lock:
            missing = [name for name, count in self._received.items() if count == 0]
            unexpected = list(self._unexpected)
        if missing or unexpected:
            parts = []
            if missing:
                parts.append("missing requests: " + ", ".join(missing))
            if unexpected:
                parts.append("unexpected requests: " + ", ".join(unexpected))
            raise MockVerificationError("Mock provider verification failed; " + "; ".join(parts), missing=missing, unexpected=unexpected)

    def __enter__(self) -> "MockProvider":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
        if exc_type is None:
            self.verify()
