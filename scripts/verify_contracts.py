#!/usr/bin/env python3
"""
Verify a running pet API against persisted contracts.

Start the API with the provider-state endpoint enabled (in another terminal):
  PACT_PROVIDER_STATES_ENABLED=true uvicorn petstore.api.main:app --host 127.0.0.1 --port 8080

Then run:
  python scripts/verify_contracts.py
  python scripts/verify_contracts.py --base-url http://127.0.0.1:8080 --pact-file pacts/pet_consumer-pet_provider.json
  PACT_BROKER_USERNAME=pact PACT_BROKER_PASSWORD=pact python scripts/verify_contracts.py --broker-url http://localhost:9292 --publish-results --provider-version 1.0.0

Exit code is 0 when every interaction passed, 1 on any failure and 2 when the
provider or broker could not be reached or no contract was found.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from petstore.contracts import ContractError, PactBrokerClient, ProviderUnreachableError, ProviderVerifier
from petstore.utils.config_loader import load_settings


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main() -> int:
    parser = argparse.ArgumentParser(description="Verify the pet API provider against contract files")
    parser.add_argument("--config", type=Path, default=None, help="Path to petstore.yml")
    parser.add_argument("--base-url", default=None, help="Provider base URL (default: server host/port from config)")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--pact-dir", type=Path, default=None, help="Directory of contract files")
    source.add_argument("--pact-file", type=Path, default=None, help="Single contract file")
    source.add_argument("--broker-url", default=None, help="Pact Broker to fetch the latest contracts from")
    parser.add_argument("--provider", default=None, help="Provider name to verify (default from config)")
    parser.add_argument(
        "--state-change-url",
        default=None,
        help="Provider state endpoint (default: <base-url>/_pact/provider-states)",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    parser.add_argument(
        "--publish-results",
        action="store_true",
        default=None,
        help="Publish verification results to the broker (default from config)",
    )
    parser.add_argument("--provider-version", default=None, help="Provider version reported to the broker")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    setup_logging(args.verbose)
    settings = load_settings(args.config)
    broker_settings = settings.verifier.broker

    base_url = args.base_url or f"http://{settings.server.host}:{settings.server.port}"
    verifier = ProviderVerifier(
        provider=args.provider or settings.contracts.provider,
        base_url=base_url,
        state_change_url=args.state_change_url
        or settings.verifier.state_change_url
        or f"{base_url.rstrip('/')}/_pact/provider-states",
        timeout=args.timeout or settings.verifier.timeout_seconds,
    )

    broker_url = args.broker_url
    if broker_url is None and not (args.pact_dir or args.pact_file):
        broker_url = broker_settings.url

    try:
        if broker_url:
            broker = PactBrokerClient(
                broker_url,
                username=broker_settings.username,
                password=broker_settings.password,
                timeout_seconds=verifier.timeout,
            )
            publish = broker_settings.publish_results if args.publish_results is None else args.publish_results
            results = verifier.verify_broker(
                broker,
                publish=publish,
                provider_version=args.provider_version or broker_settings.provider_version,
            )
        elif args.pact_file:
            results = [verifier.verify_file(args.pact_file)]
        else:
            results = verifier.verify_directory(args.pact_dir or settings.contracts.pact_dir)
    except ProviderUnreachableError as e:
        print(f"FAIL: {e}")
        print("   → Start the API first: uvicorn petstore.api.main:app --host 127.0.0.1 --port 8080")
        return 2
    except ContractError as e:
        print(f"FAIL: {e}")
        return 2

    if not results:
        print("FAIL: no contracts to verify")
        return 2

    for result in results:
        print(result.summary())
        print()

    return 0 if all(r.passed for r in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
