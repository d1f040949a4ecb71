import base64
import json

import httpx
import pytest

from petstore.contracts import (
    BrokerError,
    ContractBuilder,
    ContractError,
    JsonBody,
    PactBrokerClient,
    ProviderStateRegistry,
    ProviderVerifier,
)

BROKER = "http://broker.test"
PACT_URL = f"{BROKER}/pacts/provider/pet_provider/consumer/pet_consumer/version/1.0.0"
PUBLISH_URL = f"{PACT_URL}/verification-results"


def _pact_document(with_publish_link=True):
    pact = ContractBuilder("pet_consumer", "pet_provider")
    (
        pact.given("Pet with ID 1 exists")
        .upon_receiving("get pet 1")
        .with_request("GET", "/api/pets/1")
        .will_respond_with(200, body=JsonBody().integer_type("id", 1).string_type("name", "Buddy"))
    )
    document = pact.build().to_document()
    links = {"self": {"href": PACT_URL}}
    if with_publish_link:
        links["pb:publish-verification-results"] = {"href": PUBLISH_URL}
    document["_links"] = links
    return document


class FakeBroker:
    """Serves one pet contract and records what is published to it."""

    def __init__(self, username="pact", password="pact", with_publish_link=True):
        self.expected_auth = "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()
        self.document = _pact_document(with_publish_link)
        self.published = []

    def __call__(self, request):
        if request.headers.get("Authorization") != self.expected_auth:
            return httpx.Response(401, json={"error": "unauthorized"})
        if request.method == "GET" and request.url.path == "/pacts/provider/pet_provider/latest":
            return httpx.Response(
                200,
                json={"_links": {"pb:pacts": [{"href": PACT_URL, "title": "Pact between pet_consumer and pet_provider", "name": "pet_consumer"}]}},
            )
        if request.method == "GET" and str(request.url) == PACT_URL:
            return httpx.Response(200, json=self.document)
        if request.method == "POST" and str(request.url) == PUBLISH_URL:
            self.published.append(json.loads(request.content))
            return httpx.Response(201, json={"success": True})
        return httpx.Response(404, json={"error": "not found"})


def _provider(pet):
    return httpx.MockTransport(lambda request: httpx.Response(200, json=pet))


def _verifier(pet):
    registry = ProviderStateRegistry()
    registry.add("Pet with ID 1 exists", lambda: None)
    return ProviderVerifier("pet_provider", "http://provider.test", state_registry=registry, transport=_provider(pet))


def test_fetches_latest_contracts_with_basic_auth():
    fake = FakeBroker()
    broker = PactBrokerClient(BROKER, username="pact", password="pact", transport=httpx.MockTransport(fake))

    [fetched] = broker.fetch_contracts("pet_provider")

    assert fetched.contract.consumer.name == "pet_consumer"
    assert [i.description for i in fetched.contract.interactions] == ["get pet 1"]
    assert fetched.url == PACT_URL
    assert fetched.publish_url == PUBLISH_URL


def test_wrong_credentials_raise_broker_error():
    broker = PactBrokerClient(BROKER, username="pact", password="nope", transport=httpx.MockTransport(FakeBroker()))

    with pytest.raises(BrokerError) as exc_info:
        broker.fetch_contracts("pet_provider")
    assert exc_info.value.status_code == 401


def test_unknown_provider_has_no_contracts():
    broker = PactBrokerClient(BROKER, username="pact", password="pact", transport=httpx.MockTransport(FakeBroker()))

    assert broker.fetch_contracts("billing_provider") == []


def test_unreachable_broker_raises_broker_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    broker = PactBrokerClient(BROKER, transport=httpx.MockTransport(refuse))

    with pytest.raises(BrokerError):
        broker.fetch_contracts("pet_provider")


def test_verify_broker_publishes_success():
    fake = FakeBroker()
    broker = PactBrokerClient(BROKER, username="pact", password="pact", transport=httpx.MockTransport(fake))

    results = _verifier({"id": 1, "name": "Buddy"}).verify_broker(broker, publish=True, provider_version="2.3.0")

    assert [r.passed for r in results] == [True]
    [published] = fake.published
    assert published["success"] is True
    assert published["providerApplicationVersion"] == "2.3.0"
    assert published["testResults"] == [{"interactionDescription": "get pet 1", "success": True, "mismatches": []}]


def test_verify_broker_publishes_failure_with_mismatches():
    fake = FakeBroker()
    broker = PactBrokerClient(BROKER, username="pact", password="pact", transport=httpx.MockTransport(fake))

    results = _verifier({"id": 1, "name": 7}).verify_broker(broker, publish=True, provider_version="2.3.0")

    assert not results[0].passed
    [published] = fake.published
    assert published["success"] is False
    assert [m["path"] for m in published["testResults"][0]["mismatches"]] == ["$.name"]


def test_results_are_not_published_unless_asked():
    fake = FakeBroker()
    broker = PactBrokerClient(BROKER, username="pact", password="pact", transport=httpx.MockTransport(fake))

    _verifier({"id": 1, "name": "Buddy"}).verify_broker(broker)

    assert fake.published == []


def test_missing_publish_link_skips_publishing():
    fake = FakeBroker(with_publish_link=False)
    broker = PactBrokerClient(BROKER, username="pact", password="pact", transport=httpx.MockTransport(fake))
    [fetched] = broker.fetch_contracts("pet_provider")
    result = _verifier({"id": 1, "name": "Buddy"}).verify_contract(fetched.contract)

    assert broker.publish_result(fetched, result, provider_version="2.3.0") is False
    assert fake.published == []


def test_publishing_requires_provider_version():
    broker = PactBrokerClient(BROKER, transport=httpx.MockTransport(FakeBroker()))

    with pytest.raises(ContractError):
        _verifier({"id": 1, "name": "Buddy"}).verify_broker(broker, publish=True)
