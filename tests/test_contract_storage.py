import json

import pytest

from petstore.contracts import ContractBuilder, ContractFileError, JsonBody, find_contracts, load_contract, write_contract


def _contract(consumer="pet_consumer", provider="pet_provider", descriptions=("get pet 1",), status=200):
    pact = ContractBuilder(consumer, provider)
    for description in descriptions:
        (
            pact.given("Pet with ID 1 exists", owner="ann")
            .upon_receiving(description)
            .with_request("GET", "/api/pets/1", headers={"Accept": "application/json"}, query={"verbose": "1"})
            .will_respond_with(status, body=JsonBody().integer_type("id", 1).string_type("name", "Buddy"))
        )
    return pact.build()


def test_write_then_load_returns_same_contract(tmp_path):
    contract = _contract()

    path = write_contract(contract, tmp_path / "pacts")
    loaded = load_contract(path)

    assert path == tmp_path / "pacts" / "pet_consumer-pet_provider.json"
    assert loaded.to_document() == contract.to_document()
    [interaction] = loaded.interactions
    assert interaction.provider_states[0].params == {"owner": "ann"}
    assert interaction.request.query == {"verbose": "1"}
    assert interaction.response.body_rules["$.name"] == {"matchers": [{"match": "type"}]}


def test_document_uses_pact_v3_layout(tmp_path):
    document = json.loads(write_contract(_contract(), tmp_path).read_text())

    assert document["metadata"] == {"pactSpecification": {"version": "3.0.0"}}
    interaction = document["interactions"][0]
    assert interaction["providerStates"] == [{"name": "Pet with ID 1 exists", "params": {"owner": "ann"}}]
    assert "matchingRules" not in interaction["request"]
    assert set(interaction["response"]["matchingRules"]["body"]) == {"$.id", "$.name"}


def test_write_merges_interactions_by_description(tmp_path):
    write_contract(_contract(descriptions=("get pet 1", "get pet 2")), tmp_path)
    path = write_contract(_contract(descriptions=("get pet 2", "get pet 3"), status=202), tmp_path)

    loaded = load_contract(path)

    assert [i.description for i in loaded.interactions] == ["get pet 1", "get pet 2", "get pet 3"]
    assert [i.response.status for i in loaded.interactions] == [200, 202, 202]


def test_overwrite_replaces_file(tmp_path):
    write_contract(_contract(descriptions=("get pet 1", "get pet 2")), tmp_path)
    path = write_contract(_contract(descriptions=("get pet 3",)), tmp_path, overwrite=True)

    assert [i.description for i in load_contract(path).interactions] == ["get pet 3"]


def test_load_missing_file(tmp_path):
    with pytest.raises(ContractFileError) as exc_info:
        load_contract(tmp_path / "nope.json")
    assert exc_info.value.path == str(tmp_path / "nope.json")


def test_load_corrupt_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    with pytest.raises(ContractFileError, match="not valid JSON"):
        load_contract(path)


def test_load_wrong_layout(tmp_path):
    path = tmp_path / "layout.json"
    path.write_text(json.dumps({"consumer": {"name": "a"}, "interactions": []}))

    with pytest.raises(ContractFileError, match="invalid layout"):
        load_contract(path)


def test_find_contracts_filters_by_provider(tmp_path):
    write_contract(_contract(), tmp_path)
    write_contract(_contract(consumer="vet_portal"), tmp_path)
    write_contract(_contract(provider="billing"), tmp_path)

    found = find_contracts(tmp_path, "pet_provider")

    assert sorted(c.consumer.name for c in found) == ["pet_consumer", "vet_portal"]


def test_find_contracts_requires_directory(tmp_path):
    with pytest.raises(ContractFileError):
        find_contracts(tmp_path / "missing", "pet_provider")


def test_builder_rejects_duplicate_descriptions():
    pact = ContractBuilder("pet_consumer", "pet_provider")
    pact.upon_receiving("get pets").with_request("GET", "/api/pets").will_respond_with(200)

    with pytest.raises(ValueError, match="Duplicate"):
        pact.upon_receiving("get pets").with_request("GET", "/api/pets").will_respond_with(200)


def test_builder_requires_request_and_description():
    pact = ContractBuilder("pet_consumer", "pet_provider")

    with pytest.raises(ValueError):
        pact.upon_receiving("no request").will_respond_with(200)
    with pytest.raises(ValueError):
        pact.given("Pets exist in the system").with_request("GET", "/api/pets").will_respond_with(200)
    with pytest.raises(ValueError):
        pact.upon_receiving("bad path").with_request("GET", "api/pets")
    assert pact.interactions == ()
