import pytest

from petstore.contracts.matchers import JsonBody, each_like, match_body, match_headers, parse_path, render_path, to_body


def _buddy_body():
    return (
        JsonBody()
        .integer_type("id", 1)
        .string_type("name", "Buddy")
        .string_type("type", "Dog")
        .integer_type("age", 3)
    )


def test_paths_render_and_parse():
    assert render_path(()) == "$"
    assert render_path(("*", "name")) == "$[*].name"
    assert render_path(("owner", 0, "first name")) == "$.owner[0]['first name']"
    assert parse_path("$[*].name") == ("*", "name")
    assert parse_path("$.owner[0]['first name']") == ("owner", 0, "first name")
    with pytest.raises(ValueError):
        parse_path("owner.name")


def test_structural_body_accepts_any_value_of_the_right_type():
    example, rules = to_body(_buddy_body())

    assert example == {"id": 1, "name": "Buddy", "type": "Dog", "age": 3}
    assert rules["$.name"] == {"matchers": [{"match": "type"}]}
    assert match_body(example, {"id": 77, "name": "Rex", "type": "Cat", "age": 9, "extra": True}, rules) == []


def test_structural_body_rejects_wrong_type_and_missing_field():
    example, rules = to_body(_buddy_body())

    mismatches = match_body(example, {"id": "1", "type": "Dog", "age": 3}, rules)

    by_path = {m.path: m.kind for m in mismatches}
    assert by_path == {"$.id": "type", "$.name": "missing"}


def test_integer_matcher_rejects_booleans_and_floats():
    example, rules = to_body(JsonBody().integer_type("age", 3))

    assert match_body(example, {"age": True}, rules)
    assert match_body(example, {"age": 3.5}, rules)
    assert not match_body(example, {"age": 0}, rules)


def test_literal_body_requires_exact_document():
    expected = {"id": 1, "name": "Buddy"}

    assert match_body(expected, {"id": 1, "name": "Buddy"}, {}, allow_unexpected_keys=False) == []

    mismatches = match_body(expected, {"id": 1, "name": "Rex", "age": 3}, {}, allow_unexpected_keys=False)
    kinds = sorted(m.kind for m in mismatches)
    assert kinds == ["unexpected", "value"]


def test_literal_number_equality_ignores_int_float_spelling_but_not_bool():
    assert match_body({"age": 3}, {"age": 3.0}) == []
    assert match_body({"flag": 1}, {"flag": True})


def test_each_like_enforces_minimum_and_item_shape():
    example, rules = to_body(each_like(_buddy_body(), min=1))

    assert example == [{"id": 1, "name": "Buddy", "type": "Dog", "age": 3}]
    assert rules["$"] == {"matchers": [{"match": "type", "min": 1}]}
    assert rules["$[*].id"] == {"matchers": [{"match": "integer"}]}

    ok = [{"id": 1, "name": "Buddy", "type": "Dog", "age": 3}, {"id": 2, "name": "W", "type": "Cat", "age": 5}]
    assert match_body(example, ok, rules) == []

    too_short = match_body(example, [], rules)
    assert [m.kind for m in too_short] == ["length"]

    bad_item = match_body(example, ok + [{"id": 3, "name": 4, "type": "Cat", "age": 1}], rules)
    assert [m.path for m in bad_item] == ["$[2].name"]


def test_type_rule_cascades_to_unruled_children():
    body = JsonBody().each_like("tags", "puppy", min=2)
    example, rules = to_body(body)

    assert example == {"tags": ["puppy", "puppy"]}
    assert match_body(example, {"tags": ["a", "b", "c"]}, rules) == []
    assert [m.path for m in match_body(example, {"tags": ["a", 2]}, rules)] == ["$.tags[1]"]


def test_nested_object_rules_are_prefixed():
    body = JsonBody().object("owner", JsonBody().string_type("name", "Ann"))
    example, rules = to_body(body)

    assert "$.owner.name" in rules
    assert match_body(example, {"owner": {"name": "Bob"}}, rules) == []


def test_regex_matcher():
    example, rules = to_body(JsonBody().string_matching("type", r"Dog|Cat", "Dog"))

    assert match_body(example, {"type": "Cat"}, rules) == []
    assert [m.kind for m in match_body(example, {"type": "Fish"}, rules)] == ["value"]
    with pytest.raises(ValueError):
        JsonBody().string_matching("type", r"Dog|Cat", "Fish")


def test_headers_are_case_insensitive_and_ignore_charset():
    expected = {"Content-Type": "application/json"}

    assert match_headers(expected, {"content-type": "application/json; charset=utf-8"}) == []
    assert [m.kind for m in match_headers(expected, {})] == ["header"]
