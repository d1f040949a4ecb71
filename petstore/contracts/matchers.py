"""
Body matchers and the matching engine.

A body is either literal (any plain JSON value, matched by equality) or
structural (built with JsonBody / each_like). Structural bodies produce an
example document plus matching rules keyed by JSON path, e.g.

    {"$.name": {"matchers": [{"match": "type"}]},
     "$[*].id": {"matchers": [{"match": "integer"}]}}

Rules on a path apply to that value; a "type" rule also cascades to every
value below it that has no rule of its own.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

Token = Union[str, int]
Rules = Dict[str, Dict[str, Any]]

WILDCARD = "*"

_PATH_TOKEN = re.compile(r"\.([A-Za-z_][\w-]*|\*)|\[(\d+|\*)\]|\['([^']*)'\]")
_IDENTIFIER = re.compile(r"^[A-Za-z_][\w-]*$")


@dataclass
class Mismatch:
    path: str
    kind: str  # missing | unexpected | type | value | length | status | header | body
    message: str
    expected: Any = None
    actual: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "kind": self.kind,
            "message": self.message,
            "expected": self.expected,
            "actual": self.actual,
        }


# ---------------------------------------------------------------------------
# JSON paths
# ---------------------------------------------------------------------------

def render_path(tokens: Sequence[Token]) -> str:
    out = "$"
    for token in tokens:
        if isinstance(token, int):
            out += f"[{token}]"
        elif token == WILDCARD:
            out += "[*]"
        elif _IDENTIFIER.match(token):
            out += f".{token}"
        else:
            out += f"['{token}']"
    return out


def parse_path(path: str) -> Tuple[Token, ...]:
    if not path.startswith("$"):
        raise ValueError(f"JSON path must start with '$': {path!r}")
    tokens: List[Token] = []
    position = 1
    while position < len(path):
        found = _PATH_TOKEN.match(path, position)
        if not found:
            raise ValueError(f"Unsupported JSON path {path!r} at offset {position}")
        name, index, quoted = found.groups()
        if index is not None:
            tokens.append(WILDCARD if index == WILDCARD else int(index))
        elif quoted is not None:
            tokens.append(quoted)
        else:
            tokens.append(name)
        position = found.end()
    return tuple(tokens)


def _tokens_match(rule_tokens: Sequence[Token], tokens: Sequence[Token]) -> bool:
    if len(rule_tokens) != len(tokens):
        return False
    return all(r == WILDCARD or r == t for r, t in zip(rule_tokens, tokens))


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


# ---------------------------------------------------------------------------
# Structural body builders
# ---------------------------------------------------------------------------

class JsonBody:
    """
    Fluent builder for an object whose fields are matched by shape.

        JsonBody().integer_type("id", 1).string_type("name", "Buddy")
    """

    def __init__(self) -> None:
        self._example: Dict[str, Any] = {}
        self._rules: Dict[Tuple[Token, ...], Dict[str, Any]] = {}

    def _typed(self, name: str, example: Any, matcher: Optional[Dict[str, Any]]) -> "JsonBody":
        self._example[name] = example
        self._rules.pop((name,), None)
        if matcher is not None:
            self._rules[(name,)] = matcher
        return self

    def string_type(self, name: str, example: str = "string") -> "JsonBody":
        return self._typed(name, example, {"match": "type"})

    def integer_type(self, name: str, example: int = 1) -> "JsonBody":
        return self._typed(name, example, {"match": "integer"})

    def decimal_type(self, name: str, example: float = 1.5) -> "JsonBody":
        return self._typed(name, example, {"match": "decimal"})

    def boolean_type(self, name: str, example: bool = True) -> "JsonBody":
        return self._typed(name, example, {"match": "type"})

    def string_matching(self, name: str, regex: str, example: str) -> "JsonBody":
        if not re.fullmatch(regex, example):
            raise ValueError(f"Example {example!r} for '{name}' does not match {regex!r}")
        return self._typed(name, example, {"match": "regex", "regex": regex})

    def literal(self, name: str, value: Any) -> "JsonBody":
        return self._typed(name, value, None)

    def object(self, name: str, body: "JsonBody") -> "JsonBody":
        self._example[name] = body.example
        for tokens, matcher in body._relative_rules():
            self._rules[(name,) + tokens] = matcher
        return self

    def each_like(self, name: str, item: Any, min: int = 1) -> "JsonBody":
        array = each_like(item, min=min)
        self._example[name] = array.example
        for tokens, matcher in array._relative_rules():
            self._rules[(name,) + tokens] = matcher
        return self

    @property
    def example(self) -> Dict[str, Any]:
        return copy.deepcopy(self._example)

    def _relative_rules(self) -> List[Tuple[Tuple[Token, ...], Dict[str, Any]]]:
        return [(tokens, dict(matcher)) for tokens, matcher in self._rules.items()]


class ArrayLike:
    """Array of at least `min` elements, each shaped like `item`."""

    def __init__(self, item: Any, min: int = 1) -> None:
        if min < 0:
            raise ValueError("min must be >= 0")
        self.item = item
        self.min = min

    @property
    def example(self) -> List[Any]:
        item_example, _ = to_body(self.item)
        return [copy.deepcopy(item_example) for _ in range(max(self.min, 1))]

    def _relative_rules(self) -> List[Tuple[Tuple[Token, ...], Dict[str, Any]]]:
        rules: List[Tuple[Tuple[Token, ...], Dict[str, Any]]] = [((), {"match": "type", "min": self.min})]
        if isinstance(self.item, (JsonBody, ArrayLike)):
            for tokens, matcher in self.item._relative_rules():
                rules.append(((WILDCARD,) + tokens, matcher))
        return rules


def each_like(item: Any, min: int = 1) -> ArrayLike:
    return ArrayLike(item, min=min)


def to_body(value: Any) -> Tuple[Any, Rules]:
    """Split a body declaration into (example document, matching rules)."""
    if isinstance(value, (JsonBody, ArrayLike)):
        rules: Rules = {}
        for tokens, matcher in value._relative_rules():
            rules[render_path(tokens)] = {"matchers": [matcher]}
        return value.example, rules
    return copy.deepcopy(value), {}


# ---------------------------------------------------------------------------
# Matching engine
# ---------------------------------------------------------------------------

class _RuleSet:
    def __init__(self, rules: Mapping[str, Dict[str, Any]]) -> None:
        self._entries = [(parse_path(path), entry.get("matchers", [])) for path, entry in rules.items()]

    def exact(self, tokens: Sequence[Token]) -> List[Dict[str, Any]]:
        candidates = [
            (sum(1 for t in rule_tokens if t == WILDCARD), matchers)
            for rule_tokens, matchers in self._entries
            if _tokens_match(rule_tokens, tokens)
        ]
        if not candidates:
            return []
        candidates.sort(key=lambda c: c[0])
        return candidates[0][1]

    def resolve(self, tokens: Sequence[Token]) -> List[Dict[str, Any]]:
        own = self.exact(tokens)
        if own:
            return own
        for depth in range(len(tokens) - 1, -1, -1):
            inherited = self.exact(tokens[:depth])
            if any(m.get("match") == "type" for m in inherited):
                return [{"match": "type"}]
        return []


def match_body(
    expected: Any,
    actual: Any,
    rules: Optional[Mapping[str, Dict[str, Any]]] = None,
    allow_unexpected_keys: bool = True,
) -> List[Mismatch]:
    """Compare an actual JSON document against an expected one."""
    mismatches: List[Mismatch] = []
    _compare(expected, actual, (), _RuleSet(rules or {}), allow_unexpected_keys, mismatches)
    return mismatches


def _compare(
    expected: Any,
    actual: Any,
    tokens: Tuple[Token, ...],
    rules: _RuleSet,
    allow_unexpected_keys: bool,
    out: List[Mismatch],
) -> None:
    matchers = rules.resolve(tokens)
    path = render_path(tokens)

    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            out.append(Mismatch(path, "type", f"Expected an object but received {_kind(actual)}", expected, actual))
            return
        for key, value in expected.items():
            if key not in actual:
                out.append(Mismatch(render_path(tokens + (key,)), "missing", f"Missing field '{key}'", value, None))
                continue
            _compare(value, actual[key], tokens + (key,), rules, allow_unexpected_keys, out)
        if not allow_unexpected_keys:
            for key in actual:
                if key not in expected:
                    out.append(
                        Mismatch(render_path(tokens + (key,)), "unexpected", f"Unexpected field '{key}'", None, actual[key])
                    )
        return

    if isinstance(expected, list):
        if not isinstance(actual, list):
            out.append(Mismatch(path, "type", f"Expected an array but received {_kind(actual)}", expected, actual))
            return
        if any(m.get("match") == "type" or "min" in m or "max" in m for m in matchers):
            for m in matchers:
                if "min" in m and len(actual) < m["min"]:
                    out.append(
                        Mismatch(path, "length", f"Expected at least {m['min']} element(s) but received {len(actual)}", m["min"], len(actual))
                    )
                if "max" in m and len(actual) > m["max"]:
                    out.append(
                        Mismatch(path, "length", f"Expected at most {m['max']} element(s) but received {len(actual)}", m["max"], len(actual))
                    )
            if expected:
                for index, item in enumerate(actual):
                    _compare(expected[0], item, tokens + (index,), rules, allow_unexpected_keys, out)
            return
        if len(actual) != len(expected):
            out.append(
                Mismatch(path, "length", f"Expected {len(expected)} element(s) but received {len(actual)}", len(expected), len(actual))
            )
            return
        for index, (e, a) in enumerate(zip(expected, actual)):
            _compare(e, a, tokens + (index,), rules, allow_unexpected_keys, out)
        return

    if not matchers:
        matchers = [{"match": "equality"}]
    for matcher in matchers:
        problem = _check_leaf(matcher, expected, actual)
        if problem:
            kind = "value" if matcher.get("match") in ("equality", "regex") and _kind(expected) == _kind(actual) else "type"
            out.append(Mismatch(path, kind, problem, expected, actual))
            return


def _check_leaf(matcher: Dict[str, Any], expected: Any, actual: Any) -> Optional[str]:
    match = matcher.get("match", "equality")
    if match == "type":
        if _kind(expected) != _kind(actual):
            return f"Expected a {_kind(expected)} but received {_kind(actual)}"
        return None
    if match == "integer":
        if isinstance(actual, bool) or not isinstance(actual, int):
            return f"Expected an integer but received {actual!r}"
        return None
    if match == "decimal":
        if not isinstance(actual, float):
            return f"Expected a decimal number but received {actual!r}"
        return None
    if match == "regex":
        if not isinstance(actual, str):
            return f"Expected a string matching {matcher.get('regex')!r} but received {_kind(actual)}"
        if not re.fullmatch(matcher.get("regex", ""), actual):
            return f"Expected {actual!r} to match {matcher.get('regex')!r}"
        return None
    if match == "equality":
        if _kind(expected) != _kind(actual) or expected != actual:
            return f"Expected {expected!r} but received {actual!r}"
        return None
    return f"Unsupported matcher '{match}'"


def _normalize_header(name: str, value: str) -> str:
    value = value.strip()
    if name.lower() == "content-type":
        return value.split(";", 1)[0].strip().lower()
    return value


def match_headers(expected: Optional[Mapping[str, str]], actual: Mapping[str, str]) -> List[Mismatch]:
    """Only expected headers are checked; names are case-insensitive."""
    mismatches: List[Mismatch] = []
    lowered = {k.lower(): v for k, v in actual.items()}
    for name, value in (expected or {}).items():
        received = lowered.get(name.lower())
        if received is None:
            mismatches.append(Mismatch(f"header.{name}", "header", f"Missing header '{name}'", value, None))
        elif _normalize_header(name, received) != _normalize_header(name, value):
            mismatches.append(
                Mismatch(f"header.{name}", "header", f"Expected header '{name}' to be {value!r} but received {received!r}", value, received)
            )
    return mismatches
