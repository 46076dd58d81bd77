"""Tests for lib/codec.py - JSON encoding and typed decoding."""

import json
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from pathlib import Path

import pytest

from filecached.lib.codec import JsonSerializer
from filecached.lib.result import Err, Ok, unwrap


class Channel(StrEnum):
    STABLE = "stable"
    BETA = "beta"


class Priority(IntEnum):
    LOW = 1
    HIGH = 2


@dataclass(frozen=True)
class Mirror:
    url: str
    weight: int = 1


@dataclass
class Snapshot:
    """A config snapshot as a host tool might cache it."""

    name: str
    channel: Channel
    mirrors: tuple[Mirror, ...] = ()
    tags: dict[str, str] = field(default_factory=dict)
    parent: str | None = None
    root: Path | None = None


@pytest.fixture
def snapshot() -> Snapshot:
    return Snapshot(
        name="main",
        channel=Channel.BETA,
        mirrors=(Mirror("https://a.example"), Mirror("https://b.example", weight=3)),
        tags={"team": "infra"},
        root=Path("/srv/data"),
    )


class TestEncode:
    def test_dataclass_becomes_plain_json(self, snapshot: Snapshot) -> None:
        text = unwrap(JsonSerializer(Snapshot).encode(snapshot))
        data = json.loads(text)

        assert data["channel"] == "beta"
        assert data["mirrors"][1] == {"url": "https://b.example", "weight": 3}
        assert data["parent"] is None
        assert data["root"] == "/srv/data"

    def test_no_envelope(self) -> None:
        assert json.loads(unwrap(JsonSerializer(int).encode(5))) == 5

    def test_indent_is_configurable(self) -> None:
        assert unwrap(JsonSerializer(indent=None).encode({"a": 1})) == '{"a": 1}'

    def test_sets_are_sorted_lists(self) -> None:
        assert json.loads(unwrap(JsonSerializer().encode({3, 1, 2}))) == [1, 2, 3]

    def test_unencodable_value_is_err(self) -> None:
        result = JsonSerializer().encode({"handle": object()})

        assert isinstance(result, Err)
        assert "not JSON serializable" in result.error


class TestDecode:
    """Tests for typed decoding."""

    def test_dataclass_roundtrip(self, snapshot: Snapshot) -> None:
        codec = JsonSerializer(Snapshot)
        restored = unwrap(codec.decode(unwrap(codec.encode(snapshot))))

        assert restored == snapshot
        assert isinstance(restored.channel, Channel)
        assert isinstance(restored.mirrors[0], Mirror)

    def test_missing_optional_fields_use_defaults(self) -> None:
        restored = unwrap(JsonSerializer(Snapshot).decode('{"name": "x", "channel": "stable"}'))

        assert restored.mirrors == ()
        assert restored.tags == {}

    def test_untyped_returns_raw_json(self) -> None:
        assert JsonSerializer().decode('{"a": [1, 2]}') == Ok({"a": [1, 2]})

    def test_accepts_bytes(self) -> None:
        assert JsonSerializer(list[int]).decode(b"[1, 2]") == Ok([1, 2])

    def test_int_dict_keys(self) -> None:
        assert JsonSerializer(dict[int, str]).decode('{"1": "a"}') == Ok({1: "a"})

    def test_int_accepted_as_float(self) -> None:
        assert JsonSerializer(float).decode("3") == Ok(3.0)

    def test_set_type(self) -> None:
        assert JsonSerializer(set[str]).decode('["a", "b"]') == Ok({"a", "b"})

    def test_malformed_json_is_err(self) -> None:
        result = JsonSerializer(int).decode("{not json")

        assert isinstance(result, Err)
        assert result.error.startswith("Invalid JSON")

    def test_invalid_utf8_is_err(self) -> None:
        assert isinstance(JsonSerializer().decode(b'"\xff\xfe\xfa"'), Err)

    def test_wrong_primitive_type_is_err(self) -> None:
        result = JsonSerializer(int).decode('"five"')

        assert isinstance(result, Err)
        assert "expected int" in result.error

    def test_bool_is_not_int(self) -> None:
        assert isinstance(JsonSerializer(int).decode("true"), Err)
        assert isinstance(JsonSerializer(bool).decode("1"), Err)

    def test_missing_required_field_is_err(self) -> None:
        assert isinstance(JsonSerializer(Snapshot).decode('{"name": "x"}'), Err)

    def test_unknown_enum_value_is_err(self) -> None:
        result = JsonSerializer(Snapshot).decode('{"name": "x", "channel": "nightly"}')

        assert isinstance(result, Err)

    def test_object_expected_but_array_found(self) -> None:
        assert isinstance(JsonSerializer(Snapshot).decode("[1, 2]"), Err)

    def test_fixed_length_tuple_checks_arity(self) -> None:
        assert JsonSerializer(tuple[int, str]).decode('[1, "a"]') == Ok((1, "a"))
        assert isinstance(JsonSerializer(tuple[int, str]).decode("[1]"), Err)

    def test_optional_accepts_null(self) -> None:
        assert JsonSerializer(int | None).decode("null") == Ok(None)

    def test_union_tries_each_member(self) -> None:
        assert JsonSerializer(int | str).decode('"x"') == Ok("x")


class TestDictKeys:
    """Tests for non-string dict keys, which JSON stores as strings."""

    def test_int_enum_keys_roundtrip(self) -> None:
        codec = JsonSerializer(dict[Priority, int])
        text = unwrap(codec.encode({Priority.LOW: 5, Priority.HIGH: 7}))

        assert json.loads(text) == {"1": 5, "2": 7}
        assert codec.decode(text) == Ok({Priority.LOW: 5, Priority.HIGH: 7})

    def test_str_enum_keys_roundtrip(self) -> None:
        codec = JsonSerializer(dict[Channel, str])
        text = unwrap(codec.encode({Channel.BETA: "b"}))

        assert codec.decode(text) == Ok({Channel.BETA: "b"})

    def test_bool_keys_roundtrip(self) -> None:
        codec = JsonSerializer(dict[bool, str])
        text = unwrap(codec.encode({True: "yes", False: "no"}))

        assert codec.decode(text) == Ok({True: "yes", False: "no"})

    def test_unknown_enum_key_is_err(self) -> None:
        result = JsonSerializer(dict[Priority, int]).decode('{"9": 1}')

        assert isinstance(result, Err)
        assert "not a valid Priority key" in result.error

    def test_bad_bool_key_is_err(self) -> None:
        assert isinstance(JsonSerializer(dict[bool, int]).decode('{"1": 1}'), Err)


class TestDeepNesting:
    """Structures too deep for the recursion limit come back as Err."""

    def test_deeply_nested_json_is_err(self) -> None:
        result = JsonSerializer().decode("[" * 100000 + "]" * 100000)

        assert isinstance(result, Err)
        assert "nested too deeply" in result.error

    def test_deeply_nested_typed_decode_is_err(self) -> None:
        assert isinstance(JsonSerializer(list[int]).decode("[" * 100000 + "]" * 100000), Err)

    def test_cyclic_value_is_err(self) -> None:
        cyclic: list = []
        cyclic.append(cyclic)

        result = JsonSerializer().encode(cyclic)

        assert isinstance(result, Err)
        assert "cycle" in result.error
