from __future__ import annotations

import json
import math
import re
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import urlsplit

import numpy as np
import pytest

from island_props.codec import (
    UNREPRESENTABLE,
    BigInt,
    CyclicReferenceError,
    PropMap,
    PropSet,
    PropType,
    UnsupportedPropError,
    VisitedSet,
    convert_to_serialized_form,
    encode,
)
from island_props.envelope import ComponentMetadata

WIDGET = ComponentMetadata(display_name="Widget", hydrate="load")


def test_byte_buffer_payload_is_compact_json() -> None:
    tag, payload = convert_to_serialized_form(np.array([1, 2, 3], dtype=np.uint8))

    assert tag == PropType.UINT8_ARRAY == 8
    assert payload == "[1,2,3]"


@pytest.mark.parametrize(
    "value, tag",
    [
        (np.array([1, 2], dtype=np.uint16), 9),
        (np.array([[1], [2]], dtype=np.uint32), 10),
        (b"\x01\x02", 8),
        (bytearray(b"\x01\x02"), 8),
    ],
)
def test_buffers_flatten_to_numeric_arrays(value, tag: int) -> None:
    assert convert_to_serialized_form(value) == (tag, "[1,2]")


def test_other_numpy_arrays_encode_as_sequences() -> None:
    tag, payload = convert_to_serialized_form(np.array([1.5, 2.5], dtype=np.float32))

    assert tag == PropType.JSON
    assert payload == "[[0,1.5],[0,2.5]]"


@pytest.mark.parametrize(
    "value",
    [
        datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc),
        datetime(2024, 1, 2, 3, 4, 5, 678901),
    ],
)
def test_dates_use_millisecond_iso_format(value: datetime) -> None:
    assert convert_to_serialized_form(value) == (3, "2024-01-02T03:04:05.678Z")


def test_regexp_drops_flags() -> None:
    assert convert_to_serialized_form(re.compile("ab+c", re.IGNORECASE)) == (2, "ab+c")


def test_map_payload_is_double_encoded_pairs() -> None:
    tag, payload = convert_to_serialized_form(OrderedDict([("a", 1)]))

    assert tag == PropType.MAP
    assert payload == '[[1,"[[0,\\"a\\"],[0,1]]"]]'
    assert json.loads(json.loads(payload)[0][1]) == [[0, "a"], [0, 1]]


def test_set_payload_lists_elements() -> None:
    tag, payload = convert_to_serialized_form({"only"})

    assert tag == PropType.SET
    assert payload == '[[0,"only"]]'


@pytest.mark.parametrize(
    "value, expected",
    [
        (42, (0, 42)),
        (10**20, (0, 10**20)),
        (BigInt(5), (6, "5")),
        (BigInt(2**64), (6, "18446744073709551616")),
        (BigInt(-(2**60)), (6, "-1152921504606846976")),
        (True, (0, True)),
    ],
)
def test_only_bigint_values_use_the_bigint_tag(value: int, expected) -> None:
    assert convert_to_serialized_form(value) == expected


def test_url_is_normalized() -> None:
    url = urlsplit("HTTPS://user@Example.COM:8443?q=1#top")

    assert convert_to_serialized_form(url) == (7, "https://user@example.com:8443/?q=1#top")


def test_sequences_are_tagged_json() -> None:
    assert convert_to_serialized_form([1, "two", None]) == (1, '[[0,1],[0,"two"],[0,null]]')
    assert convert_to_serialized_form((1,)) == (1, "[[0,1]]")


def test_records_keep_keys_and_tag_leaves() -> None:
    assert convert_to_serialized_form({"a": 1, "b": {"c": "d"}}) == (
        0,
        {"a": (0, 1), "b": (0, {"c": (0, "d")})},
    )


def test_dataclass_records_use_fields() -> None:
    @dataclass
    class Point:
        x: int
        y: int

    assert encode({"p": Point(1, 2)}) == '{"p":[0,{"x":[0,1],"y":[0,2]}]}'


def test_encode_top_level_props() -> None:
    assert encode({"text": "a"}) == '{"text":[0,"a"]}'
    assert encode({"text": "é"}) == '{"text":[0,"é"]}'


def test_non_finite_floats_encode_as_null() -> None:
    assert encode({"a": math.nan, "b": math.inf}) == '{"a":[0,null],"b":[0,null]}'


def test_numpy_scalars_are_unwrapped() -> None:
    assert convert_to_serialized_form(np.int64(5)) == (0, 5)


def test_unrepresentable_is_omitted_from_records_and_null_in_sequences() -> None:
    props = {"gone": UNREPRESENTABLE, "kept": [UNREPRESENTABLE]}

    assert encode(props) == '{"kept":[1,"[[0,null]]"]}'


def test_unsupported_composite_raises() -> None:
    class Opaque:
        pass

    with pytest.raises(UnsupportedPropError) as excinfo:
        encode({"value": Opaque()})

    assert isinstance(excinfo.value, TypeError)
    assert "Opaque" in str(excinfo.value)


def test_top_level_props_must_be_a_record() -> None:
    with pytest.raises(UnsupportedPropError):
        encode([1, 2])


def test_self_referencing_record_is_rejected() -> None:
    record: dict = {"name": "loop"}
    record["self"] = record

    with pytest.raises(CyclicReferenceError) as excinfo:
        encode(record, WIDGET)

    assert excinfo.value.display_name == "Widget"
    assert excinfo.value.hydrate == "load"
    assert "<Widget client:load>" in str(excinfo.value)


def test_self_referencing_sequence_is_rejected() -> None:
    items: list = []
    items.append(items)

    with pytest.raises(CyclicReferenceError):
        encode({"items": items})


@pytest.mark.parametrize("wrap", [lambda holder: OrderedDict([("holder", holder)]), tuple])
def test_cycles_through_collections_are_rejected(wrap) -> None:
    holder: list = []
    value = wrap([holder]) if wrap is tuple else wrap(holder)
    holder.append(value)

    with pytest.raises(CyclicReferenceError):
        encode({"value": value})


def test_cycle_error_accepts_mapping_metadata() -> None:
    record: dict = {}
    record["again"] = record

    with pytest.raises(CyclicReferenceError, match="<Card client:idle>"):
        encode(record, {"displayName": "Card", "hydrate": "idle"})


def test_shared_values_are_not_cycles() -> None:
    shared = {"x": 1}
    root = {"a": shared, "b": shared, "c": [shared, shared]}

    encoded = encode(root)

    assert '"a":[0,{"x":[0,1]}]' in encoded
    assert '"b":[0,{"x":[0,1]}]' in encoded


def test_visited_set_unwinds_after_failure() -> None:
    visited = VisitedSet()
    record: dict = {}
    record["self"] = record

    with pytest.raises(CyclicReferenceError):
        convert_to_serialized_form({"outer": record}, None, visited)

    assert len(visited) == 0
    assert record not in visited


@pytest.mark.parametrize(
    "value, expected",
    [
        (datetime(5, 1, 1, tzinfo=timezone.utc), "0005-01-01T00:00:00.000Z"),
        (datetime(999, 12, 31, 23, 59, 59), "0999-12-31T23:59:59.000Z"),
    ],
)
def test_dates_zero_pad_early_years(value: datetime, expected: str) -> None:
    assert convert_to_serialized_form(value) == (3, expected)


def test_prop_collections_keep_their_tags() -> None:
    prop_set = PropSet([{"a": 1}])
    prop_map = PropMap([({"id": 1}, "one")])

    assert convert_to_serialized_form(prop_set) == (5, '[[0,{"a":[0,1]}]]')
    assert convert_to_serialized_form(prop_map) == (4, '[[1,"[[0,{\\"id\\":[0,1]}],[0,\\"one\\"]]"]]')
