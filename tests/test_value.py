"""Tests for the value model."""

from collections import OrderedDict
from decimal import Decimal
from fractions import Fraction

import numpy as np
import pytest

from diffai.errors import ConversionError
from diffai.value import (
    ValueKind,
    join_index,
    join_key,
    join_paths,
    kind_of,
    to_value,
)


class TestValueKind:
    """Tests for kind_of."""

    def test_kinds(self):
        assert kind_of(None) is ValueKind.NULL
        assert kind_of(True) is ValueKind.BOOL
        assert kind_of(1.5) is ValueKind.NUMBER
        assert kind_of("x") is ValueKind.STRING
        assert kind_of([1.0]) is ValueKind.SEQUENCE
        assert kind_of({"a": 1.0}) is ValueKind.MAPPING

    def test_plain_int_is_number(self):
        assert kind_of(1) is ValueKind.NUMBER
        assert kind_of(True) is ValueKind.BOOL

    def test_non_canonical(self):
        with pytest.raises(ConversionError):
            kind_of(np.float64(1.0))
        with pytest.raises(ConversionError):
            kind_of((1.0,))


class TestPaths:
    """Tests for path rendering."""

    def test_join_key(self):
        assert join_key("", "a") == "a"
        assert join_key("layers[0]", "weight") == "layers[0].weight"

    def test_join_index(self):
        assert join_index("", 0) == "[0]"
        assert join_index("layers", 3) == "layers[3]"

    def test_join_paths(self):
        assert join_paths("model.json", "") == "model.json"
        assert join_paths("", "a.b") == "a.b"
        assert join_paths("model.json", "a.b") == "model.json.a.b"
        assert join_paths("w.npy", "[2][1]") == "w.npy[2][1]"


class TestToValue:
    """Tests for host conversion."""

    def test_scalars(self):
        assert to_value(None) is None
        assert to_value(True) is True
        assert to_value("text") == "text"

    def test_integers_become_floats(self):
        value = to_value(3)
        assert value == 3.0
        assert type(value) is float

    def test_other_real_numbers(self):
        assert to_value(Decimal("1.5")) == 1.5
        assert to_value(Fraction(1, 4)) == 0.25
        assert type(to_value(np.int64(7))) is float
        assert type(to_value(np.float32(0.5))) is float

    def test_unconvertible_numbers(self):
        with pytest.raises(ConversionError, match="Decimal"):
            to_value(Decimal("sNaN"))
        with pytest.raises(ConversionError):
            to_value(10 ** 400)
        with pytest.raises(ConversionError):
            to_value([1, 10 ** 400])

    def test_numpy_bool(self):
        assert to_value(np.bool_(True)) is True

    def test_bool_is_not_number(self):
        assert to_value([True, 1]) == [True, 1.0]
        assert kind_of(to_value([True, 1])[0]) is ValueKind.BOOL

    def test_tuple_becomes_list(self):
        assert to_value((1, (2, 3))) == [1.0, [2.0, 3.0]]

    def test_mapping_order_preserved(self):
        value = to_value(OrderedDict([("z", 1), ("a", 2), ("m", 3)]))
        assert list(value) == ["z", "a", "m"]

    def test_non_string_keys(self):
        assert to_value({1: "one"}) == {"1": "one"}

    def test_colliding_keys(self):
        with pytest.raises(ConversionError, match="Duplicate"):
            to_value({1: "int", "1": "str"})

    def test_numpy_array(self):
        arr = np.arange(6, dtype=np.int32).reshape(2, 3)
        assert to_value(arr) == [[0.0, 1.0, 2.0], [3.0, 4.0, 5.0]]

    def test_nested_structure(self):
        host = {"layers": [{"weight": np.array([1.0, 2.0]), "bias": 0}]}
        assert to_value(host) == {"layers": [{"weight": [1.0, 2.0], "bias": 0.0}]}

    def test_unsupported_types(self):
        with pytest.raises(ConversionError, match="set"):
            to_value({1, 2})
        with pytest.raises(ConversionError):
            to_value(b"bytes")
        with pytest.raises(ConversionError):
            to_value(1j)
        with pytest.raises(ConversionError):
            to_value(object())

    def test_cycle_in_list(self):
        data = [1, 2]
        data.append(data)
        with pytest.raises(ConversionError, match="cycle"):
            to_value(data)

    def test_cycle_in_dict(self):
        data = {"a": {"b": {}}}
        data["a"]["b"]["back"] = data
        with pytest.raises(ConversionError, match="cycle"):
            to_value(data)

    def test_shared_reference_is_not_cycle(self):
        shared = {"x": 1}
        value = to_value({"a": shared, "b": shared, "c": [shared, shared]})
        assert value["a"] == value["b"] == {"x": 1.0}
        assert value["c"] == [{"x": 1.0}, {"x": 1.0}]

    def test_deep_nesting(self):
        host = 1
        for _ in range(5000):
            host = [host]
        value = to_value(host)
        for _ in range(5000):
            value = value[0]
        assert value == 1.0

    def test_result_does_not_alias_input(self):
        host = {"a": [1.0, 2.0]}
        value = to_value(host)
        value["a"].append(3.0)
        assert host == {"a": [1.0, 2.0]}
