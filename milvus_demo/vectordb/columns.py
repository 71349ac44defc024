#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Columnar batches for the Milvus insert call.

A Column holds one field's values for every entity of an insert. Columns are
built through typed constructors, or through generate_column_data which picks
the constructor from the declared field type.
"""

import numbers
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np
from pymilvus import DataType

from .exceptions import (
    ColumnTypeMismatchError,
    DimensionMismatchError,
    UnsupportedColumnTypeError,
)

INT32_MIN, INT32_MAX = -(2 ** 31), 2 ** 31 - 1
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1


def _is_integer(value: Any) -> bool:
    return isinstance(value, (numbers.Integral, np.integer)) and not isinstance(value, (bool, np.bool_))


def _is_float(value: Any) -> bool:
    return isinstance(value, (float, np.floating))


def _is_real(value: Any) -> bool:
    return _is_integer(value) or _is_float(value)


def _as_list(values: Any, expected: str) -> list:
    if isinstance(values, (str, bytes)) or not isinstance(values, (Sequence, np.ndarray)):
        raise ColumnTypeMismatchError(f"type assertion to {expected} failed: got {type(values).__name__}")
    return list(values)


def _check_items(values: list, predicate: Callable[[Any], bool], expected: str) -> None:
    for index, value in enumerate(values):
        if not predicate(value):
            raise ColumnTypeMismatchError(
                f"type assertion to {expected} failed: item {index} is {type(value).__name__}"
            )


def _check_range(values: list, low: int, high: int, expected: str) -> None:
    for index, value in enumerate(values):
        if not low <= int(value) <= high:
            raise ColumnTypeMismatchError(f"value {value} at item {index} overflows {expected}")


@dataclass(frozen=True)
class Column:
    """One field of a columnar insert batch."""
    name: str
    dtype: DataType
    values: tuple
    dim: Optional[int] = None

    def __len__(self) -> int:
        return len(self.values)

    def to_field_data(self) -> List[Any]:
        """Values in the shape Collection.insert expects for this field."""
        if self.dtype == DataType.FLOAT_VECTOR:
            return [list(vector) for vector in self.values]
        return list(self.values)

    @classmethod
    def int64(cls, name: str, values: Sequence[int]) -> "Column":
        items = _as_list(values, "[]int64")
        _check_items(items, _is_integer, "[]int64")
        _check_range(items, INT64_MIN, INT64_MAX, "int64")
        return cls(name, DataType.INT64, tuple(int(v) for v in items))

    @classmethod
    def int32(cls, name: str, values: Sequence[int]) -> "Column":
        items = _as_list(values, "[]int32")
        _check_items(items, _is_integer, "[]int32")
        _check_range(items, INT32_MIN, INT32_MAX, "int32")
        return cls(name, DataType.INT32, tuple(int(v) for v in items))

    @classmethod
    def double(cls, name: str, values: Sequence[float]) -> "Column":
        items = _as_list(values, "[]float64")
        _check_items(items, _is_float, "[]float64")
        return cls(name, DataType.DOUBLE, tuple(float(v) for v in items))

    @classmethod
    def varchar(cls, name: str, values: Sequence[str]) -> "Column":
        items = _as_list(values, "[]string")
        _check_items(items, lambda v: isinstance(v, str), "[]string")
        return cls(name, DataType.VARCHAR, tuple(items))

    @classmethod
    def float_vector(cls, name: str, vectors: Sequence[Sequence[float]]) -> "Column":
        rows = _as_list(vectors, "[][]float32")
        if not rows:
            raise DimensionMismatchError(f"cannot infer dimension of empty vector column {name}")

        parsed = []
        for row in rows:
            components = _as_list(row, "[][]float32")
            _check_items(components, _is_real, "[][]float32")
            parsed.append(components)

        dim = len(parsed[0])
        for index, components in enumerate(parsed):
            if len(components) != dim:
                raise DimensionMismatchError(
                    f"inconsistent vector dimensions: row {index} has {len(components)}, expected {dim}"
                )

        matrix = np.asarray(parsed, dtype=np.float32)
        return cls(name, DataType.FLOAT_VECTOR, tuple(tuple(float(x) for x in row) for row in matrix), dim)


_COLUMN_BUILDERS: Dict[DataType, Callable[[str, Any], Column]] = {
    DataType.INT64: Column.int64,
    DataType.INT32: Column.int32,
    DataType.DOUBLE: Column.double,
    DataType.VARCHAR: Column.varchar,
    DataType.FLOAT_VECTOR: Column.float_vector,
}


def supported_types() -> List[DataType]:
    return list(_COLUMN_BUILDERS)


def generate_column_data(name: str, field_type: DataType, values: Any) -> Column:
    """
    Build a column for a declared field type.

    Args:
        name: Field name in the collection schema.
        field_type: Declared pymilvus DataType of the field.
        values: One value per entity; one vector per entity for vector fields.

    Returns:
        Column: the validated column.

    Raises:
        ColumnTypeMismatchError: values do not match the declared type.
        DimensionMismatchError: vectors of a vector column differ in length.
        UnsupportedColumnTypeError: no constructor exists for field_type.
    """
    builder = _COLUMN_BUILDERS.get(field_type)
    if builder is None:
        raise UnsupportedColumnTypeError(f"unsupported column type: {field_type}")
    return builder(name, values)
