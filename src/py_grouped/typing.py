"""
Column data types.

A DataType is the Python kind of a column's values plus whether the column
holds missing values. Kinds widen along two ladders (bool < int < float <
complex, date < datetime); any other mix becomes ``object``.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional, Type
import math


_LADDERS = (
    (bool, int, float, complex),
    (date, datetime),
)

# Most specific first: bool before int, datetime before date
_SCALAR_KINDS = (bool, int, float, complex, str, bytes, datetime, date)


def _common_kind(a: Type, b: Type) -> Type:
    if a is b:
        return a
    for ladder in _LADDERS:
        if a in ladder and b in ladder:
            return ladder[max(ladder.index(a), ladder.index(b))]
    return object


@dataclass(frozen=True)
class DataType:
    """
    >>> DataType(int)
    <int>
    >>> DataType(int, nullable=True).promote(DataType(float))
    <float nullable>
    """

    kind: Type[Any]
    nullable: bool = False

    def __repr__(self):
        suffix = " nullable" if self.nullable else ""
        return f"<{self.kind.__name__}{suffix}>"

    def promote(self, other: "DataType") -> "DataType":
        """Smallest dtype holding values of both, e.g. when row-binding columns."""
        return DataType(_common_kind(self.kind, other.kind), self.nullable or other.nullable)


def is_missing(value: Any) -> bool:
    """Missing-value predicate shared by every column: None or NaN."""
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def infer_kind(value: Any) -> Optional[Type]:
    """Kind of a single scalar; None for None."""
    if value is None:
        return None
    for kind in _SCALAR_KINDS:
        if isinstance(value, kind):
            return kind
    return object


def infer_dtype(values: Iterable[Any]) -> DataType:
    """
    >>> infer_dtype([1, None, 2.5])
    <float nullable>
    >>> infer_dtype([])
    <object nullable>
    """
    kind = None
    nullable = False
    for v in values:
        if v is None:
            nullable = True
            continue
        v_kind = infer_kind(v)
        kind = v_kind if kind is None else _common_kind(kind, v_kind)

    # Nothing but None (or nothing at all)
    if kind is None:
        return DataType(object, nullable=True)
    return DataType(kind, nullable)
