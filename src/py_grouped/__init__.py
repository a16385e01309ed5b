"""
py-grouped: grouped tables for pure Python

A small columnar table with a grouping layer on top: partition rows by key
columns, evaluate arbitrary code once per group, and select, rename,
subset or deduplicate without losing track of the grouping.

Main classes:
    - Column: immutable named vector with an inferred dtype
    - Table: multiple columns of equal length
    - GroupedTable: a Table plus its partition into groups
    - GroupIndex: the key table and row positions of every group

Main functions:
    - grouped_table / Table.group_by: create a grouped table
    - GroupedTable.do: per-group evaluation
    - bind_rows / bind_cols: group-aware row and column binding
"""

from .column import Column
from .table import Table, TableLike
from .index import GroupIndex, LazyGroups, ResolvedGroups
from .grouped import GroupedTable, grouped_table, is_grouped
from .bind import bind_rows, bind_cols
from .evaluate import GroupContext, GroupResults
from .selection import Sym, sym, syms, matches, starts_with, ends_with, everything, exclude
from .typing import DataType
from .errors import (
	GroupedTableError,
	GroupedTableTypeError,
	GroupedTableValueError,
	GroupingNotice,
	InvalidKeySpecError,
	NameConflictError,
	ShapeMismatchError,
	UnknownColumnError,
)

__version__ = "0.1.0"
__all__ = [
	"Column",
	"Table",
	"TableLike",
	"GroupedTable",
	"GroupIndex",
	"LazyGroups",
	"ResolvedGroups",
	"GroupContext",
	"GroupResults",
	"DataType",
	"grouped_table",
	"is_grouped",
	"bind_rows",
	"bind_cols",
	"Sym",
	"sym",
	"syms",
	"matches",
	"starts_with",
	"ends_with",
	"everything",
	"exclude",
	"GroupedTableError",
	"GroupedTableTypeError",
	"GroupedTableValueError",
	"GroupingNotice",
	"InvalidKeySpecError",
	"NameConflictError",
	"ShapeMismatchError",
	"UnknownColumnError",
]
