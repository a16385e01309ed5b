"""
Group index: the partition of a table's rows by key columns.

A GroupIndex holds one row per distinct key combination (``keys``) and,
in parallel, the row positions belonging to it (``rows``). Groups are
ordered by key value, missing values last, so the index is the same for
any row order of the same data.

Grouping metadata is either lazy (names only) or resolved (a full
GroupIndex). Reads that need counts, sizes or rows resolve it once.
"""

from __future__ import annotations
from dataclasses import dataclass

from .column import Column
from .errors import GroupedTableTypeError, ShapeMismatchError
from .naming import format_label
from .table import Table
from .typing import is_missing


class GroupIndex:
	""" Key table plus the row positions of every group """
	__slots__ = ('_vars', '_keys', '_rows')

	def __init__(self, keys, rows):
		if len(keys) != len(rows):
			raise ShapeMismatchError(f"{len(keys)} key rows but {len(rows)} row groups")
		self._vars = keys.names
		self._keys = keys
		self._rows = tuple(tuple(r) for r in rows)

	@classmethod
	def build(cls, table, names):
		"""
		Partition the rows of ``table`` by the values of the ``names`` columns.

		Hash partition in row order, then sort the distinct keys, so the cost
		is O(n + g log g) for n rows and g groups.

		Raises:
			UnknownColumnError: A key column does not exist
			GroupedTableTypeError: A key value is unhashable
		"""
		names = list(names)
		key_cols = [table.column(n) for n in names]
		data = [c._underlying for c in key_cols]

		partition = {}
		for row_idx in range(len(table)):
			# NaN != NaN, so every missing value collapses onto None
			key = tuple(None if is_missing(col[row_idx]) else col[row_idx] for col in data)
			try:
				bucket = partition.get(key)
			except TypeError as e:
				raise GroupedTableTypeError(
					f"Grouping key at row {row_idx} is not hashable: {key!r}"
				) from e
			if bucket is None:
				partition[key] = [row_idx]
			else:
				bucket.append(row_idx)

		distinct = list(partition)
		keys = Table(
			[Column([k[j] for k in distinct], name=n, dtype=c._dtype) for j, (n, c) in enumerate(zip(names, key_cols))],
			nrow=len(distinct),
		)
		order = keys.order(names)
		return cls(keys.take(order), [partition[distinct[o]] for o in order])

	@property
	def vars(self):
		return list(self._vars)

	def group_count(self):
		return len(self._rows)

	def group_sizes(self):
		return [len(r) for r in self._rows]

	def group_rows(self):
		return self._rows

	def group_keys(self):
		return self._keys

	def key(self, g):
		"""Key tuple of group ``g``."""
		return tuple(col[g] for col in self._keys.cols())

	def labels(self, sep=None):
		"""One formatted label per group, e.g. "a_1" for keys ("a", 1)."""
		return [format_label(self.key(g), sep) for g in range(len(self._rows))]

	def group_data(self):
		"""Key columns plus a ``.rows`` column holding each group's positions."""
		return self._keys.with_column(".rows", Column(self._rows, dtype=object))

	def check_partition(self, nrow):
		"""True if the groups cover 0..nrow-1 exactly once."""
		seen = sorted(i for rows in self._rows for i in rows)
		return seen == list(range(nrow))

	def __repr__(self):
		return f"GroupIndex(vars={self._vars!r}, groups={len(self._rows)})"


@dataclass(frozen=True)
class LazyGroups:
	"""Grouping recorded by name only; the partition is not built yet."""
	names: tuple

	@property
	def vars(self):
		return list(self.names)

	def resolve(self, table):
		return ResolvedGroups(GroupIndex.build(table, self.names))


@dataclass(frozen=True)
class ResolvedGroups:
	"""Grouping with its partition materialized."""
	index: GroupIndex

	@property
	def vars(self):
		return self.index.vars

	def resolve(self, table):
		return self
