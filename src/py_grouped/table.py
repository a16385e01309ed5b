from __future__ import annotations

from typing import Protocol

from .column import Column
from .errors import (
	GroupedTableValueError,
	NameConflictError,
	ShapeMismatchError,
	_missing_col_error,
)
from .naming import _sanitize_user_name, _uniquify
from .typing import is_missing


class TableLike(Protocol):
	"""Verbs shared by plain and grouped tables."""

	def group_vars(self) -> list[str]: ...

	def n_groups(self) -> int: ...

	def group_size(self) -> list[int]: ...

	def ungroup(self) -> "Table": ...

	def select(self, *selectors, **renames) -> "TableLike": ...

	def rename(self, mapping=None, **renames) -> "TableLike": ...

	def distinct(self, *cols, keep_all=False) -> "TableLike": ...

	def do(self, *exprs, progress=True, **named_exprs): ...


class _RowView:
	"""Lightweight row view for iterating over table rows with attribute access."""
	__slots__ = ('_cols', '_names', '_column_map', '_index')

	def __init__(self, table, index):
		# Cache direct handles to underlying data (bypasses Column method dispatch)
		self._cols = [col._underlying for col in table._underlying]
		self._names = table.names
		self._column_map = table._column_map
		self._index = index

	def set_index(self, index):
		"""Reuse this row view for a different index (avoids allocation during iteration)."""
		self._index = index
		return self

	def __getattr__(self, attr):
		col_idx = self._column_map.get(attr.lower())
		if col_idx is None:
			raise AttributeError(f"Row has no attribute '{attr}'")
		return self._cols[col_idx][self._index]

	def __getitem__(self, key):
		# Fast path: integer indexing
		try:
			return self._cols[key][self._index]
		except TypeError:
			if isinstance(key, str):
				if key in self._names:
					return self._cols[self._names.index(key)][self._index]
				return getattr(self, key)
			raise TypeError(f"Row indices must be int or str, not {type(key).__name__}")

	def __iter__(self):
		idx = self._index
		for col in self._cols:
			yield col[idx]

	def __len__(self):
		return len(self._cols)

	def __repr__(self):
		idx = self._index
		values = [repr(col[idx]) for col in self._cols]
		return f"Row({idx}: {', '.join(values)})"


def _sort_value(v):
	"""Per-cell sort key; missing values sort after everything else."""
	if is_missing(v):
		return (1, 0)
	return (0, v)


def _is_real(v):
	return isinstance(v, (bool, int, float))


def _bucket_sort_value(v):
	"""Per-cell key for mixed columns: numbers together by value, then one bucket per type."""
	if is_missing(v):
		return (1,)
	if _is_real(v):
		return (0, 0, "", v)
	return (0, 1, type(v).__name__, v)


def _repr_sort_value(v):
	# Last resort: values unorderable even within their own type compare by repr
	if is_missing(v):
		return (1,)
	if _is_real(v):
		return (0, 0, "", v)
	if isinstance(v, str):
		return (0, 1, "str", v)
	return (0, 1, type(v).__name__, repr(v))


class Table():
	""" Multiple named columns of the same length """

	def __init__(self, initial=(), nrow=None):
		if isinstance(initial, Table):
			initial = initial._underlying
		if isinstance(initial, dict):
			initial = [Column(values, name=col_name) for col_name, values in initial.items()]

		cols = []
		for idx, col in enumerate(initial):
			if not isinstance(col, Column):
				raise GroupedTableValueError(
					f"Table columns must be Column objects, got {type(col).__name__} at position {idx}"
				)
			if col._name is None:
				col = col.rename(f"V{idx + 1}")
			cols.append(col)

		lengths = {len(c) for c in cols}
		if len(lengths) > 1:
			raise GroupedTableValueError(
				"All columns must have the same length, got lengths "
				+ ", ".join(f"{c._name}={len(c)}" for c in cols)
			)

		names = [c._name for c in cols]
		dupes = sorted({n for n in names if names.count(n) > 1})
		if dupes:
			raise NameConflictError(f"Duplicate column names: {', '.join(dupes)}")

		if cols:
			self._length = len(cols[0])
		else:
			# Zero-column tables still remember their row count
			self._length = nrow or 0
		self._underlying = tuple(cols)
		self._names = names

		# Build column map once for fast attribute access
		self._column_map = self._build_column_map()

	def _build_column_map(self):
		"""Build mapping from sanitized column names to column indices."""
		column_map = {}
		seen = set()
		for idx, col in enumerate(self._underlying):
			base = _sanitize_user_name(col._name)
			if base is None:
				sanitized = f'col{idx}_'
			else:
				sanitized = _uniquify(base, seen)
				seen.add(sanitized)
			column_map[sanitized] = idx
		return column_map

	# ------------------------------------------------------------
	# Introspection
	# ------------------------------------------------------------

	def __len__(self):
		return self._length

	@property
	def nrow(self):
		return self._length

	@property
	def ncol(self):
		return len(self._underlying)

	@property
	def names(self):
		return list(self._names)

	@property
	def columns(self):
		return self._underlying

	def cols(self):
		return self._underlying

	def size(self):
		return (self._length, len(self._underlying))

	def __contains__(self, name):
		return name in self._names

	def __dir__(self):
		base_attrs = object.__dir__(self)
		return sorted(set(base_attrs + list(self._column_map.keys())))

	def __getattr__(self, attr):
		"""Access columns by sanitized attribute name using pre-computed column map."""
		if attr.startswith('_'):
			raise AttributeError(attr)
		col_idx = self._column_map.get(attr.lower())
		if col_idx is not None:
			return self._underlying[col_idx]
		raise AttributeError(f"{self.__class__.__name__!s} object has no attribute '{attr}'")

	def __iter__(self):
		"""Iterate over rows using a reusable _RowView for memory efficiency."""
		row_view = _RowView(self, 0)
		for i in range(len(self)):
			row_view.set_index(i)
			yield row_view

	def __eq__(self, other):
		if not isinstance(other, Table):
			return NotImplemented
		return (self._length == other._length
			and self._names == other._names
			and all(a._underlying == b._underlying for a, b in zip(self._underlying, other._underlying)))

	__hash__ = None

	def __repr__(self):
		from .display import _printr
		return _printr(self)

	# ------------------------------------------------------------
	# Primitives: column lookup, row/column subsetting
	# ------------------------------------------------------------

	def column(self, name):
		"""Column by exact name, falling back to its sanitized attribute name."""
		if isinstance(name, str):
			if name in self._names:
				return self._underlying[self._names.index(name)]
			col_idx = self._column_map.get(name.lower())
			if col_idx is not None:
				return self._underlying[col_idx]
		raise _missing_col_error(name)

	def take(self, positions):
		"""Row subset by position (order kept, repeats allowed)."""
		positions = list(positions)
		return Table([col.take(positions) for col in self._underlying], nrow=len(positions))

	def select_columns(self, names):
		"""Column subset by canonical name, in the order given."""
		return Table([self.column(n) for n in names], nrow=self._length)

	def _row_positions(self, key):
		n = self._length
		if isinstance(key, bool):
			raise GroupedTableValueError("A single boolean is not a valid row index")
		if isinstance(key, int):
			if not -n <= key < n:
				raise IndexError(f"Row {key} out of range for table with {n} rows")
			return [key % n]
		if isinstance(key, slice):
			return list(range(n))[key]
		if isinstance(key, Column):
			key = key._underlying
		key = list(key)
		if key and all(isinstance(k, bool) for k in key):
			if len(key) != n:
				raise ShapeMismatchError(
					f"Boolean mask has length {len(key)}, but table has {n} rows"
				)
			return [i for i, keep in enumerate(key) if keep]
		for k in key:
			if not isinstance(k, int) or isinstance(k, bool):
				raise GroupedTableValueError(f"Row positions must be integers, got {type(k).__name__}")
			if not -n <= k < n:
				raise IndexError(f"Row {k} out of range for table with {n} rows")
		return [k % n for k in key]

	def _col_names(self, key):
		if isinstance(key, str):
			return [self.column(key)._name]
		if isinstance(key, int):
			return [self._names[key]]
		if isinstance(key, slice):
			return self._names[key]
		names = []
		for k in key:
			if isinstance(k, int) and not isinstance(k, bool):
				try:
					names.append(self._names[k])
				except IndexError:
					raise _missing_col_error(k) from None
			else:
				names.append(self.column(k)._name)
		return names

	def __getitem__(self, key):
		# Single column by name
		if isinstance(key, str):
			return self.column(key)

		# Column subset by names
		if isinstance(key, (tuple, list)) and key and all(isinstance(k, str) for k in key):
			return self.select_columns(self._col_names(key))

		# [rows, cols]
		if isinstance(key, tuple):
			if len(key) != 2:
				raise GroupedTableValueError("Table indexing takes [rows] or [rows, cols]")
			rows, cols = key
			out = self if rows is None or rows == slice(None) else self.take(self._row_positions(rows))
			if cols is None:
				return out
			return out.select_columns(out._col_names(cols))

		# Rows only
		return self.take(self._row_positions(key))

	def sort_key(self, names):
		"""Per-row comparison key over the named columns: lexicographic, missing last."""
		data = [self.column(n)._underlying for n in names]
		return lambda i: tuple(_sort_value(col[i]) for col in data)

	def order(self, names):
		"""Stable row ordering by the named columns."""
		positions = range(self._length)
		try:
			return sorted(positions, key=self.sort_key(names))
		except TypeError:
			pass
		data = [self.column(n)._underlying for n in names]
		try:
			return sorted(positions, key=lambda i: tuple(_bucket_sort_value(col[i]) for col in data))
		except TypeError:
			return sorted(positions, key=lambda i: tuple(_repr_sort_value(col[i]) for col in data))

	def with_column(self, name, values):
		"""New table with a column added (or replaced in place)."""
		col = values.rename(name) if isinstance(values, Column) else Column(values, name=name)
		if len(col) != self._length and self._underlying:
			raise ShapeMismatchError(
				f"Column '{name}' has length {len(col)}, but table has {self._length} rows"
			)
		cols = list(self._underlying)
		if name in self._names:
			cols[self._names.index(name)] = col
		else:
			cols.append(col)
		return Table(cols, nrow=len(col))

	def copy(self):
		return Table([col.copy() for col in self._underlying], nrow=self._length)

	def to_dict(self):
		return {col._name: list(col._underlying) for col in self._underlying}

	def to_rows(self):
		return [tuple(row) for row in self]

	# ------------------------------------------------------------
	# Verbs: an ungrouped table behaves as a single group
	# ------------------------------------------------------------

	def group_vars(self):
		return []

	def groups(self):
		return []

	def n_groups(self):
		return 1

	def group_size(self):
		return [self._length]

	def ungroup(self):
		return self

	def to_table(self):
		return self

	def group_by(self, *keys, add=False):
		from .grouped import grouped_table
		if len(keys) == 1 and isinstance(keys[0], (list, tuple)):
			keys = keys[0]
		return grouped_table(self, list(keys))

	def select(self, *selectors, **renames):
		from .selection import resolve_select
		pairs = resolve_select(self._names, selectors, renames)
		return Table([self.column(src).rename(out) for out, src in pairs], nrow=self._length)

	def rename(self, mapping=None, **renames):
		from .selection import resolve_rename
		new_names = resolve_rename(self._names, mapping, renames)
		return Table([col.rename(n) for col, n in zip(self._underlying, new_names)], nrow=self._length)

	def _distinct_positions(self, names):
		"""Positions of the first row for each distinct combination of the named columns."""
		data = [self.column(n)._underlying for n in names]
		seen = set()
		kept_keys = []
		keep = []
		for i in range(self._length):
			key = tuple(None if is_missing(col[i]) else col[i] for col in data)
			try:
				if key in seen:
					continue
				seen.add(key)
			except TypeError:
				# Unhashable cell: linear scan over the kept keys
				if key in kept_keys:
					continue
			kept_keys.append(key)
			keep.append(i)
		return keep

	def distinct(self, *cols, keep_all=False):
		from .selection import resolve_select
		if cols:
			names = [src for _, src in resolve_select(self._names, cols, {})]
		else:
			names = self.names
		out = self.take(self._distinct_positions(names))
		if keep_all:
			return out
		return out.select_columns(names)

	def do(self, *exprs, progress=True, **named_exprs):
		from .evaluate import do_groups
		keys = Table(nrow=1)
		return do_groups(self, keys, [tuple(range(self._length))], exprs, named_exprs, progress=progress)

	def bind_rows(self, *others):
		from .bind import bind_rows
		return bind_rows(self, *others)

	def bind_cols(self, *others):
		from .bind import bind_cols
		return bind_cols(self, *others)
