from __future__ import annotations

from .errors import GroupedTableValueError, ShapeMismatchError
from .typing import DataType, infer_dtype, is_missing


class Column():
	""" Immutable named vector of values with an inferred dtype """
	__slots__ = ('_underlying', '_name', '_dtype')

	def __init__(self, values=(), name=None, dtype=None):
		if isinstance(values, Column):
			values = values._underlying
		if isinstance(values, (str, bytes)):
			raise GroupedTableValueError("Column values must be an iterable of scalars, not a string")
		self._underlying = tuple(values)
		self._name = name
		if dtype is not None and not isinstance(dtype, DataType):
			dtype = DataType(dtype, nullable=any(is_missing(v) for v in self._underlying))
		self._dtype = dtype if dtype is not None else infer_dtype(self._underlying)

	@property
	def name(self):
		return self._name

	@property
	def dtype(self):
		return self._dtype

	def __len__(self):
		return len(self._underlying)

	def __iter__(self):
		return iter(self._underlying)

	def __getitem__(self, key):
		if isinstance(key, int):
			return self._underlying[key]
		if isinstance(key, slice):
			return Column(self._underlying[key], name=self._name, dtype=self._dtype)
		if isinstance(key, Column):
			key = key._underlying
		key = list(key)
		if key and all(isinstance(k, bool) for k in key):
			if len(key) != len(self):
				raise ShapeMismatchError(
					f"Boolean mask has length {len(key)}, but column has {len(self)} values"
				)
			return Column((v for v, keep in zip(self._underlying, key) if keep),
				name=self._name, dtype=self._dtype)
		return self.take(key)

	def take(self, positions):
		"""Values at the given row positions, in that order (repeats allowed)."""
		data = self._underlying
		return Column(tuple(data[i] for i in positions), name=self._name, dtype=self._dtype)

	def rename(self, new_name):
		return Column(self._underlying, name=new_name, dtype=self._dtype)

	def copy(self, name=...):
		return Column(self._underlying, name=self._name if name is ... else name, dtype=self._dtype)

	def to_list(self):
		return list(self._underlying)

	def __eq__(self, other):
		if not isinstance(other, Column):
			return NotImplemented
		return self._name == other._name and self._underlying == other._underlying

	__hash__ = None

	def __repr__(self):
		from .display import _printr
		return _printr(self)

	# ------------------------------------------------------------
	# Small reductions; missing values are skipped
	# ------------------------------------------------------------

	def isna(self):
		return Column((is_missing(v) for v in self._underlying), name=self._name, dtype=bool)

	def _clean(self):
		return [v for v in self._underlying if not is_missing(v)]

	def unique(self):
		seen = set()
		out = []

		# Fast path: hashable
		try:
			for x in self._underlying:
				if x not in seen:
					seen.add(x)
					out.append(x)
			return Column(out, name=self._name)
		except TypeError:
			pass

		# Slow path: unhashables
		out = []
		for x in self._underlying:
			if not any(x == y for y in out):
				out.append(x)
		return Column(out, name=self._name)

	def sum(self):
		return sum(self._clean())

	def mean(self):
		clean = self._clean()
		return sum(clean) / len(clean) if clean else None

	def min(self):
		clean = self._clean()
		return min(clean) if clean else None

	def max(self):
		clean = self._clean()
		return max(clean) if clean else None

	@staticmethod
	def concat(columns, name=...):
		"""Stack columns end to end, promoting the dtype as needed."""
		columns = list(columns)
		if not columns:
			return Column((), name=None if name is ... else name)
		values = []
		dtype = None
		nullable = False
		for col in columns:
			values.extend(col._underlying)
			# All-missing filler columns only lift nullability
			if all(is_missing(v) for v in col._underlying):
				nullable = nullable or len(col) > 0
				continue
			dtype = col._dtype if dtype is None else dtype.promote(col._dtype)
		if dtype is None:
			dtype = columns[0]._dtype
		if nullable and not dtype.nullable:
			dtype = DataType(dtype.kind, nullable=True)
		return Column(values, name=columns[0]._name if name is ... else name, dtype=dtype)
