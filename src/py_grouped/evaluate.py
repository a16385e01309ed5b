"""
Per-group evaluation (``do``).

For every group, in key order, each expression is evaluated against a
GroupContext whose ``data`` is the group's rows. Assigning to ``data``
writes the rows back into a private copy of the table owned by this one
call: later expressions and later groups see the write, the caller's
table never does.
"""

from __future__ import annotations
from collections.abc import Mapping
import builtins

from tqdm import tqdm

from .bind import bind_cols, bind_rows
from .column import Column
from .errors import (
	GroupedTableTypeError,
	GroupedTableValueError,
	NameConflictError,
	ShapeMismatchError,
	_missing_col_error,
)
from .grouped import GroupedTable, grouped_table
from .naming import format_label
from .table import Table


# Seconds a do() call must run before its progress bar is drawn
PROGRESS_DELAY = 2
# Column name for scalar results in table output
SCALAR_COLUMN = "value"


class GroupContext:
	""" The current group's view of the table during one do() call """

	def __init__(self, base, rows, keys=None):
		self._base = base
		self._names = base.names
		self._rows = rows
		self._keys = keys
		# Columns replaced by write-back, as mutable lists over all rows
		self._written = {}
		self.group = 0

	@property
	def rows(self):
		"""Row positions of the current group in the ungrouped table."""
		return self._rows[self.group]

	@property
	def n(self):
		return len(self._rows[self.group])

	@property
	def key(self):
		if self._keys is None:
			return ()
		return tuple(col[self.group] for col in self._keys.cols())

	@property
	def label(self):
		return format_label(self.key)

	def column(self, name):
		"""One column of the current group's rows."""
		if name not in self._names:
			raise _missing_col_error(name, context="group data")
		positions = self._rows[self.group]
		written = self._written.get(name)
		if written is None:
			return self._base.column(name).take(positions)
		return Column([written[i] for i in positions], name=name)

	@property
	def data(self):
		"""The current group's rows, all columns, in table column order."""
		return Table([self.column(n) for n in self._names], nrow=self.n)

	@data.setter
	def data(self, value):
		positions = self._rows[self.group]
		if isinstance(value, dict):
			value = Table(value)
		if isinstance(value, GroupedTable):
			value = value.ungroup()
		if not isinstance(value, Table):
			raise GroupedTableTypeError(
				f"Group data can only be replaced by a Table, got {type(value).__name__}"
			)
		if len(value) != len(positions):
			raise ShapeMismatchError(
				f"Replacement has {len(value)} rows, but group {self.group} has {len(positions)}"
			)
		for name in value.names:
			if name not in self._names:
				raise _missing_col_error(name, context="group data")

		for col in value.cols():
			name = col.name
			target = self._written.get(name)
			if target is None:
				target = list(self._base.column(name))
				self._written[name] = target
			for pos, v in zip(positions, col):
				target[pos] = v

	def __repr__(self):
		return f"GroupContext(group={self.group}, key={self.key!r}, n={self.n})"


class _Overscope(Mapping):
	"""Name lookup for string expressions: ``_``/``data`` and column names."""

	def __init__(self, ctx):
		self._ctx = ctx

	def __getitem__(self, name):
		if name in ('_', 'data'):
			return self._ctx.data
		if name == 'ctx':
			return self._ctx
		if name in self._ctx._names:
			return self._ctx.column(name)
		raise KeyError(name)

	def __iter__(self):
		return iter(['_', 'data', 'ctx'] + self._ctx._names)

	def __len__(self):
		return 3 + len(self._ctx._names)


# Builtins visible to string expressions
_SAFE_BUILTINS = {
	name: getattr(builtins, name) for name in (
		'abs', 'all', 'any', 'bool', 'dict', 'enumerate', 'filter', 'float', 'int',
		'isinstance', 'len', 'list', 'map', 'max', 'min', 'range', 'reversed',
		'round', 'set', 'sorted', 'str', 'sum', 'tuple', 'zip',
	)
}
_GLOBALS = {'__builtins__': _SAFE_BUILTINS, 'Table': Table, 'Column': Column}


def _as_evaluator(expr):
	if isinstance(expr, str):
		code = compile(expr, f"<do: {expr}>", "eval")

		def evaluate(ctx):
			return eval(code, _GLOBALS, _Overscope(ctx))

		return evaluate
	if callable(expr):
		return expr
	raise GroupedTableValueError(
		f"do() expressions must be callables or strings, got {type(expr).__name__}"
	)


class GroupResults(Mapping):
	"""
	do() output with named expressions: for each expression, its results
	keyed by group label, in group order.
	"""

	def __init__(self, keys, labels, results):
		self._keys = keys
		self._labels = list(labels)
		self._results = results

	@property
	def group_keys(self):
		return self._keys

	@property
	def labels(self):
		return list(self._labels)

	def values_of(self, name):
		"""Per-group results of one expression as a list, in group order."""
		return list(self._results[name])

	def __getitem__(self, name):
		return dict(zip(self._labels, self._results[name]))

	def __iter__(self):
		return iter(self._results)

	def __len__(self):
		return len(self._results)

	def to_table(self):
		"""Key columns plus one object column per expression."""
		out = self._keys
		for name, values in self._results.items():
			out = out.with_column(name, Column(values, name=name, dtype=object))
		return out

	def __repr__(self):
		return f"GroupResults({list(self._results)!r}, groups={len(self._labels)})"


def _is_scalar(value):
	return not isinstance(value, (list, tuple, set, frozenset, dict, range, Table, Column, GroupedTable))


def _as_result_table(value, group):
	if isinstance(value, GroupedTable):
		value = value.ungroup()
	if isinstance(value, Table):
		return value
	if isinstance(value, Column):
		return Table([value if value.name is not None else value.rename(SCALAR_COLUMN)])
	if isinstance(value, dict):
		for k, v in value.items():
			if not _is_scalar(v):
				raise ShapeMismatchError(
					f"Result for group {group} has a non-scalar value in column '{k}'"
				)
		return Table({k: [v] for k, v in value.items()})
	if _is_scalar(value):
		return Table([Column([value], name=SCALAR_COLUMN)])
	raise ShapeMismatchError(
		f"Result for group {group} is a {type(value).__name__}, not a table, dict or scalar; "
		"name the expression to collect arbitrary results"
	)


def _label_output_table(keys, results):
	tables = [_as_result_table(res, g) for g, res in enumerate(results)]
	data = bind_rows(tables)

	# Key columns the results already carry are taken from the results
	label_names = [n for n in keys.names if n not in data.names]
	repeat = [g for g, t in enumerate(tables) for _ in range(len(t))]
	labels = keys.select_columns(label_names).take(repeat)

	out = bind_cols(labels, data) if label_names else data
	return grouped_table(out, keys.names)


def do_groups(base, keys, rows, exprs, named_exprs, progress=True):
	"""
	Evaluate ``exprs``/``named_exprs`` for every group of ``base``.

	Args:
		base: The ungrouped table
		keys: One row of key values per group (zero columns when ungrouped)
		rows: Row positions of each group, parallel to ``keys``
		exprs: Positional expressions
		named_exprs: {name: expression}
		progress: Draw a progress bar for long evaluations

	Returns:
		Table (grouped by the key columns) for a single positional expression,
		otherwise GroupResults

	Raises:
		ShapeMismatchError: Bad write-back, or a result that cannot be row-bound
	"""
	args = [(f"V{j + 1}", expr) for j, expr in enumerate(exprs)]
	for name, expr in named_exprs.items():
		if any(name == n for n, _ in args):
			raise NameConflictError(f"do() expression name '{name}' is used twice")
		args.append((name, expr))
	if not args:
		raise GroupedTableValueError("do() needs at least one expression")

	table_output = len(exprs) == 1 and not named_exprs
	evaluators = [(name, _as_evaluator(expr)) for name, expr in args]

	n = len(rows)
	m = len(evaluators)

	# Zero groups: evaluate once on the empty table to learn the result shape
	if n == 0:
		if table_output:
			ctx = GroupContext(base, [tuple(range(len(base)))])
			sample = evaluators[0][1](ctx)
			return _label_output_table(keys, [_as_result_table(sample, 0).take([])])
		return GroupResults(keys, [], {name: [] for name, _ in evaluators})

	ctx = GroupContext(base, rows, keys)
	out = [[None] * n for _ in range(m)]

	with tqdm(total=n * m, desc="do", delay=PROGRESS_DELAY, disable=not progress, leave=False) as bar:
		for g in range(n):
			ctx.group = g
			for j, (_, evaluate) in enumerate(evaluators):
				out[j][g] = evaluate(ctx)
				bar.update(1)

	if table_output:
		return _label_output_table(keys, out[0])
	labels = [format_label(tuple(col[g] for col in keys.cols())) for g in range(n)]
	return GroupResults(keys, labels, {name: out[j] for j, (name, _) in enumerate(evaluators)})
