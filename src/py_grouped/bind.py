"""Row and column binding of (possibly grouped) tables."""

from .column import Column
from .errors import GroupedTableValueError, ShapeMismatchError
from .grouped import GroupedTable, grouped_table
from .naming import _uniquify
from .table import Table


def _collect(tables):
	if len(tables) == 1 and isinstance(tables[0], (list, tuple)):
		tables = tables[0]
	tables = [t for t in tables if t is not None]
	for idx, t in enumerate(tables):
		if not isinstance(t, (Table, GroupedTable)):
			raise GroupedTableValueError(
				f"Can only bind tables, got {type(t).__name__} at position {idx}"
			)
	return tables


def _regroup_like(first, out):
	if isinstance(first, GroupedTable):
		return grouped_table(out, first.group_vars())
	return out


def bind_rows(*tables):
	"""
	Stack tables row-wise, matching columns by name.

	Columns missing from some inputs are filled with None; column order is
	order of first appearance. A grouped first input groups the result the
	same way.
	"""
	tables = _collect(tables)
	if not tables:
		return Table()
	plain = [t.ungroup() for t in tables]

	names = []
	for t in plain:
		names.extend(n for n in t.names if n not in names)

	cols = []
	for name in names:
		parts = [
			t.column(name) if name in t else Column([None] * len(t), name=name)
			for t in plain
		]
		cols.append(Column.concat(parts, name=name))

	out = Table(cols, nrow=sum(len(t) for t in plain))
	return _regroup_like(tables[0], out)


def bind_cols(*tables):
	"""
	Place tables side by side. Row counts must match; repeated column names
	get __2, __3 suffixes.
	"""
	tables = _collect(tables)
	if not tables:
		return Table()
	plain = [t.ungroup() for t in tables]

	nrows = {len(t) for t in plain}
	if len(nrows) > 1:
		raise ShapeMismatchError(
			f"Cannot bind columns of tables with different row counts: {sorted(nrows)}"
		)

	seen = set()
	cols = []
	for t in plain:
		for col in t.cols():
			name = _uniquify(col.name, seen)
			seen.add(name)
			cols.append(col.rename(name))

	out = Table(cols, nrow=len(plain[0]))
	return _regroup_like(tables[0], out)
