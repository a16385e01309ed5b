import warnings

from .errors import GroupedTableValueError, GroupingNotice, NameConflictError
from .index import GroupIndex, LazyGroups, ResolvedGroups
from .naming import commas
from .selection import resolve_group_keys, resolve_rename, resolve_select, syms
from .table import Table


def grouped_table(data, vars, lazy=False):
	"""
	Group ``data`` by the ``vars`` columns.

	Args:
		data: A Table (or GroupedTable, whose grouping is replaced)
		vars: Column name(s) or identifiers to group by
		lazy: Record the key names only and build the partition on first use

	Returns:
		GroupedTable, or the plain Table itself when ``vars`` resolves to no columns
	"""
	if isinstance(data, GroupedTable):
		data = data.ungroup()
	if not isinstance(data, Table):
		raise GroupedTableValueError(f"Can only group a Table, got {type(data).__name__}")

	names = resolve_group_keys(data.names, vars)
	if not names:
		return data
	if lazy:
		return GroupedTable(data, LazyGroups(tuple(names)))
	return GroupedTable(data, ResolvedGroups(GroupIndex.build(data, names)))


def is_grouped(x):
	return isinstance(x, GroupedTable)


class GroupedTable():
	""" A table partitioned into groups by one or more key columns """

	def __init__(self, table, groups):
		self._table = table
		self._groups = groups

	def _index(self):
		# One-way memoized transition: lazy -> resolved
		if isinstance(self._groups, LazyGroups):
			self._groups = self._groups.resolve(self._table)
		return self._groups.index

	# ------------------------------------------------------------
	# Group introspection
	# ------------------------------------------------------------

	def group_vars(self):
		return self._groups.vars

	def groups(self):
		return syms(self.group_vars())

	@property
	def is_resolved(self):
		return isinstance(self._groups, ResolvedGroups)

	def n_groups(self):
		return self._index().group_count()

	def group_size(self):
		return self._index().group_sizes()

	def group_rows(self):
		return self._index().group_rows()

	def group_keys(self):
		return self._index().group_keys()

	def group_labels(self, sep=None):
		return self._index().labels(sep)

	def group_data(self):
		return self._index().group_data()

	def ungroup(self):
		return self._table

	def to_table(self):
		return self._table

	# ------------------------------------------------------------
	# Table passthrough
	# ------------------------------------------------------------

	def __len__(self):
		return len(self._table)

	@property
	def nrow(self):
		return self._table.nrow

	@property
	def ncol(self):
		return self._table.ncol

	@property
	def names(self):
		return self._table.names

	@property
	def columns(self):
		return self._table.columns

	def cols(self):
		return self._table.cols()

	def size(self):
		return self._table.size()

	def column(self, name):
		return self._table.column(name)

	def __contains__(self, name):
		return name in self._table

	def __getattr__(self, attr):
		"""Access columns by sanitized attribute name."""
		if attr.startswith('_'):
			raise AttributeError(attr)
		col_idx = self._table._column_map.get(attr.lower())
		if col_idx is not None:
			return self._table.cols()[col_idx]
		raise AttributeError(f"{self.__class__.__name__!s} object has no attribute '{attr}'")

	def __iter__(self):
		return iter(self._table)

	def __eq__(self, other):
		if not isinstance(other, GroupedTable):
			return NotImplemented
		return self._table == other._table and self.group_vars() == other.group_vars()

	__hash__ = None

	def __repr__(self):
		from .display import _printr
		return _printr(self)

	def __getitem__(self, key):
		"""
		Subset like a Table. Grouping survives only if every group column does;
		otherwise the result is a plain Table.
		"""
		out = self._table[key]
		if not isinstance(out, Table):
			return out
		group_names = self.group_vars()
		if not all(name in out.names for name in group_names):
			return out
		return grouped_table(out, group_names)

	# ------------------------------------------------------------
	# Verbs
	# ------------------------------------------------------------

	def group_by(self, *keys, add=False):
		if len(keys) == 1 and isinstance(keys[0], (list, tuple)):
			keys = keys[0]
		keys = list(keys)
		if add:
			keys = self.group_vars() + keys
		return grouped_table(self._table, keys)

	def select(self, *selectors, notify=True, **renames):
		"""Select columns; grouping columns left out are added back in front."""
		pairs = resolve_select(self._table.names, selectors, renames)
		pairs = _ensure_group_vars(pairs, self.group_vars(), notify)

		outputs = [out for out, _ in pairs]
		dupes = sorted({n for n in outputs if outputs.count(n) > 1})
		if dupes:
			raise NameConflictError(f"Selection produces duplicate column names: {', '.join(dupes)}")

		table = Table([self._table.column(src).rename(out) for out, src in pairs], nrow=len(self._table))
		renamed = {src: out for out, src in pairs}
		return grouped_table(table, [renamed[v] for v in self.group_vars()])

	def rename(self, mapping=None, **renames):
		new_names = resolve_rename(self._table.names, mapping, renames)
		table = Table(
			[col.rename(n) for col, n in zip(self._table.cols(), new_names)],
			nrow=len(self._table),
		)
		renamed = dict(zip(self._table.names, new_names))
		new_vars = [renamed[v] for v in self.group_vars()]

		# Renaming never moves rows, so a resolved partition carries over
		if isinstance(self._groups, ResolvedGroups):
			index = self._groups.index
			keys = index.group_keys().rename(dict(zip(index.vars, new_vars)))
			return GroupedTable(table, ResolvedGroups(GroupIndex(keys, index.group_rows())))
		return GroupedTable(table, LazyGroups(tuple(new_vars)))

	def distinct(self, *cols, keep_all=False):
		"""
		Drop duplicate rows. Grouping columns always take part in the
		uniqueness key, whatever columns are requested.
		"""
		group_names = self.group_vars()
		if cols:
			requested = [src for _, src in resolve_select(self._table.names, cols, {})]
			dist_names = group_names + [c for c in requested if c not in group_names]
		else:
			dist_names = self._table.names

		out = self._table.take(self._table._distinct_positions(dist_names))
		if not keep_all:
			out = out.select_columns(dist_names)
		return grouped_table(out, group_names)

	def do(self, *exprs, progress=True, **named_exprs):
		"""
		Evaluate expressions once per group.

		Each expression is a callable taking a GroupContext (``ctx.data`` is
		the group's rows and may be assigned to) or a string evaluated with
		``_``/``data`` and the column names bound to the group's rows.
		String expressions see only a small set of builtins, but they are still
		evaluated as Python code: never pass strings from untrusted input.

		Returns:
			A GroupedTable-compatible Table for a single unnamed expression,
			otherwise a GroupResults keyed by expression name then group label
		"""
		from .evaluate import do_groups
		index = self._index()
		return do_groups(
			self._table, index.group_keys(), index.group_rows(),
			exprs, named_exprs, progress=progress,
		)

	def bind_rows(self, *others):
		from .bind import bind_rows
		return bind_rows(self, *others)

	def bind_cols(self, *others):
		from .bind import bind_cols
		return bind_cols(self, *others)


def _ensure_group_vars(pairs, group_names, notify=True):
	selected = [src for _, src in pairs]
	missing = [name for name in group_names if name not in selected]

	if missing:
		if notify:
			warnings.warn(
				f"Adding missing grouping variables: {commas(missing)}",
				GroupingNotice,
				stacklevel=3,
			)
		pairs = [[name, name] for name in missing] + pairs

	return pairs
