"""
Column identifiers and selectors.

Grouping keys, select() and rename() all talk about columns either by
literal name or through a small selector vocabulary. Everything here maps
that user intent to canonical column names before any row is touched.
"""

from __future__ import annotations
from dataclasses import dataclass
import re

from .column import Column
from .errors import (
	GroupedTableValueError,
	InvalidKeySpecError,
	NameConflictError,
	_missing_col_error,
)


@dataclass(frozen=True)
class Sym:
	"""An unevaluated column identifier (a bare column name)."""
	name: str

	def __repr__(self):
		return self.name


def sym(name):
	return Sym(name)


def syms(names):
	return [Sym(n) for n in names]


# ============================================================
# Selectors
# ============================================================

class _Selector:
	exclude = False

	def resolve(self, names):
		raise NotImplementedError


class _Matches(_Selector):
	def __init__(self, pattern):
		self._pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

	def resolve(self, names):
		return [n for n in names if self._pattern.search(n)]


class _StartsWith(_Selector):
	def __init__(self, prefix):
		self._prefix = prefix

	def resolve(self, names):
		return [n for n in names if n.startswith(self._prefix)]


class _EndsWith(_Selector):
	def __init__(self, suffix):
		self._suffix = suffix

	def resolve(self, names):
		return [n for n in names if n.endswith(self._suffix)]


class _Everything(_Selector):
	def resolve(self, names):
		return list(names)


class _Exclude(_Selector):
	exclude = True

	def __init__(self, selectors):
		self._selectors = selectors

	def resolve(self, names):
		out = []
		for sel in self._selectors:
			for n in _resolve_one(names, sel):
				if n not in out:
					out.append(n)
		return out


def matches(pattern):
	return _Matches(pattern)


def starts_with(prefix):
	return _StartsWith(prefix)


def ends_with(suffix):
	return _EndsWith(suffix)


def everything():
	return _Everything()


def exclude(*selectors):
	return _Exclude(selectors)


def _name_of(sel):
	if isinstance(sel, Sym):
		return sel.name
	if isinstance(sel, Column) and sel.name is not None:
		return sel.name
	return sel


def _resolve_one(names, sel):
	sel = _name_of(sel)
	if isinstance(sel, str):
		if sel not in names:
			raise _missing_col_error(sel)
		return [sel]
	if isinstance(sel, int) and not isinstance(sel, bool):
		try:
			return [names[sel]]
		except IndexError:
			raise _missing_col_error(sel) from None
	if isinstance(sel, re.Pattern):
		return _Matches(sel).resolve(names)
	if isinstance(sel, _Selector):
		return sel.resolve(names)
	if isinstance(sel, (list, tuple)):
		out = []
		for s in sel:
			out.extend(_resolve_one(names, s))
		return out
	raise GroupedTableValueError(f"Cannot select columns with {type(sel).__name__}: {sel!r}")


def _as_exclusion(names, sel):
	# "-name" is shorthand for exclude("name") unless a column is literally called that
	if isinstance(sel, str) and sel.startswith('-') and sel not in names:
		return _Exclude((sel[1:],))
	return sel


def resolve_select(names, selectors, renames):
	"""
	Resolve selectors and keyword renames to ordered (output, source) pairs.

	Args:
		names: Column names of the table, in order
		selectors: Positional selectors (names, Sym, positions, patterns, helpers)
		renames: {new_name: old_selector} selecting and renaming in one step

	Returns:
		List of [output_name, source_name] pairs, sources unique

	Raises:
		UnknownColumnError: A selector names an absent column or position
		NameConflictError: Two selected columns would share an output name
	"""
	names = list(names)
	selectors = [_as_exclusion(names, s) for s in selectors]

	chosen = []
	if selectors and isinstance(selectors[0], _Selector) and selectors[0].exclude:
		chosen = list(names)

	for sel in selectors:
		resolved = _resolve_one(names, sel)
		if isinstance(sel, _Selector) and sel.exclude:
			chosen = [n for n in chosen if n not in resolved]
		else:
			chosen.extend(n for n in resolved if n not in chosen)

	pairs = [[n, n] for n in chosen]
	for new, old in renames.items():
		sources = _resolve_one(names, old)
		if len(sources) != 1:
			raise GroupedTableValueError(f"Rename of '{new}' must select exactly one column")
		src = sources[0]
		for pair in pairs:
			if pair[1] == src:
				pair[0] = new
				break
		else:
			pairs.append([new, src])

	outputs = [p[0] for p in pairs]
	dupes = sorted({n for n in outputs if outputs.count(n) > 1})
	if dupes:
		raise NameConflictError(f"Selection produces duplicate column names: {', '.join(dupes)}")
	return pairs


def resolve_rename(names, mapping, renames):
	"""
	Resolve a rename request to the full list of resulting column names.

	``mapping`` is {old: new}; keyword ``renames`` are new=old.
	"""
	names = list(names)
	targets = {}
	requests = list((mapping or {}).items()) + [(old, new) for new, old in renames.items()]
	for old, new in requests:
		src = _name_of(old)
		if not isinstance(src, str):
			raise GroupedTableValueError(f"Rename sources must be column names, got {type(src).__name__}")
		if src not in names:
			raise _missing_col_error(src)
		if src in targets and targets[src] != new:
			raise NameConflictError(f"Column '{src}' is renamed more than once")
		targets[src] = new

	result = [targets.get(n, n) for n in names]
	dupes = sorted({n for n in result if result.count(n) > 1})
	if dupes:
		raise NameConflictError(f"Rename produces duplicate column names: {', '.join(dupes)}")
	return result


def resolve_group_keys(names, keys):
	"""
	Resolve a grouping key specification to unique canonical names.

	Accepts a name, a Sym, a named Column, or a list/tuple of those. Order of
	first occurrence is kept and duplicates dropped. An empty result means
	"no grouping".
	"""
	if keys is None:
		return []
	if isinstance(keys, (str, Sym, Column)):
		keys = [keys]
	if not isinstance(keys, (list, tuple)):
		raise InvalidKeySpecError(
			f"Grouping keys must be a name or a list of column identifiers, got {type(keys).__name__}"
		)

	out = []
	for k in keys:
		name = _name_of(k)
		if not isinstance(name, str):
			raise InvalidKeySpecError(
				f"Grouping key must be a column name or identifier, got {type(k).__name__}: {k!r}"
			)
		if name not in names:
			raise _missing_col_error(name)
		if name not in out:
			out.append(name)
	return out
