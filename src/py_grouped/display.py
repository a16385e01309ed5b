"""Display and repr logic for Column, Table and GroupedTable."""

from __future__ import annotations
from datetime import date
from typing import List

from .naming import _sanitize_user_name, _uniquify, big_mark
from .typing import is_missing


# How many rows/columns to show before inserting "..."
MAX_HEAD_ROWS = 5
MAX_HEAD_COLS = 5

_ELLIPSIS = object()


def _needs_quoting(name: str) -> bool:
	"""A name needs quoting if it contains anything outside [A-Za-z0-9_]
	OR has leading/trailing whitespace."""
	if not name:
		return False
	if name != name.strip():
		return True
	return not all(c.isalnum() or c == "_" for c in name)


def _is_numeric_kind(kind) -> bool:
	return kind in (int, float, complex)


def _format_value(v, kind) -> str:
	if v is _ELLIPSIS:
		return '...'
	if is_missing(v):
		return 'NA'
	if kind is float and abs(v) != float('inf'):
		return f"{v:.1f}" if v == int(v) else f"{v:g}"
	if kind is date:
		return v.isoformat()
	if kind is str:
		return repr(v)
	return str(v)


def _format_column(col, max_preview: int = MAX_HEAD_ROWS) -> List[str]:
	"""Returns a list of strings representing that column, truncated for display."""
	vals = col._underlying
	if len(vals) > max_preview * 2:
		preview = list(vals[:max_preview]) + [_ELLIPSIS] + list(vals[-max_preview:])
	else:
		preview = list(vals)

	kind = col._dtype.kind
	out = [_format_value(v, kind) for v in preview]

	# Align: numeric right, others left
	max_len = max(len(s) for s in out) if out else 0
	if _is_numeric_kind(kind):
		return [s.rjust(max_len) for s in out]
	return [s.ljust(max_len) for s in out]


def _compute_headers(cols, col_indices):
	"""Given table columns and indices, returns display_names, sanitized_names, dtypes."""
	display_names = []
	sanitized_names = []
	dtypes = []
	seen = set()

	for idx in col_indices:
		col = cols[idx]
		display_names.append(col._name)

		san = _sanitize_user_name(col._name)
		if san is None:
			san = f"col{idx}_"
		else:
			san = _uniquify(san, seen)
			seen.add(san)
		sanitized_names.append(san)

		dtypes.append(col._dtype.kind.__name__)

	return display_names, sanitized_names, dtypes


def _header_rows(display_names, sanitized_names):
	"""Decide which header rows to show based on display vs sanitized names."""
	any_mismatch = any(
		disp != san and san != "..."
		for disp, san in zip(display_names, sanitized_names)
	)

	rows = []

	# Row 1: display names (quoted if needed)
	row = []
	for name in display_names:
		if name == "...":
			row.append("...")
		elif _needs_quoting(name):
			row.append(repr(name))
		else:
			row.append(name)
	rows.append(row)

	# Row 2: sanitized attribute names, only when they differ
	if any_mismatch:
		rows.append([("." + san) if san != "..." else san for san in sanitized_names])

	return rows


def _align_columns(formatted_cols, header_rows, col_dtypes):
	"""Pad columns and headers to consistent widths."""
	num_cols = len(formatted_cols)
	col_widths = []

	for c in range(num_cols):
		body_width = max(len(s) for s in formatted_cols[c]) if formatted_cols[c] else 0
		header_width = max(len(header_rows[r][c]) for r in range(len(header_rows)))
		col_widths.append(max(body_width, header_width))

	def pad(s, c):
		if col_dtypes[c] in ('int', 'float', 'complex'):
			return s.rjust(col_widths[c])
		return s.ljust(col_widths[c])

	aligned_cols = [[pad(s, c) for s in formatted_cols[c]] for c in range(num_cols)]
	aligned_headers = [[pad(h, c) for c, h in enumerate(row)] for row in header_rows]
	return aligned_cols, aligned_headers


def _footer(tbl, dtype_list, truncated=False, shown=MAX_HEAD_COLS) -> str:
	"""Generate footer line based on shape and dtypes."""
	if truncated:
		d = ", ".join(dtype_list[:shown]) + ", ..., " + ", ".join(dtype_list[-shown:])
	else:
		d = ", ".join(dtype_list)
	rows, cols = tbl.size()
	return f"# {rows}×{cols} table <{d}>"


def _repr_column(col) -> str:
	"""Pretty repr for a Column."""
	formatted = _format_column(col)
	kind = col._dtype.kind

	data_width = max(len(s) for s in formatted) if formatted else 0
	header_text = ""
	if col._name:
		header_text = repr(col._name) if _needs_quoting(col._name) else col._name

	width = max(data_width, len(header_text))
	just = str.rjust if _is_numeric_kind(kind) else str.ljust

	lines = []
	if header_text:
		lines.append(just(header_text, width))
	lines.extend(just(s, width) for s in formatted)
	lines.append("")
	lines.append(f"# {len(col)} element column <{kind.__name__}>")
	return "\n".join(lines)


def _repr_table(tbl) -> str:
	"""Pretty repr for a Table."""
	cols = tbl.cols()
	num_cols = len(cols)

	if num_cols == 0:
		return f"# {len(tbl)}×0 table"

	truncated = num_cols > MAX_HEAD_COLS * 2

	if truncated:
		col_indices = list(range(MAX_HEAD_COLS)) + list(range(num_cols - MAX_HEAD_COLS, num_cols))
	else:
		col_indices = list(range(num_cols))

	disp, san, dtypes_displayed = _compute_headers(cols, col_indices)
	dtypes_all = [col._dtype.kind.__name__ for col in cols]

	formatted_cols = [_format_column(cols[i]) for i in col_indices]

	# Insert "..." column if truncated
	if truncated:
		ellipsis_col = ["..." for _ in range(len(formatted_cols[0]))]
		formatted_cols.insert(MAX_HEAD_COLS, ellipsis_col)
		disp.insert(MAX_HEAD_COLS, "...")
		san.insert(MAX_HEAD_COLS, "...")
		dtypes_displayed.insert(MAX_HEAD_COLS, "...")

	header_rows = _header_rows(disp, san)
	aligned_cols, aligned_headers = _align_columns(formatted_cols, header_rows, dtypes_displayed)

	lines = ["  ".join(hrow).rstrip() for hrow in aligned_headers]
	nrows = len(aligned_cols[0]) if aligned_cols else 0
	for r in range(nrows):
		lines.append("  ".join(col[r] for col in aligned_cols).rstrip())

	lines.append("")
	lines.append(_footer(tbl, dtypes_all, truncated, MAX_HEAD_COLS))
	return "\n".join(lines)


def _groups_header(gt) -> str:
	"""Summary line for grouped tables: '# Groups: g, h [1,234]'."""
	return f"# Groups: {', '.join(gt.group_vars())} [{big_mark(gt.n_groups())}]"


def _printr(obj) -> str:
	"""Entry point used by Column.__repr__, Table.__repr__ and GroupedTable.__repr__."""
	from .column import Column
	from .grouped import GroupedTable

	if isinstance(obj, Column):
		return _repr_column(obj)
	if isinstance(obj, GroupedTable):
		return _groups_header(obj) + "\n" + _repr_table(obj.ungroup())
	return _repr_table(obj)
