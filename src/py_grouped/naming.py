"""Column name sanitization, uniquification and label formatting utilities."""

from __future__ import annotations
import re

from .typing import is_missing


# Separator between key values in a group label, e.g. "a_1"
LABEL_SEP = "_"
# How a missing key value is rendered inside a label
NA_LABEL = "NA"


def _sanitize_user_name(name) -> str | None:
	"""Sanitize column name to valid Python identifier.
	
	Rules:
	- Convert to lowercase
	- Replace runs of non-alphanumeric chars (except _) with single _
	- Strip leading/trailing underscores
	- Prefix with 'c' if starts with digit
	- Return None if empty after sanitization
	"""
	if not isinstance(name, str):
		name = str(name)
	
	name = name.lower()
	sanitized = re.sub(r'[^a-z0-9_]+', '_', name)
	sanitized = sanitized.strip('_')
	
	if sanitized == "":
		return None
	
	if sanitized[0].isdigit():
		sanitized = "c" + sanitized
	
	return sanitized


def _uniquify(base: str, seen: set[str]) -> str:
	"""Make a unique name by adding __2, __3, etc if needed."""
	if base not in seen:
		return base
	
	i = 2
	while f"{base}__{i}" in seen:
		i += 1
	
	return f"{base}__{i}"


def commas(names) -> str:
	"""Backtick-quote and comma-join names for messages: `a`, `b`"""
	return ", ".join(f"`{n}`" for n in names)


def big_mark(n: int) -> str:
	"""Format a count with thousands separators."""
	return f"{n:,}"


def format_label(key: tuple, sep: str = None) -> str:
	"""Join the values of a group key tuple into a single label."""
	if sep is None:
		sep = LABEL_SEP
	return sep.join(NA_LABEL if is_missing(v) else str(v) for v in key)
