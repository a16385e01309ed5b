class GroupedTableError(Exception):
	"""Base exception for py-grouped."""
	pass


class UnknownColumnError(GroupedTableError, KeyError):
	"""Raised when a selector, rename or key names a column the table does not have."""

	def __str__(self):
		# KeyError.__str__ would repr() the message
		return str(self.args[0]) if self.args else ""


class NameConflictError(GroupedTableError, ValueError):
	"""Raised when an operation would produce two columns with the same name."""
	pass


class ShapeMismatchError(GroupedTableError, ValueError):
	"""Raised for row-count mismatches and results that cannot be row-bound."""
	pass


class InvalidKeySpecError(GroupedTableError, TypeError):
	"""Raised when a grouping key is neither a name nor a column identifier."""
	pass


class GroupedTableValueError(GroupedTableError, ValueError):
	"""Raised for other invalid values or arguments."""
	pass


class GroupedTableTypeError(GroupedTableError, TypeError):
	"""Raised for values of an unusable type, e.g. unhashable grouping keys."""
	pass


class GroupingNotice(UserWarning):
	"""Non-fatal notice, e.g. grouping columns added back by select()."""
	pass


def _missing_col_error(name, context="Table"):
	return UnknownColumnError(f"Column '{name}' not found in {context}")
