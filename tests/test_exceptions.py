import pytest
from py_grouped import Table
from py_grouped.errors import (
    GroupedTableError,
    GroupedTableTypeError,
    GroupedTableValueError,
    InvalidKeySpecError,
    NameConflictError,
    ShapeMismatchError,
    UnknownColumnError,
)


def test_missing_column_raises_unknown_column_error():
    t = Table({'a': [1, 2], 'b': [3, 4]})
    with pytest.raises(UnknownColumnError):
        _ = t['missing']


def test_unknown_column_message_is_not_quoted():
    t = Table({'a': [1]})
    with pytest.raises(UnknownColumnError) as excinfo:
        t.group_by('missing')
    assert str(excinfo.value) == "Column 'missing' not found in Table"


@pytest.mark.parametrize('exc, builtin', [
    (UnknownColumnError, KeyError),
    (NameConflictError, ValueError),
    (ShapeMismatchError, ValueError),
    (InvalidKeySpecError, TypeError),
    (GroupedTableValueError, ValueError),
    (GroupedTableTypeError, TypeError),
])
def test_errors_are_catchable_both_ways(exc, builtin):
    assert issubclass(exc, GroupedTableError)
    assert issubclass(exc, builtin)


def test_bind_cols_mismatched_rows_raises_value_error():
    left = Table({'a': [1, 2]})
    right = Table({'b': [1]})
    with pytest.raises(ValueError):
        left.bind_cols(right)
