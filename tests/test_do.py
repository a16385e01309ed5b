"""
Tests for per-group evaluation with do().
"""

import pytest
from py_grouped import GroupContext, GroupedTable, GroupResults, Table, is_grouped
from py_grouped.errors import (
	GroupedTableTypeError,
	GroupedTableValueError,
	NameConflictError,
	ShapeMismatchError,
	UnknownColumnError,
)


@pytest.fixture
def gt():
	return Table({'g': [2, 1, 2, 1], 'x': [10, 20, 30, 40]}).group_by('g')


class TestTableOutput:

	def test_row_count_per_group(self, gt):
		out = gt.do(lambda ctx: ctx.n)
		assert isinstance(out, GroupedTable)
		assert out.group_vars() == ['g']
		assert out.ungroup().to_dict() == {'g': [1, 2], 'value': [2, 2]}

	def test_group_data_in_key_order(self, gt):
		out = gt.do(lambda ctx: ctx.data)
		assert out.names == ['g', 'x']
		assert list(out['x']) == [20, 40, 10, 30]

	def test_results_of_different_lengths(self, gt):
		out = gt.do(lambda ctx: ctx.data.take([0]))
		assert out.ungroup().to_dict() == {'g': [1, 2], 'x': [20, 10]}

	def test_dict_result_is_one_row(self, gt):
		out = gt.do(lambda ctx: {'m': ctx.column('x').mean(), 'n': ctx.n})
		assert out.names == ['g', 'm', 'n']
		assert list(out['m']) == [30.0, 20.0]

	def test_string_expression(self, gt):
		out = gt.do('x.sum()')
		assert list(out['value']) == [60, 40]
		assert list(gt.do('len(_)')['value']) == [2, 2]

	def test_string_expression_builtins_are_limited(self, gt):
		assert list(gt.do('max(x)')['value']) == [40, 30]
		with pytest.raises(NameError):
			gt.do('open("data.txt")')
		with pytest.raises(NameError):
			gt.do('__import__("os")')

	def test_non_tabular_result(self, gt):
		with pytest.raises(ShapeMismatchError):
			gt.do(lambda ctx: [1, 2])

	def test_dict_with_non_scalar_value(self, gt):
		with pytest.raises(ShapeMismatchError):
			gt.do(lambda ctx: {'v': [1, 2]})

	def test_result_missing_key_column_gets_it_prepended(self):
		t = Table({'a': ['x', 'x', 'y'], 'b': [1, 2, 1], 'v': [1, 2, 3]})
		out = t.group_by('a', 'b').do(lambda ctx: ctx.data.select('v'))
		assert out.names == ['a', 'b', 'v']
		assert out.group_vars() == ['a', 'b']
		assert out.n_groups() == 3


class TestListOutput:

	def test_named_expressions(self, gt):
		res = gt.do(total=lambda ctx: ctx.column('x').sum(), n='len(_)')
		assert isinstance(res, GroupResults)
		assert list(res) == ['total', 'n']
		assert res.labels == ['1', '2']
		assert res['total'] == {'1': 60, '2': 40}
		assert res['n'] == {'1': 2, '2': 2}

	def test_positional_expressions_are_numbered(self, gt):
		res = gt.do(lambda ctx: ctx.n, lambda ctx: ctx.label)
		assert list(res) == ['V1', 'V2']
		assert res['V2'] == {'1': '1', '2': '2'}

	def test_arbitrary_values(self, gt):
		res = gt.do(rows=lambda ctx: ctx.rows, key=lambda ctx: ctx.key)
		assert res.values_of('rows') == [(1, 3), (0, 2)]
		assert res.values_of('key') == [(1,), (2,)]

	def test_to_table(self, gt):
		table = gt.do(n=lambda ctx: ctx.n).to_table()
		assert table.names == ['g', 'n']
		assert list(table['n']) == [2, 2]

	def test_multi_key_labels(self):
		t = Table({'a': ['x', 'x', 'y'], 'b': [1, 2, None]})
		res = t.group_by('a', 'b').do(n=lambda ctx: ctx.n)
		assert res.labels == ['x_1', 'x_2', 'y_NA']

	def test_duplicate_name(self, gt):
		with pytest.raises(NameConflictError):
			gt.do(lambda ctx: 1, V1=lambda ctx: 2)


class TestZeroGroups:

	def setup_method(self):
		self.gt = Table({'g': [], 'x': []}).group_by('g')

	def test_table_output_keeps_shape(self):
		out = self.gt.do(lambda ctx: ctx.n)
		assert is_grouped(out)
		assert out.names == ['g', 'value']
		assert len(out) == 0
		assert out.n_groups() == 0

	def test_list_output_is_empty(self):
		res = self.gt.do(n=lambda ctx: ctx.n)
		assert list(res) == ['n']
		assert res['n'] == {}
		assert res.labels == []


class TestWriteBack:

	def test_later_expressions_see_the_write(self, gt):
		def double(ctx):
			ctx.data = {'x': [v * 2 for v in ctx.column('x')]}

		res = gt.do(a=double, b=lambda ctx: list(ctx.column('x')))
		assert res.values_of('b') == [[40, 80], [20, 60]]

	def test_caller_table_untouched(self, gt):
		def zero(ctx):
			ctx.data = Table({'x': [0] * ctx.n})

		gt.do(a=zero)
		assert list(gt['x']) == [10, 20, 30, 40]
		assert gt.do(s='x.sum()')['s'] == {'1': 60, '2': 40}

	def test_wrong_row_count(self, gt):
		def bad(ctx):
			ctx.data = {'x': [1]}

		with pytest.raises(ShapeMismatchError):
			gt.do(a=bad)

	def test_unknown_column(self, gt):
		def bad(ctx):
			ctx.data = {'z': [1, 2]}

		with pytest.raises(UnknownColumnError):
			gt.do(a=bad)

	def test_not_a_table(self, gt):
		def bad(ctx):
			ctx.data = 5

		with pytest.raises(GroupedTableTypeError):
			gt.do(a=bad)


class TestErrors:

	def test_exception_propagates(self, gt):
		with pytest.raises(ZeroDivisionError):
			gt.do(lambda ctx: 1 / 0)

	def test_no_expressions(self, gt):
		with pytest.raises(GroupedTableValueError):
			gt.do()

	def test_bad_expression(self, gt):
		with pytest.raises(GroupedTableValueError):
			gt.do(5)

	def test_context_repr(self):
		ctx = GroupContext(Table({'x': [1, 2]}), [(0, 1)])
		assert repr(ctx) == "GroupContext(group=0, key=(), n=2)"


class TestUngrouped:

	def test_table_output(self):
		t = Table({'x': [1, 2, 3, 4]})
		out = t.do(lambda ctx: ctx.n)
		assert not is_grouped(out)
		assert out.to_dict() == {'value': [4]}

	def test_list_output(self):
		res = Table({'x': [1, 2, 3, 4]}).do(n=lambda ctx: ctx.n)
		assert res['n'] == {'': 4}
