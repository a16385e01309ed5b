"""
Tests for GroupIndex construction and the lazy/resolved grouping metadata.
"""

import random

import pytest
from py_grouped import GroupIndex, LazyGroups, ResolvedGroups, Table, grouped_table
from py_grouped.errors import GroupedTableTypeError


def _random_table(nrows, seed):
	rng = random.Random(seed)
	return Table({
		'a': [rng.choice(['x', 'y', 'z', None]) for _ in range(nrows)],
		'b': [rng.randint(0, 3) for _ in range(nrows)],
		'v': list(range(nrows)),
	})


class TestPartition:

	@pytest.mark.parametrize('nrows', [0, 1, 2, 17, 200])
	def test_rows_partition_every_position_once(self, nrows):
		t = _random_table(nrows, seed=nrows)
		index = GroupIndex.build(t, ['a', 'b'])
		assert index.check_partition(nrows)
		assert sum(index.group_sizes()) == nrows

	def test_zero_rows_zero_groups(self):
		index = GroupIndex.build(Table({'g': []}), ['g'])
		assert index.group_count() == 0
		assert index.group_rows() == ()
		assert index.group_keys().names == ['g']

	def test_rows_keep_table_order_within_group(self):
		t = Table({'g': ['b', 'a', 'b', 'a', 'b']})
		index = GroupIndex.build(t, ['g'])
		assert index.group_rows() == ((1, 3), (0, 2, 4))


class TestOrdering:

	def test_keys_sorted_lexicographically(self):
		t = Table({'a': ['b', 'a', 'b', 'a'], 'b': [2, 2, 1, 1]})
		index = GroupIndex.build(t, ['a', 'b'])
		assert index.group_keys().to_rows() == [('a', 1), ('a', 2), ('b', 1), ('b', 2)]
		assert index.group_rows() == ((3,), (1,), (2,), (0,))

	def test_missing_sorts_last_and_nan_joins_none(self):
		t = Table({'g': [None, 2, 1, float('nan')]})
		index = GroupIndex.build(t, ['g'])
		assert list(index.group_keys()['g']) == [1, 2, None]
		assert index.group_rows() == ((2,), (1,), (0, 3))

	def test_order_independent_of_row_order(self):
		t = _random_table(50, seed=7)
		perm = list(range(50))
		random.Random(3).shuffle(perm)
		shuffled = t.take(perm)

		first = GroupIndex.build(t, ['a', 'b'])
		second = GroupIndex.build(shuffled, ['a', 'b'])
		assert first.group_keys() == second.group_keys()
		assert first.group_sizes() == second.group_sizes()
		# Same groups, positions of that particular permutation
		for rows_a, rows_b in zip(first.group_rows(), second.group_rows()):
			assert sorted(perm[i] for i in rows_b) == list(rows_a)

	def test_build_twice_is_identical(self):
		t = _random_table(30, seed=1)
		assert GroupIndex.build(t, ['b']).group_rows() == GroupIndex.build(t, ['b']).group_rows()

	def test_mixed_type_keys(self):
		t = Table({'g': ['a', 1, 'a', 1]})
		index = GroupIndex.build(t, ['g'])
		assert list(index.group_keys()['g']) == [1, 'a']

	def test_mixed_type_keys_keep_numeric_order(self):
		t = Table({'g': [10, 9, 'a', 9, 10]})
		index = GroupIndex.build(t, ['g'])
		assert list(index.group_keys()['g']) == [9, 10, 'a']
		assert index.group_rows() == ((1, 3), (0, 4), (2,))

	def test_mixed_second_key_leaves_first_key_order(self):
		t = Table({'a': [10, 9, 1, 1], 'b': ['y', 'z', 'x', 2]})
		index = GroupIndex.build(t, ['a', 'b'])
		assert index.group_keys().to_rows() == [(1, 2), (1, 'x'), (9, 'z'), (10, 'y')]

	def test_unorderable_values_within_a_type(self):
		t = Table({'g': [2j, 1, 1j, None]})
		index = GroupIndex.build(t, ['g'])
		assert list(index.group_keys()['g']) == [1, 1j, 2j, None]

	def test_unhashable_key(self):
		t = Table({'g': [[1], [2]]})
		with pytest.raises(GroupedTableTypeError):
			GroupIndex.build(t, ['g'])


class TestIndexViews:

	def setup_method(self):
		t = Table({'a': ['x', 'x', 'y'], 'b': [1, 2, 1], 'v': [1, 2, 3]})
		self.index = GroupIndex.build(t, ['a', 'b'])

	def test_labels(self):
		assert self.index.labels() == ['x_1', 'x_2', 'y_1']
		assert self.index.labels(sep='/') == ['x/1', 'x/2', 'y/1']

	def test_group_data(self):
		data = self.index.group_data()
		assert data.names == ['a', 'b', '.rows']
		assert list(data['.rows']) == [(0,), (1,), (2,)]

	def test_vars(self):
		assert self.index.vars == ['a', 'b']


class TestMetadata:

	def test_lazy_resolves_once(self):
		t = Table({'g': [2, 1, 2]})
		gt = grouped_table(t, 'g', lazy=True)
		assert isinstance(gt._groups, LazyGroups)
		assert gt.group_vars() == ['g']
		assert not gt.is_resolved

		assert gt.n_groups() == 2
		assert gt.is_resolved
		resolved = gt._groups
		assert isinstance(resolved, ResolvedGroups)
		gt.group_size()
		assert gt._groups is resolved

	def test_resolve_is_one_way(self):
		t = Table({'g': [1]})
		resolved = LazyGroups(('g',)).resolve(t)
		assert resolved.resolve(t) is resolved
		assert resolved.vars == ['g']
