import numpy as np
import pandas as pd
import pytest

from nihexporter.packages.nih.binning import attach_publication_counts
from nihexporter.packages.nih.binning import bin_by_cost
from nihexporter.packages.nih.binning import bin_by_fixed_breaks
from nihexporter.packages.nih.binning import productivity_by_bin
from nihexporter.packages.nih.binning import validate_breaks
from nihexporter.packages.nih.costs import lifetime_cost
from nihexporter.packages.nih.errors import InvalidParameter
from nihexporter.packages.nih.errors import MissingColumn
from nihexporter.packages.nih.productivity import publication_counts


def make_costs(costs, institute='GM'):
    n = len(costs)
    return pd.DataFrame({'project_num': [f'P{i:04d}' for i in range(n)],
                         'institute': [institute] * n,
                         'lifetime_cost': costs})


class TestBinByCost:
    def test_equal_bins(self):
        binned = bin_by_cost(make_costs(np.arange(100.0)), bin_count=20)
        sizes = binned.bin.value_counts()
        assert sorted(sizes.index) == list(range(1, 21))
        assert (sizes == 5).all()

    def test_bin_sizes_differ_by_at_most_one(self):
        binned = bin_by_cost(make_costs(np.arange(101.0)), bin_count=20)
        sizes = binned.bin.value_counts()
        assert len(sizes) == 20
        assert sizes.max() - sizes.min() <= 1
        assert sizes.sum() == 101

    def test_bins_increase_with_cost(self):
        costs = make_costs([500.0, 100.0, 300.0, 200.0, 400.0, 600.0])
        binned = bin_by_cost(costs, bin_count=3)
        ordered = binned.sort_values('lifetime_cost')
        assert ordered.bin.tolist() == [1, 1, 2, 2, 3, 3]
        assert binned.project_num.tolist() == costs.project_num.tolist()

    def test_bins_within_each_institute(self):
        costs = pd.concat([make_costs([1.0, 2.0], 'GM'),
                           make_costs([10.0, 20.0, 30.0, 40.0], 'CA')],
                          ignore_index=True)
        binned = bin_by_cost(costs, bin_count=2)
        assert binned.bin.tolist() == [1, 2, 1, 1, 2, 2]
        overall = bin_by_cost(costs, bin_count=2, group_by=None)
        assert overall.bin.tolist() == [1, 1, 1, 2, 2, 2]

    def test_ties_broken_by_input_order(self):
        binned = bin_by_cost(make_costs([5.0] * 4), bin_count=2)
        assert binned.bin.tolist() == [1, 1, 2, 2]

    def test_more_bins_than_projects(self):
        binned = bin_by_cost(make_costs([1.0, 2.0]), bin_count=5)
        assert binned.bin.tolist() == [1, 3]

    def test_unknown_costs_dropped(self):
        binned = bin_by_cost(make_costs([1.0, None, 2.0]), bin_count=2)
        assert binned.project_num.tolist() == ['P0000', 'P0002']

    @pytest.mark.parametrize('bin_count', [0, -3, 2.5, True, None, '4'])
    def test_invalid_bin_count(self, bin_count):
        with pytest.raises(InvalidParameter):
            bin_by_cost(make_costs([1.0]), bin_count=bin_count)

    def test_missing_column(self):
        with pytest.raises(MissingColumn):
            bin_by_cost(pd.DataFrame({'lifetime_cost': [1.0]}), bin_count=2)

    def test_empty(self):
        binned = bin_by_cost(make_costs([]), bin_count=4)
        assert binned.empty
        assert list(binned.columns) == ['project_num', 'institute',
                                        'lifetime_cost', 'bin']

    def test_deterministic(self):
        costs = make_costs(np.random.RandomState(0).randint(0, 10, 50)
                           .astype(float))
        pd.testing.assert_frame_equal(bin_by_cost(costs, 7),
                                      bin_by_cost(costs, 7))


class TestBinByFixedBreaks:
    def test_fixed_breaks(self):
        costs = make_costs([-5.0, 0.0, 5e5, 1e6, 2.5e6])
        binned = bin_by_fixed_breaks(costs, breaks=[0, 1e6, 2e6])
        assert binned.bin.tolist() == [0, 0, 0, 1, 2]
        assert binned.bin_lower.tolist() == [0.0, 0.0, 0.0, 1e6, 2e6]

    def test_breaks_need_not_be_lists(self):
        binned = bin_by_fixed_breaks(make_costs([15.0]), breaks=(0, 10, 20))
        assert binned.bin.tolist() == [1]

    @pytest.mark.parametrize('breaks', [[], [1e6], [0, 0, 1], [2, 1],
                                        ['a', 'b'], [0, np.nan]])
    def test_invalid_breaks(self, breaks):
        with pytest.raises(InvalidParameter):
            validate_breaks(breaks)
        with pytest.raises(InvalidParameter):
            bin_by_fixed_breaks(make_costs([1.0]), breaks=breaks)

    def test_empty(self):
        binned = bin_by_fixed_breaks(make_costs([]), breaks=[0, 1])
        assert binned.empty
        assert 'bin_lower' in binned.columns


class TestProductivityByBin:
    @pytest.fixture
    def binned(self, store):
        return bin_by_cost(lifetime_cost(store), bin_count=2)

    def test_projects_without_publications_count_as_zero(self, store,
                                                         binned):
        joined = attach_publication_counts(binned, publication_counts(store))
        assert len(joined) == len(binned)
        no_pubs = joined.loc[joined.project_num == 'R01GM000002']
        assert no_pubs.n_pubs.tolist() == [0]

    def test_productivity_by_bin(self, store, binned):
        result = productivity_by_bin(binned, publication_counts(store))
        assert list(result.columns) == ['institute', 'bin', 'n_projects',
                                        'median', 'mean', 'q1', 'q3',
                                        'min', 'max']
        assert result.institute.tolist() == ['CA', 'CA', 'GM', 'GM']
        assert result.bin.tolist() == [1, 2, 1, 2]
        assert result.n_projects.tolist() == [1, 1, 1, 1]
        assert result['median'].tolist() == [0, 1, 2, 0]

    def test_summary_statistics(self):
        binned = make_costs([1.0, 2.0, 3.0, 4.0])
        binned['bin'] = 1
        counts = pd.DataFrame({'project_num': binned.project_num,
                               'n_pubs': [0, 2, 4, 10]})
        result = productivity_by_bin(binned, counts)
        row = result.iloc[0]
        assert row.n_projects == 4
        assert row['median'] == 3.0
        assert row['mean'] == 4.0
        assert row['q1'] == 1.5
        assert row['q3'] == 5.5
        assert row['min'] == 0
        assert row['max'] == 10

    def test_fixed_breaks_without_institute(self, store):
        costs = lifetime_cost(store, include_institute=False)
        binned = bin_by_fixed_breaks(costs, breaks=[0, 150])
        result = productivity_by_bin(binned, publication_counts(store))
        assert result.bin.tolist() == [0, 1]
        assert result.n_projects.tolist() == [2, 2]
        assert result['max'].tolist() == [2, 1]

    def test_empty(self, empty_store):
        binned = bin_by_cost(lifetime_cost(empty_store), bin_count=3)
        result = productivity_by_bin(binned, publication_counts(empty_store))
        assert result.empty
        assert 'n_projects' in result.columns
