'''
Binning
=======

Group projects by how much they cost, in order to compare productivity
across levels of funding. Two schemes are available:

  * :obj:`bin_by_cost`: rank-based quantile tiles within each institute,
    of (as near as possible) equal size;
  * :obj:`bin_by_fixed_breaks`: fixed dollar intervals.
'''

import logging
import numbers

import numpy as np

from nihexporter.packages.misc_utils.frames import empty_result
from nihexporter.packages.misc_utils.frames import optional_keys
from nihexporter.packages.nih.errors import InvalidParameter
from nihexporter.packages.nih.errors import check_columns

SUMMARY_STATS = ['n_projects', 'median', 'mean', 'q1', 'q3', 'min', 'max']


def validate_bin_count(bin_count):
    """Raise :obj:`InvalidParameter` unless :obj:`bin_count` is a
    positive integer"""
    if (isinstance(bin_count, bool)
            or not isinstance(bin_count, numbers.Integral)
            or bin_count <= 0):
        raise InvalidParameter('bin_count must be a positive integer, '
                               f'got {bin_count!r}')
    return int(bin_count)


def validate_breaks(breaks):
    """Raise :obj:`InvalidParameter` unless :obj:`breaks` holds at least
    two numbers in strictly increasing order"""
    try:
        _breaks = np.asarray(list(breaks), dtype=float)
    except (TypeError, ValueError):
        raise InvalidParameter(f'breaks must be numeric, got {breaks!r}')
    if _breaks.ndim != 1 or len(_breaks) < 2:
        raise InvalidParameter(f'At least two breaks are required, '
                               f'got {breaks!r}')
    if not np.all(np.diff(_breaks) > 0):
        raise InvalidParameter('breaks must be strictly increasing, '
                               f'got {breaks!r}')
    return _breaks


def _drop_unknown_costs(project_costs):
    known = project_costs.lifetime_cost.notnull()
    if not known.all():
        logging.warning(f'Not binning {(~known).sum()} projects '
                        'with no lifetime cost')
    return project_costs.loc[known].copy()


def bin_by_cost(project_costs, bin_count, group_by='institute'):
    '''Split the projects of each group into :obj:`bin_count` tiles of
    increasing lifetime cost. Within a group of n projects, the
    project ranked r (from 0, cheapest first, ties in input order) is
    assigned to bin floor(r * bin_count / n) + 1, so that bin sizes
    differ by at most one.

    Args:
        project_costs (:obj:`pandas.DataFrame`): Output of
                                                 :obj:`lifetime_cost`.
        bin_count (int): Number of bins per group.
        group_by (str): Column to bin within, or None to bin all
                        projects together.
    Returns:
        :obj:`pandas.DataFrame`: :obj:`project_costs` with a 1-based
        'bin' column.
    '''
    bin_count = validate_bin_count(bin_count)
    keys = [group_by] if group_by else []
    check_columns(project_costs, keys + ['lifetime_cost'], 'project_costs')
    if project_costs.empty:
        return empty_result(list(project_costs.columns) + ['bin'])
    binned = _drop_unknown_costs(project_costs)
    if keys:
        costs = binned.groupby(group_by, sort=False,
                               dropna=False)['lifetime_cost']
        rank = costs.rank(method='first')
        size = costs.transform('count')
    else:
        rank = binned.lifetime_cost.rank(method='first')
        size = len(binned)
    binned['bin'] = ((rank - 1) * bin_count // size).astype(int) + 1
    return binned.reset_index(drop=True)


def bin_by_fixed_breaks(project_costs, breaks):
    '''Assign each project to the interval [breaks[i], breaks[i+1])
    holding its lifetime cost. Costs below the first break are clamped
    into bin 0, and costs at or above the final break are clamped into
    bin len(breaks) - 1.

    Args:
        project_costs (:obj:`pandas.DataFrame`): Output of
                                                 :obj:`lifetime_cost`.
        breaks (list): Strictly increasing dollar amounts.
    Returns:
        :obj:`pandas.DataFrame`: :obj:`project_costs` with a 0-based
        'bin' column, and the lower edge of that bin as 'bin_lower'.
    '''
    _breaks = validate_breaks(breaks)
    check_columns(project_costs, ['lifetime_cost'], 'project_costs')
    if project_costs.empty:
        return empty_result(list(project_costs.columns)
                            + ['bin', 'bin_lower'])
    binned = _drop_unknown_costs(project_costs)
    costs = binned.lifetime_cost.to_numpy(dtype=float)
    bins = np.searchsorted(_breaks, costs, side='right') - 1
    bins = np.clip(bins, 0, len(_breaks) - 1)
    binned['bin'] = bins
    binned['bin_lower'] = _breaks[bins]
    return binned.reset_index(drop=True)


def attach_publication_counts(binned_costs, publication_counts):
    '''Left join publication counts onto binned projects. Projects
    without any publications get an explicit count of zero.

    Args:
        binned_costs (:obj:`pandas.DataFrame`): Output of either binning.
        publication_counts (:obj:`pandas.DataFrame`): project_num, n_pubs
    Returns:
        :obj:`pandas.DataFrame`: :obj:`binned_costs` with 'n_pubs'.
    '''
    check_columns(binned_costs, ['project_num', 'bin'], 'binned_costs')
    check_columns(publication_counts, ['project_num', 'n_pubs'],
                  'publication_counts')
    counts = publication_counts[['project_num', 'n_pubs']]
    joined = binned_costs.merge(counts, on='project_num', how='left')
    joined['n_pubs'] = joined.n_pubs.fillna(0).astype(int)
    return joined


def productivity_by_bin(binned_costs, publication_counts):
    '''Distribution of publication counts within each (institute, bin),
    for box-and-whisker style summaries. The number of projects per bin
    is included, for weighting the display.

    Args:
        binned_costs (:obj:`pandas.DataFrame`): Output of either binning.
        publication_counts (:obj:`pandas.DataFrame`): project_num, n_pubs
    Returns:
        :obj:`pandas.DataFrame` of [institute], bin, n_projects, median,
        mean, q1, q3, min, max.
    '''
    per_project = attach_publication_counts(binned_costs, publication_counts)
    keys = optional_keys(per_project, 'institute') + ['bin']
    if per_project.empty:
        return empty_result(keys + SUMMARY_STATS)
    pubs = per_project.groupby(keys, dropna=False)['n_pubs']
    summary = pubs.agg(n_projects='count', median='median', mean='mean',
                       min='min', max='max')
    summary['q1'] = pubs.quantile(0.25)
    summary['q3'] = pubs.quantile(0.75)
    return summary.reset_index()[keys + SUMMARY_STATS]
