'''
Productivity
============

Output-side aggregations: how many publications and patents each
project produced, and what each of those outputs cost.

Note the two treatments of projects without any outputs:

  * the count tables (:obj:`publication_counts`, :obj:`project_io`)
    record them with an explicit count of zero;
  * the cost-per-output tables (:obj:`cost_per_publication`,
    :obj:`cost_per_patent`) exclude them, since there is nothing
    to divide the cost between.
'''

import logging

from nihexporter.packages.misc_utils.frames import empty_result
from nihexporter.packages.misc_utils.frames import optional_keys
from nihexporter.packages.misc_utils.frames import stable_sort
from nihexporter.packages.nih.costs import lifetime_cost
from nihexporter.packages.nih.errors import check_columns
from nihexporter.packages.nih.preprocess_nih import LINK_TARGETS


def link_counts(store, table_name, count_column):
    '''Count the rows of a link table for every project in the store,
    filling zero for projects with no links.

    Args:
        store (:obj:`TableStore`): The NIH tables.
        table_name (str): Link table to count, i.e. 'publinks' or 'patents'.
        count_column (str): Name for the column of counts.
    Returns:
        :obj:`pandas.DataFrame` of project_num, {count_column};
        one row per distinct project number.
    '''
    projects = store.projects
    links = store.table(table_name)
    check_columns(projects, ['project_num'], 'projects')
    check_columns(links, ['project_num', LINK_TARGETS[table_name]],
                  table_name)
    if projects.empty:
        return empty_result(['project_num', count_column])
    counts = links.project_num.value_counts()
    result = (projects[['project_num']].drop_duplicates()
              .sort_values('project_num').reset_index(drop=True))
    result[count_column] = (result.project_num.map(counts)
                            .fillna(0).astype(int))
    return result


def publication_counts(store):
    """Number of linked publications per project (zero-filled)"""
    return link_counts(store, 'publinks', 'n_pubs')


def patent_counts(store):
    """Number of linked patents per project (zero-filled)"""
    return link_counts(store, 'patents', 'n_patents')


def project_io(store, min_cost=None):
    '''Inputs (dollars) and outputs (publications and patents) of each
    project, side by side.

    Args:
        store (:obj:`TableStore`): The NIH tables.
        min_cost (float): Passed on to :obj:`lifetime_cost`.
    Returns:
        :obj:`pandas.DataFrame` of project_num, institute, lifetime_cost,
        n_pubs, n_patents.
    '''
    costs = lifetime_cost(store, min_cost=min_cost)
    columns = list(costs.columns) + ['n_pubs', 'n_patents']
    if costs.empty:
        return empty_result(columns)
    for counts in (publication_counts(store), patent_counts(store)):
        costs = costs.merge(counts, on='project_num', how='left')
    return costs[columns]


def _cost_per_output(project_costs, links, table_name, count_column):
    """Left join the project costs to a link table, and count the
    linked rows per project. Projects without links are dropped."""
    target = LINK_TARGETS[table_name]
    check_columns(project_costs, ['project_num', 'lifetime_cost'],
                  'project_costs')
    check_columns(links, ['project_num', target], table_name)
    keys = optional_keys(project_costs, 'project_num', 'institute')
    if project_costs.empty:
        return empty_result(keys + ['lifetime_cost', count_column])
    joined = project_costs[keys + ['lifetime_cost']].merge(
        links[['project_num', target]], on='project_num', how='left')
    # NB: count() ignores the nulls left by unmatched projects
    counted = (joined.groupby(keys, sort=False, dropna=False)
               .agg(lifetime_cost=('lifetime_cost', 'first'),
                    **{count_column: (target, 'count')})
               .reset_index())
    has_output = counted[count_column] > 0
    logging.debug(f'{(~has_output).sum()} of {len(counted)} projects '
                  f'have no links in {table_name}')
    return counted.loc[has_output].reset_index(drop=True)


def cost_per_publication(store, project_costs):
    '''Lifetime cost of each project divided by its number of
    publications. Projects without publications are excluded.

    Args:
        store (:obj:`TableStore`): The NIH tables.
        project_costs (:obj:`pandas.DataFrame`): Output of
                                                 :obj:`lifetime_cost`.
    Returns:
        :obj:`pandas.DataFrame` of project_num, [institute], lifetime_cost,
        n_pubs, cost_per_pub; cheapest publications first, ties in
        input order.
    '''
    counted = _cost_per_output(project_costs, store.publinks, 'publinks',
                               'n_pubs')
    if counted.empty:
        return empty_result(list(counted.columns) + ['cost_per_pub'])
    counted['cost_per_pub'] = counted.lifetime_cost / counted.n_pubs
    return stable_sort(counted, 'cost_per_pub')


def cost_per_patent(store, project_costs):
    '''Number of patents per dollar of each project's lifetime cost.
    Projects without patents, or without a positive cost, are excluded.

    Args:
        store (:obj:`TableStore`): The NIH tables.
        project_costs (:obj:`pandas.DataFrame`): Output of
                                                 :obj:`lifetime_cost`.
    Returns:
        :obj:`pandas.DataFrame` of project_num, [institute], lifetime_cost,
        n_patents, patents_per_dollar; most productive first, ties in
        input order.
    '''
    counted = _cost_per_output(project_costs, store.patents, 'patents',
                               'n_patents')
    counted = counted.loc[counted.lifetime_cost > 0].copy()
    if counted.empty:
        return empty_result(list(counted.columns) + ['patents_per_dollar'])
    counted['patents_per_dollar'] = counted.n_patents / counted.lifetime_cost
    return stable_sort(counted, 'patents_per_dollar', ascending=False)
