'''
Costs
=====

Dollar-side aggregations over a :obj:`TableStore`: spending over time,
lifetime cost of each project, how long projects run for, and where
the money goes (per PI and per organisation).

Unreported costs (nulls) are skipped in every sum, so a project
with no reported costs at all sums to zero rather than null.
'''

import logging

from nihexporter.packages.format_utils.datetools import days_to_years
from nihexporter.packages.misc_utils.frames import empty_result
from nihexporter.packages.misc_utils.frames import filter_rows
from nihexporter.packages.misc_utils.frames import stable_sort
from nihexporter.packages.nih.errors import InvalidParameter
from nihexporter.packages.nih.errors import check_columns


def cost_over_time(store, institute=None):
    '''Total spending per fiscal year, for a single institute or
    (if :obj:`institute` is None) for every institute.
    Years with no positive spending are dropped.

    Args:
        store (:obj:`TableStore`): The NIH tables.
        institute (str): Two-letter institute code, e.g. 'GM'.
    Returns:
        :obj:`pandas.DataFrame` of fiscal_year, total_cost (preceded by
        institute when no institute is specified), ordered by year.
    '''
    projects = store.projects
    check_columns(projects, ['institute', 'fiscal_year', 'total_cost'],
                  'projects')
    keys = (['fiscal_year'] if institute is not None
            else ['institute', 'fiscal_year'])
    projects = filter_rows(projects, institute=institute)
    if projects.empty:
        return empty_result(keys + ['total_cost'])
    costs = (projects.groupby(keys, dropna=False)['total_cost']
             .sum().reset_index())
    costs = costs.loc[costs.total_cost > 0]
    return costs.sort_values(keys, kind='mergesort').reset_index(drop=True)


def lifetime_cost(store, activity=None, suffix=None, min_cost=None,
                  include_institute=True):
    '''Sum the costs of each project over all of its fiscal years,
    giving exactly one row per project number.

    Args:
        store (:obj:`TableStore`): The NIH tables.
        activity (str): Only include this activity code, e.g. 'R01'.
        suffix (str): Only include this suffix ('' for base awards).
        min_cost (float): Discard projects costing less than this,
                          which are normally bookkeeping artifacts.
        include_institute (bool): Carry the institute of each project.
    Returns:
        :obj:`pandas.DataFrame` of project_num, [institute], lifetime_cost
    '''
    projects = store.projects
    check_columns(projects, ['project_num', 'institute', 'activity',
                             'suffix', 'total_cost'], 'projects')
    projects = filter_rows(projects, activity=activity, suffix=suffix)
    aggregations = dict(lifetime_cost=('total_cost', 'sum'))
    if include_institute:
        aggregations = dict(institute=('institute', 'first'),
                            **aggregations)
    if projects.empty:
        return empty_result(['project_num'] + list(aggregations))
    costs = (projects.groupby('project_num', dropna=False)
             .agg(**aggregations).reset_index())
    if min_cost is not None:
        n_before = len(costs)
        costs = costs.loc[costs.lifetime_cost >= min_cost]
        logging.debug(f'Dropped {n_before - len(costs)} projects costing '
                      f'less than {min_cost}')
    return costs.reset_index(drop=True)


def longest_duration(store, activity=None):
    '''The full span of each project, from its earliest start to its
    latest end across all renewals. Projects without a usable start
    or end date are dropped.

    Args:
        store (:obj:`TableStore`): The NIH tables.
        activity (str): Only include this activity code, e.g. 'R01'.
    Returns:
        :obj:`pandas.DataFrame` of project_num, institute, project_start,
        project_end, duration_days, duration_years; longest first.
    '''
    projects = store.projects
    check_columns(projects, ['project_num', 'institute', 'activity',
                             'project_start', 'project_end'], 'projects')
    columns = ['project_num', 'institute', 'project_start', 'project_end',
               'duration_days', 'duration_years']
    projects = filter_rows(projects, activity=activity)
    if projects.empty:
        return empty_result(columns)
    spans = (projects.groupby('project_num', dropna=False)
             .agg(institute=('institute', 'first'),
                  project_start=('project_start', 'min'),
                  project_end=('project_end', 'max'))
             .reset_index())
    spans['duration_days'] = (spans.project_end - spans.project_start).dt.days
    spans = spans.dropna(subset=['duration_days'])
    if spans.empty:
        return empty_result(columns)
    spans['duration_days'] = spans.duration_days.astype(int)
    spans['duration_years'] = days_to_years(spans.duration_days)
    return stable_sort(spans[columns], 'duration_days', ascending=False)


def cost_per_pi(store, min_cost=None):
    '''Lifetime cost of all projects for each PI. Projects with no
    recorded PI (empty pi_id) are excluded, since they don't represent
    a real person. A project shared by several PIs counts in full for
    each of them.

    Args:
        store (:obj:`TableStore`): The NIH tables.
        min_cost (float): Passed on to :obj:`lifetime_cost`.
    Returns:
        :obj:`pandas.DataFrame` of pi_id, n_projects, total_cost;
        most expensive first.
    '''
    columns = ['pi_id', 'n_projects', 'total_cost']
    pis = store.project_pis
    check_columns(pis, ['project_num', 'pi_id'], 'project_pis')
    pis = pis.loc[pis.pi_id != ''].drop_duplicates()
    costs = lifetime_cost(store, min_cost=min_cost, include_institute=False)
    merged = pis.merge(costs, on='project_num', how='inner')
    if merged.empty:
        return empty_result(columns)
    per_pi = (merged.groupby('pi_id')
              .agg(n_projects=('project_num', 'nunique'),
                   total_cost=('lifetime_cost', 'sum'))
              .reset_index())
    return stable_sort(per_pi[columns], 'total_cost', ascending=False)


def money_per_org(store):
    '''Total spending per organisation. Projects with no organisation
    (empty org_duns) are excluded, since they don't represent a real
    organisation.

    Args:
        store (:obj:`TableStore`): The NIH tables.
    Returns:
        :obj:`pandas.DataFrame` of org_duns, org_name, n_projects,
        total_cost; most expensive first.
    '''
    columns = ['org_duns', 'org_name', 'n_projects', 'total_cost']
    projects = store.projects
    check_columns(projects, ['project_num', 'org_duns', 'total_cost'],
                  'projects')
    orgs = store.project_orgs
    check_columns(orgs, ['org_duns', 'org_name'], 'project_orgs')
    projects = projects.loc[projects.org_duns != '']
    if projects.empty:
        return empty_result(columns)
    per_org = (projects.groupby('org_duns')
               .agg(n_projects=('project_num', 'nunique'),
                    total_cost=('total_cost', 'sum'))
               .reset_index())
    names = orgs[['org_duns', 'org_name']].drop_duplicates('org_duns')
    per_org = per_org.merge(names, on='org_duns', how='left')
    per_org['org_name'] = per_org.org_name.fillna('')
    return stable_sort(per_org[columns], 'total_cost', ascending=False)


def top_projects(project_costs, n=10, group_by='institute'):
    '''The :obj:`n` most expensive projects in each group.

    Args:
        project_costs (:obj:`pandas.DataFrame`): Output of
                                                 :obj:`lifetime_cost`.
        n (int): Number of projects to keep per group.
        group_by (str): Column to group on, or None for no grouping.
    Returns:
        :obj:`pandas.DataFrame` with the columns of :obj:`project_costs`,
        ordered by group and then by cost, most expensive first.
    '''
    if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
        raise InvalidParameter(f'n must be a positive integer, got {n}')
    keys = [group_by] if group_by else []
    check_columns(project_costs, keys + ['lifetime_cost'], 'project_costs')
    if project_costs.empty:
        return empty_result(project_costs.columns)
    ordered = stable_sort(project_costs, 'lifetime_cost', ascending=False)
    if not keys:
        return ordered.head(n)
    top = ordered.groupby(group_by, sort=False, dropna=False).head(n)
    return stable_sort(top, group_by)
