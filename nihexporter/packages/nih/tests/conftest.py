import numpy as np
import pandas as pd
import pytest

from nihexporter.packages.nih.table_store import TableStore


@pytest.fixture
def raw_tables():
    """Four projects, across two institutes:

    A: two fiscal years, the second without a reported cost
    B: one year, no publications
    C: one year, no organisation
    D: a supplement with no reported cost at all, and no PI
    """
    projects = pd.DataFrame(
        {'project_num': ['R01GM000001', 'R01GM000001', 'R01GM000002',
                         'R21CA000003', 'R01CA000004'],
         'institute': ['GM', 'GM', 'GM', 'CA', 'CA'],
         'activity': ['R01', 'R01', 'R01', 'R21', 'R01'],
         'total_cost': [100, np.nan, 300, 200, np.nan],
         'fiscal_year': [2010, 2011, 2010, 2011, 2012],
         'project_start': ['04/01/2010', '04/01/2010', '01/01/2010',
                           '07/01/2011', '01/01/2012'],
         'project_end': ['03/31/2011', '03/31/2012', '01/01/2011',
                         '06/30/2013', '12/31/2012'],
         'org_duns': ['D1', 'D1', 'D2', '', 'D1'],
         'suffix': ['', '', '', '', 'S1']})
    project_pis = pd.DataFrame(
        {'project_num': ['R01GM000001', 'R01GM000002', 'R21CA000003',
                         'R01CA000004'],
         'pi_id': ['1', '1', '2', '']})
    project_orgs = pd.DataFrame({'org_duns': ['D1', 'D2'],
                                 'org_name': ['Univ One', 'Univ Two']})
    publinks = pd.DataFrame({'project_num': ['R01GM000001', 'R01GM000001',
                                             'R21CA000003'],
                             'pmid': ['11', '12', '13']})
    patents = pd.DataFrame({'project_num': ['R01GM000001'],
                            'patent_id': ['US123']})
    return dict(projects=projects, project_pis=project_pis,
                project_orgs=project_orgs, publinks=publinks,
                patents=patents)


@pytest.fixture
def store(raw_tables):
    return TableStore(**raw_tables)


@pytest.fixture
def empty_store():
    return TableStore()
