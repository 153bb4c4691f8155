import pytest

from nihexporter.core.orms.nih_orm import Base
from nihexporter.core.orms.nih_orm import Projects
from nihexporter.core.orms.nih_orm import ProjectPis
from nihexporter.core.orms.nih_orm import ProjectOrgs
from nihexporter.core.orms.nih_orm import PublicationLinks
from nihexporter.core.orms.nih_orm import PatentLinks
from nihexporter.core.orms.nih_orm import TABLES
from nihexporter.core.orms.orm_utils import ordered_column_names
from nihexporter.core.orms.orm_utils import required_columns
from nihexporter.core.orms.orm_utils import string_columns
from nihexporter.core.orms.orm_utils import date_columns
from nihexporter.core.orms.orm_utils import get_engine
from nihexporter.core.orms.orm_utils import db_session


@pytest.fixture
def engine():
    engine = get_engine()
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


def test_tables_in_load_order():
    assert list(TABLES) == ['projects', 'project_pis', 'project_orgs',
                            'publinks', 'patents']
    assert TABLES['publinks'] is PublicationLinks


def test_ordered_column_names():
    assert ordered_column_names(ProjectPis) == ('project_num', 'pi_id')


def test_required_columns():
    assert required_columns(Projects) == ('project_num', 'institute',
                                          'activity', 'total_cost',
                                          'fiscal_year', 'project_start',
                                          'project_end', 'org_duns',
                                          'suffix')
    assert required_columns(ProjectOrgs) == ('org_duns', 'org_name')


def test_string_columns():
    assert string_columns(Projects) == {'project_num', 'institute',
                                        'activity', 'org_duns', 'suffix',
                                        'project_title'}
    assert string_columns(PublicationLinks) == {'project_num', 'pmid'}


def test_date_columns():
    assert date_columns(Projects) == {'project_start', 'project_end'}
    assert date_columns(ProjectPis) == set()


def test_db_session_commits(engine):
    with db_session(engine) as session:
        session.add(ProjectPis(project_num='R01GM000001', pi_id='123'))
    with db_session(engine) as session:
        rows = session.query(ProjectPis).all()
        assert [(r.project_num, r.pi_id) for r in rows] == [('R01GM000001',
                                                             '123')]


def test_db_session_rolls_back(engine):
    with pytest.raises(ValueError):
        with db_session(engine) as session:
            session.add(ProjectPis(project_num='R01GM000001', pi_id='123'))
            session.flush()
            raise ValueError('bad row')
    with db_session(engine) as session:
        assert session.query(ProjectPis).count() == 0
