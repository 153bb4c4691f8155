'''
NIH schema
==========

The schema for the NIH ExPORTER tables bundled in a :obj:`TableStore`.
Columns flagged with :code:`info={'optional': True}` may be absent
from the raw data; all others are required.
'''

from sqlalchemy.orm import declarative_base
from sqlalchemy.types import INTEGER, FLOAT, DATE, VARCHAR, TEXT
from sqlalchemy import Column


Base = declarative_base()
OPTIONAL = {'optional': True}


class Projects(Base):
    """One row per fiscal year of an award. The same :code:`project_num`
    appears once for each year (renewals and supplements)."""
    __tablename__ = 'projects'

    application_id = Column(INTEGER, primary_key=True, info=OPTIONAL)
    project_num = Column(VARCHAR(50), index=True, nullable=False)
    institute = Column(VARCHAR(2), index=True)
    activity = Column(VARCHAR(3), index=True)
    total_cost = Column(FLOAT)
    fiscal_year = Column(INTEGER, index=True)
    project_start = Column(DATE)
    project_end = Column(DATE)
    org_duns = Column(VARCHAR(20), index=True)
    suffix = Column(VARCHAR(6))
    project_title = Column(TEXT, info=OPTIONAL)


class ProjectPis(Base):
    __tablename__ = 'project_pis'

    project_num = Column(VARCHAR(50), primary_key=True)
    pi_id = Column(VARCHAR(20), primary_key=True)


class ProjectOrgs(Base):
    __tablename__ = 'project_orgs'

    org_duns = Column(VARCHAR(20), primary_key=True)
    org_name = Column(VARCHAR(200), index=True)
    org_city = Column(VARCHAR(50), info=OPTIONAL)
    org_state = Column(VARCHAR(2), info=OPTIONAL)
    org_country = Column(VARCHAR(50), info=OPTIONAL)


class PublicationLinks(Base):
    __tablename__ = 'publinks'

    project_num = Column(VARCHAR(50), primary_key=True)
    pmid = Column(VARCHAR(20), primary_key=True)


class PatentLinks(Base):
    __tablename__ = 'patents'

    project_num = Column(VARCHAR(50), primary_key=True)
    patent_id = Column(VARCHAR(20), primary_key=True)


# Table name --> ORM, in the order tables are loaded
TABLES = {orm.__tablename__: orm for orm in (Projects, ProjectPis,
                                             ProjectOrgs, PublicationLinks,
                                             PatentLinks)}
