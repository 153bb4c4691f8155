from contextlib import contextmanager
from functools import lru_cache
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.types import String, Date

import logging


@lru_cache()
def ordered_column_names(_class):
    """Return the column names of the ORM, in declaration order"""
    return tuple(col.name for col in _class.__table__.columns)


@lru_cache()
def required_columns(_class):
    """Return the column names in the ORM which must be present in
    the raw data, i.e. those not flagged as optional."""
    return tuple(col.name for col in _class.__table__.columns
                 if not col.info.get('optional', False))


@lru_cache()
def string_columns(_class):
    """Return the column names in the ORM which are of a text type.
    These are identifiers or labels, and so are never numeric."""
    return {col.name for col in _class.__table__.columns
            if isinstance(col.type, String)}


@lru_cache()
def date_columns(_class):
    """Return the column names in the ORM which are of DATE type"""
    return {col.name for col in _class.__table__.columns
            if isinstance(col.type, Date)}


def get_engine(url='sqlite://', **kwargs):
    '''Generate a SqlAlchemy engine for the database at :obj:`url`,
    which defaults to an in-memory sqlite database.

    Args:
        url (str): Database URL, in SqlAlchemy format.
        kwargs: Passed straight through to :obj:`create_engine`.
    Returns:
        :obj:`sqlalchemy.engine.Engine`
    '''
    logging.debug(f'Creating engine for {url}')
    return create_engine(url, **kwargs)


@contextmanager
def db_session(engine):
    """Creates and mangages an sqlalchemy session.

    Args:
        engine (:obj:`sqlalchemy.engine.base.Engine`): engine to use to access the database

    Returns:
        (:obj:`sqlalchemy.orm.session.Session`): generated session
    """
    Session = sessionmaker(engine)
    session = Session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
