'''
Table Store
===========

A read-only, in-memory bundle of the five NIH ExPORTER tables:

  * projects (one row per project per fiscal year)
  * project_pis (project_num <--> pi_id)
  * project_orgs (org_duns --> organisation details)
  * publinks (project_num <--> pmid)
  * patents (project_num <--> patent_id)

The store is constructed explicitly and passed to each aggregation,
so that tests (or analyses over a subset of the data) can swap in
their own tables. Relationships between tables are flat link tables,
resolved by an index of row positions rather than embedded collections.
'''

import logging
import os

import pandas as pd

from nihexporter.core.orms.nih_orm import TABLES
from nihexporter.core.orms.orm_utils import ordered_column_names
from nihexporter.core.orms.orm_utils import required_columns
from nihexporter.core.orms.orm_utils import string_columns
from nihexporter.packages.nih.errors import check_columns
from nihexporter.packages.nih.preprocess_nih import preprocess_table


def empty_table(table_name):
    """An empty frame with the required columns of the named table"""
    orm = TABLES[table_name]
    return pd.DataFrame(columns=list(required_columns(orm)))


class TableStore:
    '''Read-only collection of the NIH tables, each held as a
    :obj:`pandas.DataFrame`. Tables are validated and preprocessed
    once, on construction.

    Args:
        projects, project_pis, project_orgs, publinks, patents
            (:obj:`pandas.DataFrame`): The raw tables. Any which are
            omitted are treated as empty.
        preprocess (bool): Whether to clean the tables first. Only
            switch this off for tables which are already clean.
    '''
    def __init__(self, projects=None, project_pis=None, project_orgs=None,
                 publinks=None, patents=None, preprocess=True):
        raw = dict(projects=projects, project_pis=project_pis,
                   project_orgs=project_orgs, publinks=publinks,
                   patents=patents)
        self._tables = {}
        for table_name, orm in TABLES.items():
            frame = raw[table_name]
            if frame is None:
                frame = empty_table(table_name)
            check_columns(frame, required_columns(orm), table_name)
            if preprocess:
                frame = preprocess_table(frame, orm)
            self._tables[table_name] = frame
            logging.debug(f'Loaded {len(frame)} rows into {table_name}')
        self._indexes = {}

    @classmethod
    def from_csv_dir(cls, path):
        '''Load each table from :code:`{path}/{table_name}.csv`.
        Missing files are treated as empty tables.

        Args:
            path (str): Directory containing the CSV files.
        Returns:
            :obj:`TableStore`
        '''
        tables = {}
        for table_name, orm in TABLES.items():
            file_path = os.path.join(path, f'{table_name}.csv')
            if not os.path.exists(file_path):
                logging.warning(f'{file_path} not found, so {table_name} '
                                'will be empty')
                continue
            # Identifiers are read verbatim, e.g. to keep leading zeros
            dtype = {col: str for col in string_columns(orm)}
            tables[table_name] = pd.read_csv(file_path, dtype=dtype)
        logging.info(f'Read {len(tables)} tables from {path}')
        return cls(**tables)

    @classmethod
    def from_sql(cls, engine):
        '''Load each table from the database behind :obj:`engine`,
        using the table names in :obj:`nih_orm`.

        Args:
            engine (:obj:`sqlalchemy.engine.Engine`): Database connection.
        Returns:
            :obj:`TableStore`
        '''
        tables = {}
        for table_name, orm in TABLES.items():
            columns = list(ordered_column_names(orm))
            tables[table_name] = pd.read_sql_table(table_name, engine,
                                                   columns=columns)
        logging.info(f'Read {len(tables)} tables from {engine.url}')
        return cls(**tables)

    def _read_only(self, table_name):
        # Callers get a copy, so that the store and its indexes stay valid
        return self._tables[table_name].copy()

    @property
    def projects(self):
        return self._read_only('projects')

    @property
    def project_pis(self):
        return self._read_only('project_pis')

    @property
    def project_orgs(self):
        return self._read_only('project_orgs')

    @property
    def publinks(self):
        return self._read_only('publinks')

    @property
    def patents(self):
        return self._read_only('patents')

    @property
    def is_empty(self):
        return self._tables['projects'].empty

    def table(self, table_name):
        """Retrieve a table by name, e.g. 'publinks'"""
        return self._read_only(table_name)

    def related(self, table_name, key):
        '''Index of the named table: each value of column :obj:`key`
        mapped to the list of row positions holding that value.
        Indexes are built on first use.

        Args:
            table_name (str): Name of the table to index.
            key (str): Column to index on.
        Returns:
            :obj:`dict` of {value: [row positions]}
        '''
        if (table_name, key) not in self._indexes:
            frame = self._tables[table_name]
            check_columns(frame, [key], table_name)
            index = {}
            for position, value in enumerate(frame[key]):
                index.setdefault(value, []).append(position)
            self._indexes[(table_name, key)] = index
        return self._indexes[(table_name, key)]

    def _lookup(self, table_name, key, value, column):
        positions = self.related(table_name, key).get(value, [])
        return self._tables[table_name][column].iloc[positions].tolist()

    def pmids_for(self, project_num):
        """Publications linked to the project"""
        return self._lookup('publinks', 'project_num', project_num, 'pmid')

    def patents_for(self, project_num):
        """Patents linked to the project"""
        return self._lookup('patents', 'project_num', project_num,
                            'patent_id')

    def projects_for_pi(self, pi_id):
        """Projects on which the PI is listed"""
        return self._lookup('project_pis', 'pi_id', pi_id, 'project_num')

    def __repr__(self):
        sizes = ', '.join(f'{name}={len(frame)}'
                          for name, frame in self._tables.items())
        return f'TableStore({sizes})'
