"""
preprocess_nih
==============

Data cleaning / wrangling applied once, as tables are loaded
into a :obj:`TableStore`, specifically:

  * Dealing consistently with null values, so that a missing
    identifier is always the empty string.
  * Coercing costs and fiscal years to numbers, and dates to datetimes.
  * Inferring the activity and institute codes from the core project
    number, where these are missing.
  * Dropping rows which can't be attributed to a project or a link target.
"""
import logging
import re

import pandas as pd

from nihexporter.core.orms.orm_utils import string_columns
from nihexporter.core.orms.orm_utils import date_columns
from nihexporter.packages.format_utils.datetools import parse_date_series

NIH_NULLS = ('', 'N/A', 'Not Required', 'None', 'nan')
# Link tables, and the column pointing at the linked entity
LINK_TARGETS = {'publinks': 'pmid', 'patents': 'patent_id'}
# e.g. R01GM012345 --> R01, GM, 012345
CORE_REGEX = re.compile(r'^([A-Z][A-Z0-9]{2})([A-Z]{2})(\d{6})$')
BASE_REGEX = re.compile(r'^(.*)-(\d+)-(\d+)-(\d+)$')


def is_nih_null(value, nulls=NIH_NULLS):
    """Returns True if the value is listed in the `nulls` argument,
    or the value is NaN, null or None."""
    if isinstance(value, str):
        return value.strip() in nulls
    try:
        return bool(pd.isnull(value))
    except (TypeError, ValueError):
        # Array-like values are never null
        return False


def clean_identifier(value):
    """Standardise an identifier to a stripped string, with
    the empty string standing in for any kind of null."""
    if is_nih_null(value):
        return ''
    # Numeric ids read back from SQL or CSV as floats, e.g. PMIDs
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def get_base_code(core_code):
    """Extract the base code from the core project number
    if the pattern matches, otherwise return the
    core project number."""
    try:
        core_code, _, _, _ = BASE_REGEX.findall(core_code)[0]
    except IndexError:
        pass
    return core_code


def parse_core_project_num(project_num):
    """Split a core project number into its components.

    Args:
        project_num (str): Core project number, e.g. 'R01GM012345'
    Returns:
        :obj:`dict` with keys 'activity', 'institute' and 'serial', or
        :code:`None` if the project number doesn't follow the NIH format.
    """
    if not isinstance(project_num, str):
        return None
    match = CORE_REGEX.match(get_base_code(project_num.strip()))
    if match is None:
        return None
    activity, institute, serial = match.groups()
    return {'activity': activity, 'institute': institute, 'serial': serial}


def impute_codes(frame):
    """Fill empty 'activity' and 'institute' values from the
    project number, where it can be parsed."""
    for code in ('activity', 'institute'):
        if code not in frame.columns:
            continue
        missing = frame[code] == ''
        if not missing.any():
            continue
        imputed = frame.loc[missing, 'project_num'].map(
            lambda num: (parse_core_project_num(num) or {}).get(code, ''))
        frame.loc[missing, code] = imputed
        logging.debug(f'Imputed {(imputed != "").sum()} '
                      f'missing {code} codes')
    return frame


def preprocess_table(frame, orm):
    """Standardise nulls, identifiers, numbers and dates, as required.

    Args:
        frame (:obj:`pandas.DataFrame`): Raw table to clean, with columns
                                         matching the provided ORM.
        orm (SqlAlchemy selectable): ORM from which to infer string and
                                     date fields.
    Returns:
        A cleaned copy of :obj:`frame`.
    """
    frame = frame.copy()
    table_name = orm.__tablename__
    for col in string_columns(orm) & set(frame.columns):
        frame[col] = frame[col].map(clean_identifier).astype(object)
    for col in date_columns(orm) & set(frame.columns):
        frame[col] = parse_date_series(frame[col])
    if 'total_cost' in frame.columns:
        frame['total_cost'] = pd.to_numeric(frame['total_cost'],
                                            errors='coerce').astype(float)
    if 'fiscal_year' in frame.columns:
        frame['fiscal_year'] = pd.to_numeric(frame['fiscal_year'],
                                             errors='coerce').astype('Int64')
    if table_name == 'projects':
        frame = impute_codes(frame)
        unattributed = frame['project_num'] == ''
        if unattributed.any():
            logging.warning(f'Dropping {unattributed.sum()} projects '
                            'with no project number')
            frame = frame.loc[~unattributed]
    elif table_name in LINK_TARGETS:
        no_target = frame[LINK_TARGETS[table_name]] == ''
        if no_target.any():
            logging.warning(f'Dropping {no_target.sum()} rows from '
                            f'{table_name} with no link target')
            frame = frame.loc[~no_target]
    return frame.reset_index(drop=True)
