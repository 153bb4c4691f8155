'''
datetools
=========

Tools for processing dates in NIH data.
'''

from datetime import date as _date
from datetime import datetime as dt
import re

import pandas as pd

DATE_FORMATS = [
    '%m/%d/%Y',   # 10/15/2013, ExPORTER's default
    '%Y-%m-%d',   # 2013-10-15
    '%Y/%m/%d',   # 2013/10/15
    '%Y-%m-%d %H:%M:%S',  # 2013-10-15 00:00:00, from SQL dumps
    '%b %d %Y',   # Oct 15 2013
    '%d %B %Y',   # 15 October 2013
    '%B %Y',      # October 2013
    '%b %Y',      # Oct 2013
    '%Y'          # 2013
]
DAYS_PER_YEAR = 365


def extract_year(date):
    '''
    Use search for 4 digits in a row to identify the year.

    Args:
        date (str): The full date string.

    Returns:
        integer
    '''
    try:
        year = re.search(r'\d{4}', date).group(0)
    except (TypeError, AttributeError):
        raise ValueError(f"No year extraction possible for: {date}")
    return int(year)


def parse_date(date):
    '''
    Convert a date of unknown format into a :obj:`datetime`. If no
    known format matches, fall back on {year}-01-01.

    Args:
        date (str): The full date string.
    Returns:
        :obj:`datetime`, or :code:`None` if not even a year is found.
    '''
    if isinstance(date, dt):
        return date
    if isinstance(date, _date):
        return dt(date.year, date.month, date.day)
    for date_format in DATE_FORMATS:
        try:
            return dt.strptime(date.strip(), date_format)
        except (ValueError, AttributeError):
            pass
    try:
        year = extract_year(date)
    except ValueError:
        return None
    try:
        return dt(year, 1, 1)
    except ValueError:
        # e.g. the zero date 0000-00-00
        return None


def parse_date_series(series):
    '''Apply :obj:`parse_date` over a series, giving a datetime
    series with :code:`NaT` wherever no date could be found.'''
    if pd.api.types.is_datetime64_any_dtype(series):
        return series
    # Sentinels such as 9999-12-31 may be out of bounds for pandas
    return pd.to_datetime(series.map(parse_date, na_action='ignore'),
                          errors='coerce')


def days_to_years(days):
    """Fixed, non-leap-aware conversion of a day count to years."""
    return days / DAYS_PER_YEAR
