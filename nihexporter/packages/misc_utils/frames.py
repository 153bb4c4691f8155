"""Small helpers shared by the NIH aggregations."""
import pandas as pd


def empty_result(columns):
    """An empty frame with the given columns, returned by
    aggregations whenever there is nothing to aggregate."""
    return pd.DataFrame(columns=list(columns))


def filter_rows(frame, **criteria):
    """ filter_rows
    Keep rows of the frame matching every criterion, ignoring any
    criterion whose value is None.

    Args:
        frame (:obj:`pandas.DataFrame`): Data to filter.
        criteria: {column: required value} pairs.

    Returns:
        (:obj:`pandas.DataFrame`): The matching rows.
    """
    mask = pd.Series(True, index=frame.index)
    for column, value in criteria.items():
        if value is None:
            continue
        mask &= (frame[column] == value)
    return frame.loc[mask]


def stable_sort(frame, by, ascending=True):
    """Sort on a single column, keeping the input order of ties,
    and renumber the index."""
    return (frame.sort_values(by, ascending=ascending, kind='mergesort')
            .reset_index(drop=True))


def optional_keys(frame, *columns):
    """The subset of :obj:`columns` present in :obj:`frame`, in order"""
    return [col for col in columns if col in frame.columns]
