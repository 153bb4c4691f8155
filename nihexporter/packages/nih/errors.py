'''
Errors raised while building or aggregating NIH tables.
'''


class MissingColumn(KeyError):
    '''A required column is absent from a table'''
    def __init__(self, table_name, column):
        self.table_name = table_name
        self.column = column
        super().__init__(f"Column '{column}' is missing "
                         f"from table '{table_name}'")


class InvalidParameter(ValueError):
    '''An aggregation parameter failed validation'''


def check_columns(frame, columns, table_name):
    """Raise :obj:`MissingColumn` for the first of :obj:`columns`
    not found in :obj:`frame`."""
    for column in columns:
        if column not in frame.columns:
            raise MissingColumn(table_name, column)
