'''
A collection of miscellaneous tools.
'''
import os
from functools import lru_cache
import yaml

CONFIG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)),
                          'config')


def config_filepath(file_name, config_dir=CONFIG_DIR):
    '''Full path to a file in the config directory. Absolute paths
    are returned unchanged, so that users can point to their own config.

    Args:
        file_name (str): The configuration file name.
        config_dir (str): Directory to look in.
    Returns:
        :obj:`str`
    '''
    if os.path.isabs(file_name):
        return file_name
    return os.path.join(config_dir, file_name)


def load_yaml_config(file_name, config_dir=CONFIG_DIR):
    """Open a yaml file from the config directory.

    Args:
        file_name (str): The configuration file name.
        config_dir (str): Directory to look in.
    Returns:
        The file contents as a json-like object.
    """
    with open(config_filepath(file_name, config_dir)) as f:
        return yaml.safe_load(f)


def get_config(file_name, header, config_dir=CONFIG_DIR):
    '''Get the configuration from a yaml file in the config
    directory, and return the key-value pairs under the
    config :code:`header` as a `dict`.

    Parameters:
        file_name (str): The configuration file name.
        header (str): The header key in the config file.

    Returns:
        :obj:`dict`
    '''
    config = load_yaml_config(file_name, config_dir)
    if not isinstance(config, dict) or header not in config:
        raise KeyError(f"'{header}' not found in {file_name}")
    return dict(config[header] or {})


@lru_cache()
def extract_task_info(luigi_task):
    """Extract task name and generate a routine id from a luigi task, from the date and test fields.

    Args:
        luigi_task (luigi.Task): Task to extract test and date parameters from.
    Returns:
        {test, routine_id} (tuple): Test flag, and routine ID for this task.
    """
    test = (luigi_task.test if hasattr(luigi_task, 'test')
            else not luigi_task.production)
    task_name = type(luigi_task).__name__
    routine_id = f'{task_name}-{luigi_task.date}-{test}'
    return test, routine_id
