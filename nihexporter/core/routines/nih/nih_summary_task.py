'''
NIH summaries
=============

Luigi routine to summarise NIH ExPORTER tables into a set of CSV
files, ready for plotting: spending over time, lifetime cost of
projects, cost per publication and patent, project durations,
cost bins and the productivity of each bin, and where the money
goes (per PI and per organisation).
'''

import datetime
import logging
import os

import luigi

from nihexporter.core.luigihacks.luigi_logging import set_log_level
from nihexporter.core.luigihacks.misctools import extract_task_info
from nihexporter.core.luigihacks.misctools import get_config
from nihexporter.packages.nih.binning import bin_by_cost
from nihexporter.packages.nih.binning import bin_by_fixed_breaks
from nihexporter.packages.nih.binning import productivity_by_bin
from nihexporter.packages.nih.costs import cost_over_time
from nihexporter.packages.nih.costs import cost_per_pi
from nihexporter.packages.nih.costs import lifetime_cost
from nihexporter.packages.nih.costs import longest_duration
from nihexporter.packages.nih.costs import money_per_org
from nihexporter.packages.nih.productivity import cost_per_patent
from nihexporter.packages.nih.productivity import cost_per_publication
from nihexporter.packages.nih.productivity import publication_counts
from nihexporter.packages.nih.table_store import TableStore

SUMMARIES = ['cost_over_time', 'lifetime_cost', 'cost_per_publication',
             'cost_per_patent', 'longest_duration', 'cost_by_bin',
             'cost_by_fixed_bin', 'productivity_by_bin', 'cost_per_pi',
             'money_per_org']


def build_summaries(store, institute, activity, bin_count, min_cost, breaks):
    '''Run every aggregation over the store.

    Args:
        store (:obj:`TableStore`): The NIH tables.
        institute (str): Institute for the spending time series.
        activity (str): Activity code for the project-level summaries.
        bin_count (int): Number of cost bins per institute.
        min_cost (float): Discard projects costing less than this.
        breaks (list): Dollar amounts for the fixed cost bins.
    Returns:
        :obj:`dict` of summary name to :obj:`pandas.DataFrame`,
        ordered as :obj:`SUMMARIES`.
    '''
    costs = lifetime_cost(store, activity=activity, min_cost=min_cost)
    cost_bins = bin_by_cost(costs, bin_count)
    summaries = {
        'cost_over_time': cost_over_time(store, institute),
        'lifetime_cost': costs,
        'cost_per_publication': cost_per_publication(store, costs),
        'cost_per_patent': cost_per_patent(store, costs),
        'longest_duration': longest_duration(store, activity=activity),
        'cost_by_bin': cost_bins,
        'cost_by_fixed_bin': bin_by_fixed_breaks(costs, breaks),
        'productivity_by_bin': productivity_by_bin(cost_bins,
                                                   publication_counts(store)),
        'cost_per_pi': cost_per_pi(store, min_cost=min_cost),
        'money_per_org': money_per_org(store),
    }
    return {name: summaries[name] for name in SUMMARIES}


class SummaryTask(luigi.Task):
    '''Load the NIH tables from CSV and write every summary to
    :obj:`output_dir`/:obj:`date`/<summary name>.csv

    Args:
        date (datetime): Date used to label the outputs
        data_dir (str): Directory holding <table name>.csv files
        output_dir (str): Directory to write the summaries to
        institute (str): Institute for the spending time series
        activity (str): Activity code for the project-level summaries
        bin_count (int): Number of cost bins per institute
        min_cost (float): Discard projects costing less than this
        breaks (list): Dollar amounts for the fixed cost bins
        test (bool): If True pipeline is running in test mode
    '''
    date = luigi.DateParameter(default=datetime.date.today())
    data_dir = luigi.Parameter()
    output_dir = luigi.Parameter()
    institute = luigi.Parameter(default='GM')
    activity = luigi.Parameter(default='R01')
    bin_count = luigi.IntParameter(default=20)
    min_cost = luigi.FloatParameter(default=0.0)
    breaks = luigi.ListParameter(default=[0, 1e6, 2e6])
    test = luigi.BoolParameter(default=True)

    def output(self):
        '''One local CSV target per summary'''
        out_dir = os.path.join(self.output_dir, str(self.date))
        return {name: luigi.LocalTarget(os.path.join(out_dir, f'{name}.csv'))
                for name in SUMMARIES}

    def run(self):
        set_log_level(test=self.test)
        _, routine_id = extract_task_info(self)
        logging.info(f'{routine_id}: loading tables from {self.data_dir}')
        store = TableStore.from_csv_dir(self.data_dir)
        if store.is_empty:
            logging.warning(f'{routine_id}: no projects found, '
                            'all summaries will be empty')
        summaries = build_summaries(store, institute=self.institute,
                                    activity=self.activity,
                                    bin_count=self.bin_count,
                                    min_cost=self.min_cost,
                                    breaks=list(self.breaks))
        outputs = self.output()
        for name, frame in summaries.items():
            with outputs[name].open('w') as f:
                f.write(frame.to_csv(index=False))
            logging.info(f'{routine_id}: wrote {len(frame)} rows to {name}')


class RootTask(luigi.WrapperTask):
    '''Collect the default parameters from the config file,
    and execute the summary task.

    Args:
        date (datetime): Date used to label the outputs
        config_file (str): Yaml config, with a 'summary' header
        production (bool): Flag indicating whether running in testing
                           mode (False, default), or production mode (True).
    '''
    date = luigi.DateParameter(default=datetime.date.today())
    config_file = luigi.Parameter(default='nihexporter.yaml')
    production = luigi.BoolParameter(default=False)

    def requires(self):
        '''Call the summary task, configured from :obj:`config_file`'''
        set_log_level(test=not self.production)
        config = get_config(self.config_file, 'summary')
        return SummaryTask(date=self.date, test=not self.production,
                           **config)
