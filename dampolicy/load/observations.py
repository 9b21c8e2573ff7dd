import os
import logging
from abc import ABC, abstractmethod

import pandas as pd

from dampolicy.config import RAW_DATA_DIR
from dampolicy.utils.timeseries import DAILY_COLUMNS, validate_daily_series

logger = logging.getLogger(__name__)


def parse_dam_id(dam_id):
    """
    Split a dam identifier of the form '<source>_<damname>'.

    Only the first underscore separates the source, so dam names may
    contain underscores themselves.

    Returns:
        tuple: (source, dam_name)
    """
    if not isinstance(dam_id, str) or "_" not in dam_id:
        raise ValueError(f"Dam id must look like '<source>_<damname>', got {dam_id!r}.")
    source, dam_name = dam_id.split("_", 1)
    if not source or not dam_name:
        raise ValueError(f"Dam id must look like '<source>_<damname>', got {dam_id!r}.")
    return source, dam_name


class DamSource(ABC):
    """
    Resolves a dam identifier to its raw daily series.

    The daily series is a DataFrame indexed by date with a 'storage'
    column and optional 'inflow' / 'release' columns, in the units of
    the source.
    """

    @abstractmethod
    def resolve(self, dam_id):
        """Return the raw daily series for ``dam_id``."""


class CSVDamSource(DamSource):
    """
    Reads '<data_dir>/<source>/<damname>.csv' files.

    Expected columns: date, storage, and optionally release and inflow.
    Empty cells are read as missing values.
    """

    def __init__(self, data_dir=RAW_DATA_DIR, date_column="date"):
        self.data_dir = data_dir
        self.date_column = date_column

    def get_filepath(self, dam_id):
        source, dam_name = parse_dam_id(dam_id)
        return os.path.join(self.data_dir, source, f"{dam_name}.csv")

    def resolve(self, dam_id):
        filepath = self.get_filepath(dam_id)
        if not os.path.exists(filepath):
            raise ValueError(f"Dam '{dam_id}' not found: {filepath} does not exist.")

        df = pd.read_csv(filepath, parse_dates=[self.date_column])
        df = df.set_index(self.date_column)
        df.index = pd.to_datetime(df.index.date)
        df.index.name = "date"

        keep = [col for col in DAILY_COLUMNS if col in df.columns]
        df = df[keep]
        validate_daily_series(df)
        logger.info("Loaded %d daily records for %s from %s", len(df), dam_id, filepath)
        return df


class InMemoryDamSource(DamSource):
    """
    Serves daily series from a mapping of dam id -> DataFrame.
    """

    def __init__(self, series_by_dam):
        for dam_id in series_by_dam:
            parse_dam_id(dam_id)
        self.series_by_dam = dict(series_by_dam)

    def resolve(self, dam_id):
        if dam_id not in self.series_by_dam:
            available = ", ".join(sorted(self.series_by_dam))
            raise ValueError(f"Dam '{dam_id}' not found. Known: {available}")
        return self.series_by_dam[dam_id].copy()
