import numpy as np
import pandas as pd
import pytest

from dampolicy.errors import MalformedSeries
from dampolicy.load import CSVDamSource, InMemoryDamSource, parse_dam_id

from conftest import make_daily


@pytest.mark.parametrize("dam_id, expected", [
    ("nid_blue_marsh", ("nid", "blue_marsh")),
    ("usbr_hoover", ("usbr", "hoover")),
])
def test_parse_dam_id(dam_id, expected):
    assert parse_dam_id(dam_id) == expected


@pytest.mark.parametrize("dam_id", ["hoover", "_hoover", "usbr_", 42])
def test_parse_dam_id_rejects_bad_ids(dam_id):
    with pytest.raises(ValueError):
        parse_dam_id(dam_id)


def write_csv(tmp_path, source, dam_name, text):
    folder = tmp_path / source
    folder.mkdir()
    (folder / f"{dam_name}.csv").write_text(text)


def test_csv_source_reads_blank_cells_as_missing(tmp_path):
    write_csv(tmp_path, "usbr", "lake_one",
              "date,storage,release,inflow,notes\n"
              "2000-10-01,100.0,5.0,6.0,a\n"
              "2000-10-02,,5.0,,b\n"
              "2000-10-03,101.0,,6.5,c\n")
    source = CSVDamSource(data_dir=str(tmp_path))
    daily = source.resolve("usbr_lake_one")

    assert list(daily.columns) == ["storage", "inflow", "release"]
    assert daily.index.name == "date"
    assert daily.index[0] == pd.Timestamp("2000-10-01")
    assert np.isnan(daily.loc["2000-10-02", "storage"])
    assert np.isnan(daily.loc["2000-10-02", "inflow"])
    assert np.isnan(daily.loc["2000-10-03", "release"])


def test_csv_source_storage_only(tmp_path):
    write_csv(tmp_path, "nid", "pond",
              "date,storage\n2000-10-01,1.0\n2000-10-02,2.0\n")
    daily = CSVDamSource(data_dir=str(tmp_path)).resolve("nid_pond")
    assert list(daily.columns) == ["storage"]


def test_csv_source_rejects_duplicate_dates(tmp_path):
    write_csv(tmp_path, "nid", "pond",
              "date,storage\n2000-10-01,1.0\n2000-10-01,2.0\n")
    with pytest.raises(MalformedSeries):
        CSVDamSource(data_dir=str(tmp_path)).resolve("nid_pond")


def test_csv_source_missing_file(tmp_path):
    source = CSVDamSource(data_dir=str(tmp_path))
    assert source.get_filepath("nid_pond").endswith("pond.csv")
    with pytest.raises(ValueError):
        source.resolve("nid_pond")


def test_in_memory_source_returns_copies():
    daily = make_daily(end="1999-10-31")
    source = InMemoryDamSource({"nid_pond": daily})
    resolved = source.resolve("nid_pond")
    resolved["storage"] = 0.0
    assert (source.resolve("nid_pond")["storage"] == 100.0).all()


def test_in_memory_source_unknown_dam():
    source = InMemoryDamSource({"nid_pond": make_daily(end="1999-10-31")})
    with pytest.raises(ValueError):
        source.resolve("nid_lake")


def test_in_memory_source_validates_ids():
    with pytest.raises(ValueError):
        InMemoryDamSource({"pond": make_daily(end="1999-10-31")})
