"""
Tests for loading (x, y) samples from CSV files.
"""

import numpy as np
import pytest

from archipelago_pkg.types import DatasetError
from archipelago_pkg.utils.data_loading import load_csv_data
from archipelago_pkg.utils.data_loading import load_xy_csv


def _write(tmp_path, text, name="data.csv"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_load_all_columns(tmp_path):
    path = _write(tmp_path, "x, y,label\n1,2,a\n3,4,b\n")
    data = load_csv_data(path)
    assert set(data) == {"x", "y", "label"}
    np.testing.assert_array_equal(data["x"], [1.0, 3.0])
    assert np.all(np.isnan(data["label"]))


def test_load_xy(tmp_path):
    path = _write(tmp_path, "x,y\n0,1\n1,3\n2,5\n")
    x, y = load_xy_csv(path)
    np.testing.assert_array_equal(x, [0.0, 1.0, 2.0])
    np.testing.assert_array_equal(y, [1.0, 3.0, 5.0])


def test_non_numeric_rows_are_dropped(tmp_path):
    path = _write(tmp_path, "x,y\n0,1\noops,2\n2,\n3,7\n")
    x, y = load_xy_csv(path)
    np.testing.assert_array_equal(x, [0.0, 3.0])
    np.testing.assert_array_equal(y, [1.0, 7.0])


def test_custom_columns(tmp_path):
    path = _write(tmp_path, "time,height\n0,10\n1,8\n")
    x, y = load_xy_csv(path, x_column="time", y_column="height")
    np.testing.assert_array_equal(y, [10.0, 8.0])


def test_missing_file(tmp_path):
    with pytest.raises(DatasetError, match="File not found"):
        load_csv_data(str(tmp_path / "nope.csv"))


def test_empty_file(tmp_path):
    path = _write(tmp_path, "")
    with pytest.raises(DatasetError, match="empty"):
        load_csv_data(path)


def test_missing_column(tmp_path):
    path = _write(tmp_path, "a,b\n1,2\n")
    with pytest.raises(DatasetError, match="Column 'x' not found"):
        load_xy_csv(path)


def test_no_usable_rows(tmp_path):
    path = _write(tmp_path, "x,y\na,b\nc,d\n")
    with pytest.raises(DatasetError, match="No numeric"):
        load_xy_csv(path)
