import logging
import os

import numpy as np
import pandas as pd

from ..types import DatasetError

logger = logging.getLogger(__name__)


def load_csv_data(filepath: str) -> dict[str, np.ndarray]:
    """
    Load every column of a CSV file as a float array.

    Args:
        filepath: Path to the CSV file.

    Returns:
        Dictionary mapping stripped column names to numpy arrays. Non-numeric
        cells become NaN.

    Raises:
        DatasetError: If the file is missing, empty, or cannot be parsed.
    """
    if not os.path.exists(filepath):
        raise DatasetError(f"File not found: {filepath}")

    try:
        df = pd.read_csv(filepath)
    except pd.errors.EmptyDataError as e:
        raise DatasetError(f"CSV file is empty or missing header: {filepath}") from e
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise DatasetError(f"Error reading CSV '{filepath}': {e}") from e

    data_map = {}
    for col in df.columns:
        # coercion to numeric, errors='coerce' turns non-numeric to NaN
        data_map[str(col).strip()] = pd.to_numeric(df[col], errors="coerce").to_numpy(
            dtype=float
        )
    logger.info("Loaded %d rows from '%s'", len(df), filepath)
    return data_map


def load_xy_csv(
    filepath: str, x_column: str = "x", y_column: str = "y"
) -> tuple[np.ndarray, np.ndarray]:
    """
    Load one input and one target column from a CSV file.

    Rows where either value is missing or non-numeric are dropped.

    Args:
        filepath: Path to the CSV file.
        x_column: Name of the input column.
        y_column: Name of the target column.

    Returns:
        Tuple of (x, y) float arrays of equal length.

    Raises:
        DatasetError: If a column is missing or no usable row remains.
    """
    data = load_csv_data(filepath)
    for column in (x_column, y_column):
        if column not in data:
            available = ", ".join(data) or "none"
            raise DatasetError(
                f"Column '{column}' not found in '{filepath}' (available: {available})"
            )

    x = data[x_column]
    y = data[y_column]
    usable = np.isfinite(x) & np.isfinite(y)
    dropped = int(len(x) - usable.sum())
    if dropped:
        logger.warning("Dropped %d rows with missing or non-numeric values", dropped)
    if not usable.any():
        raise DatasetError(f"No numeric ({x_column}, {y_column}) rows in '{filepath}'")

    return x[usable], y[usable]
