"""
DataFrame Bridge - Conversion between tabular models and pandas DataFrames.

Also reads DB-API 2.0 cursors (anything with `description` and
`fetchall()`), which is how live query results become tabular models.
"""

import logging
from typing import Any, List, Optional

import pandas as pd

from .headers import HeaderIndex
from .model import TabularModel, cell_text
from ..constants import DEFAULT_COLUMN_DELIMITER

logger = logging.getLogger(__name__)


def _cell(value: Any) -> str:
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return ""
    if hasattr(value, "item") and pd.api.types.is_scalar(value):
        # numpy scalar -> Python scalar
        value = value.item()
    return cell_text(value)


def model_to_dataframe(model: TabularModel) -> pd.DataFrame:
    """
    Convert a tabular model to a DataFrame of strings.

    Args:
        model: Source model

    Returns:
        DataFrame with one column per (disambiguated) header
    """
    return pd.DataFrame(model.rows, columns=model.headers.names, dtype=object)


def dataframe_to_model(df: pd.DataFrame, delimiter: str = DEFAULT_COLUMN_DELIMITER) -> TabularModel:
    """
    Convert a DataFrame to a tabular model.

    Missing values (None, NaN, NaT) become empty cells.

    Args:
        df: Source DataFrame
        delimiter: Delimiter stored on the model

    Returns:
        TabularModel
    """
    model = TabularModel(headers=HeaderIndex(str(c) for c in df.columns), delimiter=delimiter)
    for values in df.itertuples(index=False, name=None):
        model.rows.append([_cell(v) for v in values])
    logger.debug(f"Converted DataFrame: {len(df.columns)} columns, {len(model.rows)} rows")
    return model


def cursor_to_dataframe(cursor) -> pd.DataFrame:
    """
    Fetch all remaining rows of a DB-API cursor.

    Args:
        cursor: Executed DB-API 2.0 cursor

    Returns:
        DataFrame with object columns (values as returned by the driver)
    """
    columns: List[str] = [d[0] for d in (cursor.description or [])]
    rows = cursor.fetchall() if columns else []
    return pd.DataFrame([tuple(r) for r in rows], columns=columns, dtype=object)


def cursor_to_model(cursor, delimiter: Optional[str] = None) -> TabularModel:
    """Read a DB-API cursor into a tabular model."""
    df = cursor_to_dataframe(cursor)
    model = dataframe_to_model(df, delimiter or DEFAULT_COLUMN_DELIMITER)
    logger.info(f"Read result set: {model.width} columns, {len(model.rows)} rows")
    return model
