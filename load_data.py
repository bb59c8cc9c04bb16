# 1. load_data.py

import logging

import pandas as pd

from config import ID_COLUMN, NUMERIC_COLUMNS, REQUIRED_COLUMNS
from errors import SchemaError

logger = logging.getLogger(__name__)


def load_data(filepath="BankChurners.csv"):
    """
    Load the customer CSV and check it has the expected shape.

    Parameters:
        filepath (str): Path to the customer CSV (header row required).

    Returns:
        pd.DataFrame: Raw customer table, one row per customer.

    Raises:
        FileNotFoundError: The file does not exist.
        SchemaError: Required columns are missing, numeric columns hold
            non-numeric values, or the identifier is not unique.
    """
    df = pd.read_csv(filepath, encoding="utf-8")
    logger.info(f"Loaded data with shape: {df.shape}")
    validate_schema(df)
    return df


def validate_schema(df):
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise SchemaError(f"Missing required columns: {missing}")

    for col in NUMERIC_COLUMNS:
        if pd.api.types.is_numeric_dtype(df[col]):
            continue
        parsed = pd.to_numeric(df[col], errors="coerce")
        bad = df.loc[parsed.isna() & df[col].notna(), col]
        raise SchemaError(
            f"Column '{col}' has {len(bad)} non-numeric value(s): {bad.unique()[:5].tolist()}"
        )

    dupes = df[ID_COLUMN].duplicated()
    if dupes.any():
        raise SchemaError(
            f"Identifier '{ID_COLUMN}' is not unique: {int(dupes.sum())} duplicate(s)"
        )
