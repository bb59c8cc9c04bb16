# 2. preprocess.py

import logging

import pandas as pd
from sklearn.preprocessing import StandardScaler

from config import ATTRITION_COLUMN, ATTRITION_LABELS, NOMINAL_COLUMNS, ORDINAL_LEVELS
from errors import CategoryError, DegenerateInputError, SchemaError

logger = logging.getLogger(__name__)


def encode_ordinal(values, levels, column=None):
    """
    Map category strings to their 1-based rank in `levels`.

    Values outside `levels` (missing values included) raise CategoryError
    instead of becoming NaN.
    """
    values = pd.Series(values)
    ranks = {level: rank for rank, level in enumerate(levels, start=1)}
    encoded = values.map(ranks)
    invalid = encoded.isna()
    if invalid.any():
        bad = pd.unique(values[invalid])
        raise CategoryError(column or values.name, bad, int(invalid.sum()))
    return encoded.astype("int64")


def _to_category(values, levels, column):
    invalid = ~values.isin(levels)
    if invalid.any():
        raise CategoryError(column, pd.unique(values[invalid]), int(invalid.sum()))
    return pd.Categorical(values, categories=levels)


def clean_customers(df, require_attrition=True):
    """
    Recode the raw customer table.

    Attrition_Flag becomes a Retained/Churned categorical, Gender and
    Marital_Status become unordered categoricals, and the education, income
    and card-tier columns are replaced by their integer ranks. Returns a new
    table; `df` is left untouched.

    With `require_attrition=False` a table without Attrition_Flag (new
    customers awaiting a segment) is accepted and the column is skipped.
    """
    required = NOMINAL_COLUMNS + list(ORDINAL_LEVELS)
    if require_attrition or ATTRITION_COLUMN in df.columns:
        required = [ATTRITION_COLUMN] + required
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise SchemaError(f"Missing required columns: {missing}")

    out = df.copy()

    if ATTRITION_COLUMN in required:
        out[ATTRITION_COLUMN] = _to_category(
            df[ATTRITION_COLUMN], list(ATTRITION_LABELS), ATTRITION_COLUMN
        ).rename_categories(ATTRITION_LABELS)

    for col in NOMINAL_COLUMNS:
        if df[col].isna().any():
            raise CategoryError(col, [None], int(df[col].isna().sum()))
        out[col] = df[col].astype("category")

    for col, levels in ORDINAL_LEVELS.items():
        out[col] = encode_ordinal(df[col], levels, column=col).to_numpy()

    logger.info(f"Cleaned {len(out)} customer rows")
    return out


def select_features(df, columns):
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise SchemaError(f"Missing required features: {missing}")
    features = df[list(columns)]
    non_numeric = [col for col in columns if not pd.api.types.is_numeric_dtype(features[col])]
    if non_numeric:
        raise SchemaError(f"Features must be numeric, got non-numeric: {non_numeric}")
    if features.isna().any().any():
        raise SchemaError("Feature subset contains missing values")
    return features.astype("float64")


def scale_features(features, scaler=None):
    """
    Z-score the feature subset.

    A fitted `scaler` is reused as-is; otherwise a new StandardScaler is fit.
    Zero-variance columns cannot be normalized and raise DegenerateInputError.

    Returns:
        (np.ndarray, StandardScaler)
    """
    if scaler is None:
        flat = [col for col in features.columns if features[col].nunique() <= 1]
        if flat:
            raise DegenerateInputError(f"Zero-variance feature(s): {flat}")
        scaler = StandardScaler()
        X_scaled = scaler.fit_transform(features)
    else:
        X_scaled = scaler.transform(features)
    return X_scaled, scaler
