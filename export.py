# export.py

import logging
import os

import joblib

from errors import ExportError

logger = logging.getLogger(__name__)


def export_clusters(df, output_path="BankChurners_clustered.csv"):
    """
    Write the augmented customer table as UTF-8, comma-delimited CSV.

    Row order and every column are kept as-is; the index is not written.

    Raises:
        ExportError: The target cannot be written.
    """
    try:
        df.to_csv(output_path, index=False, encoding="utf-8")
    except OSError as e:
        raise ExportError(f"Could not write clusters to {output_path}: {e}") from e
    logger.info(f"Clustered table saved to: {output_path} ({len(df)} rows)")
    return output_path


def save_model(bundle, path="kmeans_model.joblib"):
    """Persist a dict holding the fitted k-means model, its scaler and feature list."""
    try:
        joblib.dump(bundle, path)
    except OSError as e:
        raise ExportError(f"Could not write model to {path}: {e}") from e
    logger.info(f"Model saved as {path}")
    return path


def load_model(path="kmeans_model.joblib"):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Model not found: {path}")
    return joblib.load(path)
