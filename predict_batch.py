# 4.  predict_batch.py

import logging

import numpy as np

from config import KMEANS_COLUMN
from errors import SchemaError
from export import export_clusters
from preprocess import clean_customers, scale_features, select_features

logger = logging.getLogger(__name__)


def predict_new(bundle, new_df, output_path=None):
    """
    Assign k-means segments to new customers using a saved model bundle.

    Parameters:
        bundle (dict): Holds 'model' (fitted KMeans), 'scaler' (fitted
            StandardScaler or None) and 'features' (column list).
        new_df (pd.DataFrame): Raw customer rows in the BankChurners layout;
            Attrition_Flag may be absent.
        output_path (str): Optional CSV path to save predictions.

    Returns:
        pd.DataFrame: Cleaned copy of `new_df` with an added KMeans_Cluster column.
    """
    features = list(bundle["features"])
    missing = [col for col in features if col not in new_df.columns]
    if missing:
        raise SchemaError(f"Missing required features: {missing}")

    cleaned = clean_customers(new_df, require_attrition=False)
    X = select_features(cleaned, features)
    if bundle.get("scaler") is not None:
        X, _ = scale_features(X, scaler=bundle["scaler"])

    cleaned[KMEANS_COLUMN] = bundle["model"].predict(np.asarray(X)) + 1

    if output_path:
        export_clusters(cleaned, output_path)
    return cleaned
