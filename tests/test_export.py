import pandas as pd
import pytest

from cluster import fit_kmeans
from config import CLUSTER_FEATURES, KMEANS_COLUMN
from errors import ExportError
from export import export_clusters, load_model, save_model
from preprocess import clean_customers


@pytest.fixture
def clustered(raw_customers):
    df, fit, scaler = fit_kmeans(clean_customers(raw_customers), list(CLUSTER_FEATURES), k=3, seed=11)
    return df, fit, scaler


def test_export_round_trip(tmp_path, clustered):
    df, _, _ = clustered
    path = tmp_path / "clustered.csv"
    export_clusters(df, path)

    read_back = pd.read_csv(path, encoding="utf-8")
    expected = df.copy()
    for col in expected.select_dtypes("category").columns:
        expected[col] = expected[col].astype(str)

    assert len(read_back) == len(df)
    assert list(read_back.columns) == list(df.columns)
    assert read_back[KMEANS_COLUMN].tolist() == df[KMEANS_COLUMN].tolist()
    assert read_back["CLIENTNUM"].tolist() == df["CLIENTNUM"].tolist()
    pd.testing.assert_frame_equal(read_back, expected, check_dtype=False)


def test_export_writes_header_and_commas(tmp_path, clustered):
    df, _, _ = clustered
    path = tmp_path / "clustered.csv"
    export_clusters(df, path)
    header = path.read_text(encoding="utf-8").splitlines()[0]
    assert header.split(",") == list(df.columns)


def test_export_unwritable_target(tmp_path, clustered):
    df, _, _ = clustered
    with pytest.raises(ExportError):
        export_clusters(df, tmp_path / "missing-dir" / "clustered.csv")


def test_model_round_trip(tmp_path, clustered):
    _, fit, scaler = clustered
    path = tmp_path / "model.joblib"
    save_model({"model": fit.model, "scaler": scaler, "features": list(CLUSTER_FEATURES)}, path)

    bundle = load_model(path)
    assert bundle["features"] == list(CLUSTER_FEATURES)
    assert (bundle["model"].cluster_centers_ == fit.model.cluster_centers_).all()


def test_load_model_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_model(tmp_path / "absent.joblib")
