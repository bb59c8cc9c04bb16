# 6. app.py

import argparse
import logging
import os
import sys
from dataclasses import dataclass

import matplotlib.pyplot as plt
import pandas as pd

from cluster import (compare_clusterings, elbow_curve, fit_hierarchical, fit_kmeans,
                     recommend_k, silhouette_curve, KMeansEngine)
from config import (ClusterConfig, HCLUST_COLUMN, NOMINAL_COLUMNS, NUMERIC_COLUMNS,
                    ORDINAL_LEVELS, SCATTER_AXES)
from errors import SegmentationError
from export import export_clusters, load_model, save_model
from load_data import load_data
from predict_batch import predict_new
from preprocess import clean_customers, scale_features, select_features
import visualize

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    data: pd.DataFrame
    wss: pd.DataFrame
    silhouette: pd.DataFrame
    recommended_k: int
    kmeans_fit: object
    hclust_fit: object
    linkage_matrix: object
    crosstab: pd.DataFrame
    scaler: object


def cluster_customers(df, config=None):
    """
    Run selection, both final fits and the comparison on a cleaned table.

    Returns a PipelineResult whose `data` carries both cluster columns.
    """
    config = config or ClusterConfig()
    features = list(config.features)

    X_scaled, _ = scale_features(select_features(df, features))
    wss = elbow_curve(X_scaled, config.max_k, engine=KMeansEngine(seed=config.seed))
    silhouette = silhouette_curve(X_scaled, config.max_k, seed=config.seed)
    best_k = recommend_k(silhouette) if not silhouette.empty else config.final_k
    logger.info(f"Silhouette suggests k={best_k}; using final_k={config.final_k}")

    df_km, km_fit, scaler = fit_kmeans(df, features, k=config.final_k, seed=config.seed)
    df_both, hc_fit, Z = fit_hierarchical(df_km, features, k=config.final_k, linkage=config.linkage)
    crosstab = compare_clusterings(df_both)
    logger.info(f"KMeans vs hierarchical cluster counts:\n{crosstab}")

    return PipelineResult(
        data=df_both, wss=wss, silhouette=silhouette, recommended_k=best_k,
        kmeans_fit=km_fit, hclust_fit=hc_fit, linkage_matrix=Z,
        crosstab=crosstab, scaler=scaler,
    )


def save_figures(raw, result, figures_dir, config):
    os.makedirs(figures_dir, exist_ok=True)

    def path(name):
        return os.path.join(figures_dir, name)

    df = result.data
    figures = [
        visualize.plot_missingness(raw, save_path=path("missingness.png")),
        visualize.plot_category_counts(df, NOMINAL_COLUMNS, save_path=path("demographics.png")),
        visualize.plot_category_counts(df, list(ORDINAL_LEVELS), save_path=path("ordinal_levels.png")),
        visualize.plot_histograms(df, NUMERIC_COLUMNS, save_path=path("histograms.png")),
        visualize.plot_scatter(df, *SCATTER_AXES, save_path=path("transactions.png")),
        visualize.plot_elbow(result.wss, save_path=path("elbow.png")),
        visualize.plot_silhouette(result.silhouette, save_path=path("silhouette.png")),
        visualize.plot_clusters(df, save_path=path("kmeans_clusters.png")),
        visualize.plot_cluster_comparison(df, save_path=path("cluster_comparison.png")),
    ]
    if result.linkage_matrix is not None:
        figures.append(visualize.plot_dendrogram(result.linkage_matrix, k=config.final_k,
                                                 save_path=path("dendrogram.png")))
    for fig in figures:
        plt.close(fig)


def run_pipeline(data_path, output_path, config=None, figures_dir=None, model_out=None):
    """Load, clean, cluster and export. Any stage error aborts the run."""
    config = config or ClusterConfig()
    raw = load_data(data_path)
    cleaned = clean_customers(raw)
    result = cluster_customers(cleaned, config)

    # Only the k-means labels go into the exported table
    export_clusters(result.data.drop(columns=[HCLUST_COLUMN]), output_path)

    if model_out:
        save_model({
            "model": result.kmeans_fit.model,
            "scaler": result.scaler,
            "features": list(config.features),
        }, model_out)
    if figures_dir:
        save_figures(raw, result, figures_dir, config)
    return result


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Credit-card customer segmentation")
    parser.add_argument("--data", type=str, default="BankChurners.csv", help="Path to customer CSV")
    parser.add_argument("--output", type=str, default=None,
                        help="Where to write the clustered CSV (default: BankChurners_clustered.csv, or predicted_clusters.csv with --predict)")
    parser.add_argument("--figures-dir", type=str, default=None, help="Directory for plots (skipped if omitted)")
    parser.add_argument("--model-out", type=str, default=None, help="Where to save the fitted k-means model")
    parser.add_argument("--predict", type=str, default=None, help="CSV of new customers to segment with --model-out")
    parser.add_argument("--seed", type=int, default=11, help="Random seed for k-means")
    parser.add_argument("--final-k", type=int, default=3, help="Cluster count for the final fits")
    parser.add_argument("--max-k", type=int, default=10, help="Largest k in the elbow/silhouette scan")
    parser.add_argument("--linkage", type=str, default="ward", help="Hierarchical linkage method")
    parser.add_argument("--log-level", type=str, default="INFO")
    return parser.parse_args(argv)


def configure_logging(level):
    logging.basicConfig(level=getattr(logging, level.upper()), format="[%(levelname)s] %(message)s")


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        if args.predict:
            if not args.model_out:
                logger.error("--predict requires --model-out pointing at a saved model")
                return 1
            predict_new(load_model(args.model_out), pd.read_csv(args.predict),
                        output_path=args.output or "predicted_clusters.csv")
        else:
            config = ClusterConfig(seed=args.seed, final_k=args.final_k,
                                   max_k=args.max_k, linkage=args.linkage)
            run_pipeline(args.data, args.output or "BankChurners_clustered.csv", config,
                         figures_dir=args.figures_dir, model_out=args.model_out)
    except (SegmentationError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
