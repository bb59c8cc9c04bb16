# 5. visualize.py

import logging

import matplotlib.pyplot as plt
import seaborn as sns
from scipy.cluster.hierarchy import dendrogram

from config import ATTRITION_COLUMN, HCLUST_COLUMN, KMEANS_COLUMN, SCATTER_AXES

logger = logging.getLogger(__name__)


def _finish(fig, save_path):
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=300)
        logger.info(f"Plot saved to: {save_path}")
    else:
        plt.show()
    return fig


################################
# Exploration
################################

def plot_missingness(df, save_path=None):
    """Heatmap of missing cells, one column per variable."""
    fig, ax = plt.subplots(figsize=(12, 6))
    sns.heatmap(df.isna(), cbar=False, yticklabels=False, cmap="viridis", ax=ax)
    ax.set_title(f"Missing Values ({int(df.isna().sum().sum())} cells)")
    ax.tick_params(axis="x", labelrotation=90, labelsize=7)
    return _finish(fig, save_path)


def plot_category_counts(df, columns, hue=ATTRITION_COLUMN, save_path=None):
    """
    Bar chart of row counts per level for each column in `columns`.

    Parameters:
        df (pd.DataFrame): Cleaned customer table.
        columns (list): Categorical or ordinal columns to count.
        hue (str): Column to split the bars by. Default is the retention status.
        save_path (str): Optional path to save the plot. If None, displays the plot.
    """
    fig, axes = plt.subplots(1, len(columns), figsize=(5 * len(columns), 4), squeeze=False)
    for ax, col in zip(axes[0], columns):
        sns.countplot(data=df, x=col, hue=hue if hue in df.columns else None, palette="Set2", ax=ax)
        ax.set_title(f"Customers by {col}")
        ax.tick_params(axis="x", labelrotation=45)
    return _finish(fig, save_path)


def plot_histograms(df, columns, bins=30, save_path=None):
    ncols = 3
    nrows = -(-len(columns) // ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(14, 3.5 * nrows), squeeze=False)
    flat_axes = axes.flatten()
    for ax, col in zip(flat_axes, columns):
        sns.histplot(df[col], bins=bins, ax=ax, edgecolor="black")
        ax.set_title(col, fontsize=9)
    for ax in flat_axes[len(columns):]:
        ax.set_visible(False)
    return _finish(fig, save_path)


def plot_scatter(df, x, y, hue=ATTRITION_COLUMN, save_path=None):
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.scatterplot(data=df, x=x, y=y, hue=hue, palette="Set2", s=20, alpha=0.7, ax=ax)
    ax.set_title(f"{y} vs {x}")
    return _finish(fig, save_path)


################################
# Cluster count selection
################################

def plot_elbow(wss, save_path=None):
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(wss["k"], wss["wss"], marker="o")
    ax.set_xticks(wss["k"])
    ax.set_title("Elbow Method")
    ax.set_xlabel("Number of clusters k")
    ax.set_ylabel("Total within-cluster sum of squares")
    return _finish(fig, save_path)


def plot_silhouette(silhouette, save_path=None):
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(silhouette["k"], silhouette["silhouette"], marker="o")
    if not silhouette.empty:
        best = silhouette.loc[silhouette["silhouette"].idxmax()]
        ax.axvline(best["k"], linestyle="--", color="gray")
    ax.set_xticks(silhouette["k"])
    ax.set_title("Silhouette Method")
    ax.set_xlabel("Number of clusters k")
    ax.set_ylabel("Average silhouette width")
    return _finish(fig, save_path)


def plot_dendrogram(linkage_matrix, k=None, truncate_p=30, save_path=None):
    """Dendrogram of the last `truncate_p` merges, with the k-cluster cut drawn."""
    fig, ax = plt.subplots(figsize=(12, 6))
    dendrogram(linkage_matrix, truncate_mode="lastp", p=truncate_p,
               leaf_rotation=90., leaf_font_size=8., show_contracted=True, ax=ax)
    if k and 1 < k <= len(linkage_matrix):
        # Any height between the (k-1)th and kth last merges cuts into k groups
        heights = linkage_matrix[:, 2]
        cut = (heights[-(k - 1)] + heights[-k]) / 2
        ax.axhline(cut, linestyle="--", color="red")
    ax.set_title("Hierarchical Clustering Dendrogram")
    ax.set_ylabel("Merge height")
    return _finish(fig, save_path)


################################
# Cluster results
################################

def plot_clusters(df, x=SCATTER_AXES[0], y=SCATTER_AXES[1], cluster_col=KMEANS_COLUMN, save_path=None):
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.scatterplot(data=df, x=x, y=y, hue=df[cluster_col].astype(str), palette="Set2", s=30, ax=ax)
    ax.set_title(f"Customer Segments ({cluster_col})")
    ax.legend(title="Cluster")
    return _finish(fig, save_path)


def plot_cluster_comparison(df, x=SCATTER_AXES[0], y=SCATTER_AXES[1],
                            kmeans_col=KMEANS_COLUMN, hclust_col=HCLUST_COLUMN, save_path=None):
    """Colour encodes the k-means cluster, marker shape the hierarchical cluster."""
    fig, ax = plt.subplots(figsize=(9, 6))
    sns.scatterplot(data=df, x=x, y=y,
                    hue=df[kmeans_col].astype(str), style=df[hclust_col].astype(str),
                    palette="Set1", s=35, alpha=0.8, ax=ax)
    ax.set_title("K-Means (colour) vs Hierarchical (shape)")
    return _finish(fig, save_path)
