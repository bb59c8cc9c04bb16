# config.py
"""
Configuration for the credit-card customer segmentation pipeline.

Column names follow the BankChurners CSV layout. Category orders are fixed;
"Unknown" is always the first level so it encodes to rank 1.
"""

from dataclasses import dataclass
from typing import Tuple

from errors import ConfigError

# =============================================================================
# COLUMNS
# =============================================================================

ID_COLUMN = "CLIENTNUM"
ATTRITION_COLUMN = "Attrition_Flag"

NUMERIC_COLUMNS = [
    "Customer_Age",
    "Dependent_count",
    "Months_on_book",
    "Total_Relationship_Count",
    "Months_Inactive_12_mon",
    "Contacts_Count_12_mon",
    "Credit_Limit",
    "Total_Revolving_Bal",
    "Avg_Open_To_Buy",
    "Total_Amt_Chng_Q4_Q1",
    "Total_Trans_Amt",
    "Total_Trans_Ct",
    "Total_Ct_Chng_Q4_Q1",
    "Avg_Utilization_Ratio",
]

NOMINAL_COLUMNS = ["Gender", "Marital_Status"]

# =============================================================================
# CATEGORY LEVELS
# =============================================================================

ATTRITION_LABELS = {
    "Existing Customer": "Retained",
    "Attrited Customer": "Churned",
}

ORDINAL_LEVELS = {
    "Education_Level": [
        "Unknown", "Uneducated", "High School", "College",
        "Graduate", "Post-Graduate", "Doctorate",
    ],
    "Income_Category": [
        "Unknown", "Less than $40K", "$40K - $60K", "$60K - $80K",
        "$80K - $120K", "$120K +",
    ],
    "Card_Category": ["Unknown", "Blue", "Silver", "Gold", "Platinum"],
}

REQUIRED_COLUMNS = (
    [ID_COLUMN, ATTRITION_COLUMN]
    + NOMINAL_COLUMNS
    + list(ORDINAL_LEVELS)
    + NUMERIC_COLUMNS
)

# =============================================================================
# CLUSTERING
# =============================================================================

KMEANS_COLUMN = "KMeans_Cluster"
HCLUST_COLUMN = "HClust_Cluster"

CLUSTER_FEATURES = (
    "Income_Category",
    "Education_Level",
    "Total_Trans_Amt",
    "Total_Trans_Ct",
)

# Axes used by the comparison scatter
SCATTER_AXES = ("Total_Trans_Amt", "Total_Trans_Ct")

LINKAGE_METHODS = ("ward", "complete", "average", "single")


@dataclass(frozen=True)
class ClusterConfig:
    seed: int = 11
    final_k: int = 3
    max_k: int = 10
    linkage: str = "ward"
    features: Tuple[str, ...] = CLUSTER_FEATURES

    def __post_init__(self):
        if self.final_k < 1:
            raise ConfigError(f"final_k must be >= 1, got {self.final_k}")
        if self.max_k < 1:
            raise ConfigError(f"max_k must be >= 1, got {self.max_k}")
        if self.linkage not in LINKAGE_METHODS:
            raise ConfigError(
                f"Unknown linkage '{self.linkage}'. Choose one of {list(LINKAGE_METHODS)}"
            )
        if not self.features:
            raise ConfigError("At least one clustering feature is required")
