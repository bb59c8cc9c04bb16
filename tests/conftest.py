import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from config import ORDINAL_LEVELS


def make_customers(n=60, seed=0):
    """BankChurners-shaped table with three well separated transaction blobs."""
    rng = np.random.default_rng(seed)
    segment = np.arange(n) % 3
    amt_centres = np.array([1500.0, 4500.0, 14000.0])
    ct_centres = np.array([30.0, 70.0, 110.0])

    df = pd.DataFrame({
        "CLIENTNUM": np.arange(700000000, 700000000 + n),
        "Attrition_Flag": rng.choice(["Existing Customer", "Attrited Customer"], size=n),
        "Customer_Age": rng.integers(26, 70, size=n),
        "Gender": rng.choice(["M", "F"], size=n),
        "Dependent_count": rng.integers(0, 5, size=n),
        "Education_Level": rng.choice(ORDINAL_LEVELS["Education_Level"], size=n),
        "Marital_Status": rng.choice(["Married", "Single", "Divorced", "Unknown"], size=n),
        "Income_Category": rng.choice(ORDINAL_LEVELS["Income_Category"], size=n),
        "Card_Category": rng.choice(["Blue", "Silver", "Gold", "Platinum"], size=n),
        "Months_on_book": rng.integers(13, 56, size=n),
        "Total_Relationship_Count": rng.integers(1, 6, size=n),
        "Months_Inactive_12_mon": rng.integers(0, 6, size=n),
        "Contacts_Count_12_mon": rng.integers(0, 6, size=n),
        "Credit_Limit": rng.uniform(1438.3, 34516.0, size=n).round(1),
        "Total_Revolving_Bal": rng.integers(0, 2517, size=n),
        "Avg_Open_To_Buy": rng.uniform(3.0, 34516.0, size=n).round(1),
        "Total_Amt_Chng_Q4_Q1": rng.uniform(0.0, 3.4, size=n).round(3),
        "Total_Trans_Amt": (amt_centres[segment] + rng.normal(0, 150, size=n)).round().astype(int),
        "Total_Trans_Ct": (ct_centres[segment] + rng.normal(0, 4, size=n)).round().astype(int),
        "Total_Ct_Chng_Q4_Q1": rng.uniform(0.0, 3.7, size=n).round(3),
        "Avg_Utilization_Ratio": rng.uniform(0.0, 1.0, size=n).round(3),
    })
    df["segment"] = segment
    return df


@pytest.fixture
def raw_customers():
    return make_customers()


@pytest.fixture
def customers_csv(tmp_path, raw_customers):
    path = tmp_path / "BankChurners.csv"
    raw_customers.to_csv(path, index=False)
    return path
