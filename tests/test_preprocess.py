import numpy as np
import pandas as pd
import pytest

from config import ORDINAL_LEVELS
from errors import CategoryError, DegenerateInputError, SchemaError
from preprocess import clean_customers, encode_ordinal, scale_features, select_features


@pytest.mark.parametrize("column", list(ORDINAL_LEVELS))
def test_encode_ordinal_preserves_declared_order(column):
    levels = ORDINAL_LEVELS[column]
    ranks = encode_ordinal(levels, levels).tolist()
    assert ranks == list(range(1, len(levels) + 1))
    assert encode_ordinal(["Unknown"], levels).iloc[0] == 1


def test_encode_ordinal_is_deterministic():
    levels = ORDINAL_LEVELS["Income_Category"]
    values = ["$120K +", "Unknown", "$40K - $60K", "$120K +"]
    first = encode_ordinal(values, levels)
    second = encode_ordinal(values, levels)
    assert first.tolist() == second.tolist() == [6, 1, 3, 6]


def test_encode_ordinal_rejects_undeclared_value():
    with pytest.raises(CategoryError) as excinfo:
        encode_ordinal(["Graduate", "PhD"], ORDINAL_LEVELS["Education_Level"], column="Education_Level")
    assert excinfo.value.column == "Education_Level"
    assert excinfo.value.bad_values == ["PhD"]
    assert excinfo.value.n_rows == 1


def test_unknown_income_and_doctorate(raw_customers):
    row = raw_customers.iloc[[0]].copy()
    row["Income_Category"] = "Unknown"
    row["Education_Level"] = "Doctorate"
    row["Total_Trans_Amt"] = 1000
    row["Total_Trans_Ct"] = 10

    cleaned = clean_customers(row)

    assert cleaned["Income_Category"].iloc[0] == 1
    assert cleaned["Education_Level"].iloc[0] == 7
    assert cleaned["Total_Trans_Amt"].iloc[0] == 1000
    assert cleaned["Total_Trans_Ct"].iloc[0] == 10


def test_clean_customers_recodes_columns(raw_customers):
    cleaned = clean_customers(raw_customers)

    assert list(cleaned["Attrition_Flag"].cat.categories) == ["Retained", "Churned"]
    expected = raw_customers["Attrition_Flag"].map({"Existing Customer": "Retained",
                                                    "Attrited Customer": "Churned"})
    assert cleaned["Attrition_Flag"].astype(str).tolist() == expected.tolist()
    for col in ("Gender", "Marital_Status"):
        assert isinstance(cleaned[col].dtype, pd.CategoricalDtype)
        assert not cleaned[col].cat.ordered
    for col in ORDINAL_LEVELS:
        assert cleaned[col].dtype == np.int64
        assert cleaned[col].between(1, len(ORDINAL_LEVELS[col])).all()


def test_clean_customers_does_not_mutate_input(raw_customers):
    before = raw_customers.copy()
    clean_customers(raw_customers)
    pd.testing.assert_frame_equal(raw_customers, before)


def test_clean_customers_rejects_bad_card_tier(raw_customers):
    raw_customers.loc[3, "Card_Category"] = "Titanium"
    with pytest.raises(CategoryError, match="Card_Category"):
        clean_customers(raw_customers)


def test_clean_customers_rejects_missing_category(raw_customers):
    raw_customers.loc[5, "Income_Category"] = np.nan
    with pytest.raises(CategoryError, match="Income_Category"):
        clean_customers(raw_customers)


def test_clean_customers_rejects_unknown_attrition_label(raw_customers):
    raw_customers.loc[0, "Attrition_Flag"] = "Dormant"
    with pytest.raises(CategoryError, match="Attrition_Flag"):
        clean_customers(raw_customers)


def test_select_features_requires_columns(raw_customers):
    with pytest.raises(SchemaError, match="Missing required features"):
        select_features(raw_customers, ["Total_Trans_Amt", "Total_Spend"])


def test_select_features_requires_numeric(raw_customers):
    with pytest.raises(SchemaError, match="non-numeric"):
        select_features(raw_customers, ["Total_Trans_Amt", "Income_Category"])


def test_scale_features_standardizes(raw_customers):
    features = select_features(clean_customers(raw_customers),
                               ["Income_Category", "Education_Level", "Total_Trans_Amt", "Total_Trans_Ct"])
    X, scaler = scale_features(features)
    assert np.allclose(X.mean(axis=0), 0.0)
    assert np.allclose(X.std(axis=0), 1.0)

    again, _ = scale_features(features, scaler=scaler)
    assert np.allclose(again, X)


def test_scale_features_rejects_zero_variance():
    features = pd.DataFrame({"a": [1.0, 2.0, 3.0], "b": [5.0, 5.0, 5.0]})
    with pytest.raises(DegenerateInputError, match="b"):
        scale_features(features)


def test_clean_customers_missing_column(raw_customers):
    with pytest.raises(SchemaError, match="Attrition_Flag"):
        clean_customers(raw_customers.drop(columns=["Attrition_Flag"]))
    cleaned = clean_customers(raw_customers.drop(columns=["Attrition_Flag"]), require_attrition=False)
    assert "Attrition_Flag" not in cleaned.columns
    with pytest.raises(SchemaError, match="Gender"):
        clean_customers(raw_customers.drop(columns=["Gender"]), require_attrition=False)
