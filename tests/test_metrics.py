"""Tests for metrics and metric sets."""

import numpy as np
import pandas as pd
import pytest

from sml_tlbx.errors import MetricUndefinedError
from sml_tlbx.modeling import metric_set, roc_curve, score


def class_predictions(prob_true, classes=None) -> pd.DataFrame:
    """Prediction frame for a logical outcome."""
    prob_true = np.asarray(prob_true, dtype=float)
    classes = prob_true > 0.5 if classes is None else np.asarray(classes)
    return pd.DataFrame(
        {
            ".pred_class": pd.Categorical(classes, categories=[False, True]),
            ".pred_False": 1 - prob_true,
            ".pred_True": prob_true,
        },
    )


class TestNumericMetrics:
    """rmse, rsq and mae."""

    def test_known_values(self) -> None:
        """Errors of 1 and -1 give rmse 1 and mae 1."""
        pred = pd.DataFrame({".pred": [2.0, 2.0, 4.0, 4.0]})
        truth = pd.Series([1.0, 3.0, 3.0, 5.0])
        values = score(pred, truth, ["rmse", "mae", "rsq"])
        assert values["rmse"] == pytest.approx(1.0)
        assert values["mae"] == pytest.approx(1.0)
        assert values["rsq"] == pytest.approx(0.5)

    def test_rsq_zero_variance_truth(self) -> None:
        """rsq is undefined for a constant truth."""
        with pytest.raises(MetricUndefinedError, match="zero variance"):
            score(pd.DataFrame({".pred": [1.0, 2.0]}), pd.Series([3.0, 3.0]), ["rsq"])

    def test_missing_pairs_dropped(self) -> None:
        """Pairs with a missing estimate are ignored."""
        pred = pd.DataFrame({".pred": [1.0, np.nan, 3.0]})
        assert score(pred, pd.Series([1.0, 100.0, 3.0]), ["rmse"])["rmse"] == 0.0

    def test_no_complete_pairs(self) -> None:
        """All-missing estimates leave the metric undefined."""
        with pytest.raises(MetricUndefinedError):
            score(pd.DataFrame({".pred": [np.nan]}), pd.Series([1.0]), ["rmse"])


class TestClassMetrics:
    """Class and probability metrics."""

    def test_constant_scores_give_half_auc(self) -> None:
        """Identical scores share credit, so the AUC is exactly 0.5."""
        truth = pd.Series([True, False, True, False, False])
        assert score(class_predictions([0.3] * 5), truth, ["roc_auc"])["roc_auc"] == 0.5

    def test_perfect_ranking(self) -> None:
        """Every event ranked above every non-event gives AUC 1 for either event level."""
        truth = pd.Series([False, False, True, True])
        pred = class_predictions([0.1, 0.2, 0.8, 0.9])
        assert score(pred, truth, ["roc_auc"])["roc_auc"] == 1.0
        assert score(pred, truth, ["roc_auc"], event_level="first")["roc_auc"] == 1.0

    def test_event_level_selects_probability_column(self) -> None:
        """With event_level='first' the first level and its probability column are used."""
        truth = pd.Series([False, False, True, True])
        pred = class_predictions([0.1, 0.2, 0.8, 0.9]).assign(**{".pred_False": 0.5})
        assert score(pred, truth, ["roc_auc"], event_level="first")["roc_auc"] == 0.5

    def test_single_class_auc(self) -> None:
        """AUC is undefined when only one class is observed."""
        with pytest.raises(MetricUndefinedError, match="single class"):
            score(class_predictions([0.2, 0.7]), pd.Series([True, True]), ["roc_auc"])

    def test_accuracy_and_recall(self) -> None:
        """Class metrics compare .pred_class with the truth."""
        truth = pd.Series([True, True, False, False])
        pred = class_predictions([0.9, 0.4, 0.2, 0.6])
        values = score(pred, truth, ["accuracy", "recall", "precision", "f_meas"])
        assert values == pytest.approx({"accuracy": 0.5, "recall": 0.5, "precision": 0.5, "f_meas": 0.5})

    def test_mcc_with_empty_margin(self) -> None:
        """MCC is 0 when only one class is predicted."""
        truth = pd.Series([True, False, False])
        assert score(class_predictions([0.1, 0.1, 0.1]), truth, ["mcc"])["mcc"] == 0.0

    def test_truth_by_column_name(self) -> None:
        """The truth may be a column of the prediction frame."""
        pred = class_predictions([0.9, 0.1]).assign(outcome=[True, False])
        assert score(pred, "outcome", ["accuracy"])["accuracy"] == 1.0

    def test_unknown_metric(self) -> None:
        """Unknown metric names list the registered ones."""
        with pytest.raises(ValueError, match="roc_auc"):
            score(class_predictions([0.5]), pd.Series([True]), ["auc"])


class TestMetricSet:
    """Metric bundles."""

    def test_tidy_frame(self) -> None:
        """One row per metric with its estimator."""
        truth = pd.Series([False, True, True, False])
        frame = metric_set("accuracy", "roc_auc")(class_predictions([0.2, 0.7, 0.6, 0.4]), truth)
        assert list(frame.columns) == ["metric", "estimator", "estimate"]
        assert frame["metric"].tolist() == ["accuracy", "roc_auc"]
        assert frame["estimator"].tolist() == ["binary", "binary"]
        assert frame["estimate"].tolist() == [1.0, 1.0]

    def test_validation(self) -> None:
        """Metric sets need known, non-empty names."""
        with pytest.raises(ValueError, match="at least one"):
            metric_set()
        with pytest.raises(ValueError, match="Unknown metric"):
            metric_set("accuracy", "kappa")


def test_roc_curve() -> None:
    """ROC points run from (specificity 1, sensitivity 0) to (0, 1)."""
    truth = pd.Series([False, False, True, True])
    curve = roc_curve(truth, [0.1, 0.4, 0.35, 0.8])
    assert list(curve.columns) == ["threshold", "specificity", "sensitivity"]
    assert (curve["specificity"].iloc[0], curve["sensitivity"].iloc[0]) == (1.0, 0.0)
    assert (curve["specificity"].iloc[-1], curve["sensitivity"].iloc[-1]) == (0.0, 1.0)
