"""Tests for model specifications and fitted models."""

import numpy as np
import pandas as pd
import pytest
import statsmodels.api as sm

from sml_tlbx.errors import InvalidHyperparameterError, InvalidOutcomeError, SingularFitError
from sml_tlbx.modeling import LinearReg, LogisticReg, RandForest, fit_model, make_spec, predict, tune
from sml_tlbx.modeling.metrics import score
from sml_tlbx.modeling.models import class_levels


@pytest.fixture
def binary_df() -> pd.DataFrame:
    """Two standardized predictors and a logistic outcome."""
    rng = np.random.default_rng(0)
    x1 = rng.normal(size=300)
    x2 = rng.normal(size=300)
    p = 1 / (1 + np.exp(-(-0.5 + 1.2 * x1 - 0.8 * x2)))
    return pd.DataFrame({"x1": x1, "x2": x2, "y": rng.random(300) < p})


class TestLinearReg:
    """Ordinary least squares."""

    def test_identity_relationship(self) -> None:
        """y = x gives slope 1, intercept 0 and rmse 0."""
        df = pd.DataFrame({"x": np.arange(1.0, 21.0)}).assign(y=lambda d: d["x"])
        fitted = fit_model(df, "y", LinearReg())
        coefs = fitted.tidy().set_index("term")["estimate"]

        assert coefs["x"] == pytest.approx(1.0)
        assert coefs["(Intercept)"] == pytest.approx(0.0, abs=1e-8)
        assert score(fitted.predict(df), df["y"], ["rmse"])["rmse"] == pytest.approx(0.0, abs=1e-8)

    def test_tidy_columns(self, chd_df) -> None:
        """The coefficient table has standard errors, statistics and p-values."""
        tidy = fit_model(chd_df[["sbp", "dbp", "age"]], "sbp", "linear_reg").tidy()
        assert list(tidy.columns) == ["term", "estimate", "std_error", "statistic", "p_value"]
        assert tidy["term"].tolist() == ["(Intercept)", "dbp", "age"]

    def test_collinear_predictors(self) -> None:
        """A perfectly collinear predictor is named in the error."""
        df = pd.DataFrame({"x": np.arange(10.0), "x2": 2 * np.arange(10.0), "y": np.arange(10.0) ** 2})
        with pytest.raises(SingularFitError, match="x2"):
            fit_model(df, "y", LinearReg())

    def test_requires_numeric_outcome(self, chd_df) -> None:
        """A logical outcome is rejected for regression."""
        with pytest.raises(InvalidOutcomeError, match="numeric"):
            fit_model(chd_df[["sbp", "chdfate"]], "chdfate", LinearReg())

    def test_nominal_predictor(self, chd_df) -> None:
        """Factor predictors must be dummy-encoded first."""
        with pytest.raises(TypeError, match="step_dummy"):
            fit_model(chd_df[["sbp", "sex"]], "sbp", LinearReg())

    def test_missing_predictor_rows(self) -> None:
        """Incomplete rows are left out of the fit and predicted as missing."""
        df = pd.DataFrame({"x": [1.0, 2.0, np.nan, 4.0, 5.0], "y": [2.0, 4.1, 6.0, 7.9, 10.0]})
        fitted = fit_model(df, "y", LinearReg())
        pred = predict(fitted, df)

        assert fitted.n_obs == 4
        assert np.isnan(pred[".pred"].iloc[2])
        assert pred[".pred"].drop(index=2).notna().all()
        assert pred.index.equals(df.index)


class TestLogisticReg:
    """Logistic regression."""

    def test_unpenalized_matches_maximum_likelihood(self, binary_df) -> None:
        """penalty = 0 reproduces the statsmodels Logit coefficients."""
        fitted = fit_model(binary_df, "y", LogisticReg(penalty=0))
        reference = sm.Logit(binary_df["y"].astype(float), sm.add_constant(binary_df[["x1", "x2"]])).fit(disp=0)

        np.testing.assert_allclose(fitted.tidy()["estimate"].to_numpy(), reference.params.to_numpy(), rtol=1e-5)

    def test_prediction_columns(self, binary_df) -> None:
        """Predictions hold the class and one probability column per level."""
        pred = fit_model(binary_df, "y", LogisticReg()).predict(binary_df)
        assert list(pred.columns) == [".pred_class", ".pred_False", ".pred_True"]
        np.testing.assert_allclose(pred[".pred_False"] + pred[".pred_True"], 1.0)
        assert list(pred[".pred_class"].cat.categories) == [False, True]
        assert ((pred[".pred_True"] > 0.5) == (pred[".pred_class"] == True)).all()  # noqa: E712

    def test_strong_lasso_penalty_zeroes_coefficients(self, binary_df) -> None:
        """A large lasso penalty shrinks every slope to zero."""
        fitted = fit_model(binary_df, "y", LogisticReg(penalty=1.0, mixture=1.0))
        tidy = fitted.tidy()
        assert list(tidy.columns) == ["term", "estimate", "penalty"]
        slopes = tidy.set_index("term")["estimate"].drop("(Intercept)")
        np.testing.assert_allclose(slopes.to_numpy(), 0.0, atol=1e-4)

    @pytest.mark.parametrize(("args", "name"), [({"penalty": -1.0}, "penalty"), ({"mixture": 1.5}, "mixture")])
    def test_invalid_hyperparameters(self, binary_df, args, name) -> None:
        """Out-of-range hyperparameters are named in the error."""
        with pytest.raises(InvalidHyperparameterError, match=name):
            fit_model(binary_df, "y", LogisticReg(**args))

    def test_unresolved_tune_placeholder(self, binary_df) -> None:
        """A tune() placeholder cannot be fitted."""
        with pytest.raises(InvalidHyperparameterError, match="penalty"):
            fit_model(binary_df, "y", LogisticReg(penalty=tune()))

    def test_requires_two_levels(self, binary_df) -> None:
        """Outcomes with three levels are rejected."""
        df = binary_df.assign(y=pd.Categorical(np.resize(["a", "b", "c"], len(binary_df))))
        with pytest.raises(InvalidOutcomeError, match="two levels"):
            fit_model(df, "y", LogisticReg())

    def test_tiny_penalty_close_to_maximum_likelihood(self, binary_df) -> None:
        """A vanishing elastic-net penalty lands on the unpenalized estimates."""
        fitted = fit_model(binary_df, "y", LogisticReg(penalty=1e-10, mixture=0.5))
        reference = fit_model(binary_df, "y", LogisticReg(penalty=0))

        assert list(fitted.tidy().columns) == ["term", "estimate", "penalty"]
        np.testing.assert_allclose(
            fitted.tidy()["estimate"].to_numpy(), reference.tidy()["estimate"].to_numpy(), rtol=1e-3
        )

    def test_numeric_levels_sorted_numerically(self, binary_df) -> None:
        """Integer classes 9 and 10 keep numeric order, so 10 is the event."""
        coded = binary_df.assign(y=np.where(binary_df["y"], 10, 9))
        fitted = fit_model(coded, "y", LogisticReg())
        pred = fitted.predict(coded)

        assert fitted.levels == (9, 10)
        assert list(pred.columns) == [".pred_class", ".pred_9", ".pred_10"]
        expected = fit_model(binary_df, "y", LogisticReg()).predict(binary_df)[".pred_True"]
        np.testing.assert_allclose(pred[".pred_10"], expected)


class TestRandForest:
    """Random forests."""

    def test_classification_defaults(self, binary_df) -> None:
        """mtry defaults to floor(sqrt(p)) and an OOB error is reported."""
        fitted = fit_model(binary_df, "y", RandForest(trees=50, seed=1))
        assert fitted.spec.mtry == 1
        assert 0.0 <= fitted.oob_error <= 1.0
        assert set(fitted.predict(binary_df).columns) == {".pred_class", ".pred_False", ".pred_True"}

    def test_regression_mode(self, chd_df) -> None:
        """Regression forests predict numbers; mtry defaults to max(p // 3, 1)."""
        df = chd_df[["sbp", "dbp", "age", "scl", "bmi"]]
        fitted = fit_model(df, "sbp", RandForest(trees=30, mode="regression", seed=1))
        assert fitted.spec.mtry == 1
        assert list(fitted.predict(df).columns) == [".pred"]
        assert fitted.oob_error > 0

    def test_seed_reproducible(self, binary_df) -> None:
        """The same seed gives the same probabilities."""
        a = fit_model(binary_df, "y", RandForest(trees=20, seed=3)).predict(binary_df)
        b = fit_model(binary_df, "y", RandForest(trees=20, seed=3)).predict(binary_df)
        pd.testing.assert_frame_equal(a, b)

    def test_importance_sorted(self, binary_df) -> None:
        """Variable importance is sorted in decreasing order."""
        importance = fit_model(binary_df, "y", RandForest(trees=50, seed=1)).variable_importance()
        assert set(importance.index) == {"x1", "x2"}
        assert importance.is_monotonic_decreasing

    @pytest.mark.parametrize(("args", "name"), [({"mtry": 5}, "mtry"), ({"trees": 0}, "trees"), ({"min_n": 0}, "min_n")])
    def test_invalid_hyperparameters(self, binary_df, args, name) -> None:
        """Out-of-range forest hyperparameters are rejected."""
        with pytest.raises(InvalidHyperparameterError, match=name):
            fit_model(binary_df, "y", RandForest(**args))

    def test_levels_from_complete_rows(self) -> None:
        """A class seen only on an incomplete row is not a level of the fit."""
        df = pd.DataFrame({"x": [1.0, 2.0, 3.0, np.nan, 5.0, 6.0], "y": ["a", "a", "b", "c", "b", "a"]})
        fitted = fit_model(df, "y", RandForest(trees=10, seed=1))
        pred = fitted.predict(df)

        assert fitted.levels == ("a", "b")
        assert list(pred.columns) == [".pred_class", ".pred_a", ".pred_b"]
        assert pred[".pred_class"].isna().tolist() == [False, False, False, True, False, False]


class TestMakeSpec:
    """Building specifications by name."""

    def test_by_name(self) -> None:
        """Kinds map to their specification classes."""
        spec = make_spec("logistic_reg", penalty=0.1)
        assert isinstance(spec, LogisticReg)
        assert spec.penalty == 0.1

    def test_unknown_kind(self) -> None:
        """Unknown kinds list the supported ones."""
        with pytest.raises(ValueError, match="rand_forest"):
            make_spec("svm")

    def test_unknown_hyperparameter(self) -> None:
        """Unknown hyperparameters are rejected."""
        with pytest.raises(InvalidHyperparameterError, match="depth"):
            make_spec("rand_forest", depth=3)

    def test_tunable(self) -> None:
        """tunable() lists the placeholders."""
        assert RandForest(mtry=tune(), min_n=tune()).tunable() == ["mtry", "min_n"]


class TestClassLevels:
    """Ordering of outcome levels."""

    def test_numbers_sort_numerically(self) -> None:
        """Integers are not compared as text."""
        assert class_levels(pd.Series([10, 9, 10, 2])) == (2, 9, 10)

    def test_mixed_types_sort_as_text(self) -> None:
        """Unorderable mixes fall back to their text form."""
        assert class_levels(pd.Series(["b", 1, "a"], dtype=object)) == (1, "a", "b")

    def test_booleans_and_categories(self) -> None:
        """Booleans order False before True; categoricals keep category order."""
        assert class_levels(pd.Series([True, False])) == (False, True)
        assert class_levels(pd.Series(pd.Categorical(["lo", "hi"], categories=["lo", "hi"]))) == ("lo", "hi")
