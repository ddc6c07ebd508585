"""Column definitions for the workshop coronary heart disease (CHD) dataset."""

from .base_columns import BaseColumn, ColumnMetadata


class ChdColumn(BaseColumn):
    """Column names for the Framingham-style CHD cohort used throughout the workshop.

    Columns:
    - ``id``: int - Participant identifier
    - ``sex``: category - Participant sex (Male/Female)
    - ``sbp``: float - Systolic blood pressure at baseline (mmHg)
    - ``dbp``: float - Diastolic blood pressure at baseline (mmHg)
    - ``scl``: float - Serum cholesterol at baseline (mg/dL)
    - ``age``: float - Age at baseline exam (years)
    - ``bmi``: float - Body Mass Index (kg/m^2)
    - ``month``: int - Calendar month of the baseline exam
    - ``followup``: float - Follow-up time until CHD event or censoring (days)
    - ``chdfate``: bool - Coronary heart disease during follow-up (target variable)
    """

    # Target variable
    TARGET = "chdfate"
    """Coronary heart disease during follow-up (target variable)."""
    CHDFATE = TARGET

    # Identifiers
    ID = "id"
    """Participant identifier."""

    # Demographics
    SEX = "sex"
    """Participant sex."""
    AGE = "age"
    """Age at baseline exam (years)."""

    # Clinical measurements
    SBP = "sbp"
    """Systolic blood pressure (mmHg)."""
    DBP = "dbp"
    """Diastolic blood pressure (mmHg)."""
    SCL = "scl"
    """Serum cholesterol (mg/dL)."""
    BMI = "bmi"
    """Body Mass Index (kg/m^2)."""

    # Study design
    MONTH = "month"
    """Calendar month of the baseline exam."""
    FOLLOWUP = "followup"
    """Follow-up time (days); known only after the outcome, so excluded from predictors."""

    def metadata(self) -> ColumnMetadata:
        """Get metadata for this column."""
        return _METADATA[self]

    @classmethod
    def identifier_columns(cls) -> list[str]:
        """Identifier and post-outcome columns that must never be used as predictors."""
        return [cls.ID, cls.FOLLOWUP]

    @classmethod
    def measurement_columns(cls) -> list[str]:
        """Continuous baseline measurements used for PCA, t-SNE and clustering."""
        return [cls.SBP, cls.DBP, cls.SCL, cls.AGE, cls.BMI]


_METADATA: dict[ChdColumn, ColumnMetadata] = {
    ChdColumn.TARGET: ColumnMetadata("chdfate", "chdfate", "bool", "CHD during follow-up"),
    ChdColumn.ID: ColumnMetadata("id", "id", "numeric", "Participant ID"),
    ChdColumn.SEX: ColumnMetadata("sex", "sex", "category", "Sex"),
    ChdColumn.AGE: ColumnMetadata("age", "age", "numeric", "Age", "years"),
    ChdColumn.SBP: ColumnMetadata("sbp", "sbp", "numeric", "Systolic blood pressure", "mmHg"),
    ChdColumn.DBP: ColumnMetadata("dbp", "dbp", "numeric", "Diastolic blood pressure", "mmHg"),
    ChdColumn.SCL: ColumnMetadata("scl", "scl", "numeric", "Serum cholesterol", "mg/dL"),
    ChdColumn.BMI: ColumnMetadata("bmi", "bmi", "numeric", "Body Mass Index", "kg/m^2"),
    ChdColumn.MONTH: ColumnMetadata("month", "month", "numeric", "Exam month"),
    ChdColumn.FOLLOWUP: ColumnMetadata("followup", "followup", "numeric", "Follow-up", "days"),
}
