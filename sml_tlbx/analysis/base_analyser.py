"""Base analyzer class for the exploratory analysis components."""

from abc import ABC, abstractmethod
from typing import Any


class BaseAnalyser(ABC):
    """Abstract base class for exploratory analysis components (PCA, t-SNE, clustering).

    All analyzers must:
    1. Accept a DatasetView in their constructor
    2. Implement fit() to perform the analysis and return self for chaining
    3. Implement result() to return a frozen dataclass with results

    Plotting lives in :mod:`sml_tlbx.plotting`; plot functions accept the
    ``*Result`` dataclasses and return matplotlib ``Figure`` objects (or plotly
    figures for interactive views).

    ### Adding a New Analyzer

    ```python
    @dataclass(frozen=True)
    class MyAnalysisResult:
        summary: pd.DataFrame

    class MyAnalyzer(BaseAnalyser):
        def __init__(self, view: DatasetView):
            self._view = view
            self._summary: pd.DataFrame | None = None

        def fit(self) -> Self:
            self._summary = ...
            return self

        def result(self) -> MyAnalysisResult:
            if self._summary is None:
                raise NotFittedError("Call fit() first")
            return MyAnalysisResult(self._summary)
    ```

    and a factory method on :class:`~sml_tlbx.data.base_dataset.BaseDataset`
    building the view with :meth:`~sml_tlbx.data.base_dataset.BaseDataset.analyzer_view`.
    """

    @abstractmethod
    def fit(self) -> "BaseAnalyser":
        """Fit the analyzer to the data.

        Returns:
            Self for method chaining.
        """
        ...

    @abstractmethod
    def result(self) -> Any:
        """Return analysis results as a frozen dataclass instance.

        Raises:
            NotFittedError: If fit() has not been called yet.
        """
        ...
