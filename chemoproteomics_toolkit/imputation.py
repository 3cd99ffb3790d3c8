"""
Missing Value Imputation Module for Chemoproteomics Competition Toolkit

Missing abundances in probe experiments are mostly left-censored: the protein
was present below the detection limit. The MinProb method fills them with
random draws from a normal distribution centred on a low quantile of each
sample's observed log2 intensities.

Imputation methods are implemented as ImputationStrategy subclasses so the
pipeline can accept any strategy with the same interface.
"""

import pandas as pd
import numpy as np
from abc import ABC, abstractmethod
from typing import Optional, Tuple, Union

from .validation import ImputationError


RandomState = Union[None, int, np.random.Generator]


class ImputationStrategy(ABC):
    """Interface for missing value imputation of a group's log2 matrix."""

    name = "base"

    @abstractmethod
    def impute(self, matrix: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
        """
        Fill missing entries of a log2 group matrix.

        Returns:
        --------
        Tuple of (imputed matrix with identical index/columns, per-row count
        of entries that were missing)
        """

    def describe(self) -> str:
        return self.name


def count_missing(matrix: pd.DataFrame) -> pd.Series:
    """Per-row count of non-finite entries."""
    missing = ~np.isfinite(matrix.to_numpy(dtype=float))
    return pd.Series(missing.sum(axis=1), index=matrix.index, name="n_imputed", dtype=int)


def estimate_min_prob_parameters(
    matrix: pd.DataFrame, q: float = 0.01, tune_sigma: float = 1.0
) -> Tuple[pd.Series, float]:
    """
    Estimate the MinProb draw distribution.

    Parameters:
    -----------
    matrix : pd.DataFrame
        Log2 group matrix (rows = proteins, columns = replicates)
    q : float
        Quantile of each column's observed values used as the draw mean
    tune_sigma : float
        Multiplier applied to the estimated standard deviation

    Returns:
    --------
    Tuple of (per-column draw means, common standard deviation)

    Raises:
    -------
    ImputationError
        If a column has no observed values, or no protein is observed in more
        than half of the columns with at least two values.
    """
    values = matrix.to_numpy(dtype=float)
    observed = np.isfinite(values)

    column_minimums = {}
    for j, column in enumerate(matrix.columns):
        column_values = values[observed[:, j], j]
        if len(column_values) == 0:
            raise ImputationError(
                f"Column '{column}' has no observed values; cannot estimate its "
                f"low-intensity quantile"
            )
        column_minimums[column] = np.quantile(column_values, q)

    n_columns = values.shape[1]
    well_observed = (observed.sum(axis=1) / n_columns > 0.5) & (observed.sum(axis=1) >= 2)
    if not well_observed.any():
        raise ImputationError(
            f"No protein is observed in more than half of the {n_columns} columns "
            f"{list(matrix.columns)}; cannot estimate the imputation standard deviation"
        )

    subset = np.where(observed[well_observed], values[well_observed], np.nan)
    protein_sd = np.nanstd(subset, axis=1, ddof=1)
    sd = float(np.nanmedian(protein_sd)) * tune_sigma
    if not np.isfinite(sd):
        raise ImputationError(
            f"Imputation standard deviation is not finite for columns {list(matrix.columns)}"
        )

    return pd.Series(column_minimums), sd


class MinProbImputer(ImputationStrategy):
    """Minimum probability (MinProb) imputation.

    Each missing value in column j is drawn from Normal(q_j, sd), where q_j is
    the `q` quantile of column j's observed values and sd is the median
    per-protein standard deviation (over proteins quantified in more than half
    of the columns) times `tune_sigma`.

    Parameters
    ----------
    q : float
        Low quantile used as the detection-limit estimate, in (0, 1)
    tune_sigma : float
        Scale factor for the draw standard deviation
    random_state : int, numpy Generator or None
        Seed for reproducible draws; None draws fresh entropy
    """

    name = "MinProb"

    def __init__(self, q: float = 0.01, tune_sigma: float = 1.0, random_state: RandomState = None):
        if not 0 < q < 1:
            raise ValueError(f"q must be between 0 and 1, got {q}")
        if tune_sigma <= 0:
            raise ValueError(f"tune_sigma must be positive, got {tune_sigma}")
        self.q = q
        self.tune_sigma = tune_sigma
        self.rng = np.random.default_rng(random_state)

    def describe(self) -> str:
        return f"{self.name} (q={self.q}, tune_sigma={self.tune_sigma})"

    def impute(self, matrix: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
        missing_counts = count_missing(matrix)
        imputed = matrix.astype(float).copy()

        if missing_counts.sum() == 0:
            return imputed, missing_counts

        values = imputed.to_numpy(copy=True)
        missing = ~np.isfinite(values)

        draw_means, sd = estimate_min_prob_parameters(
            matrix, q=self.q, tune_sigma=self.tune_sigma
        )

        for j, column in enumerate(matrix.columns):
            n_missing = int(missing[:, j].sum())
            if n_missing == 0:
                continue
            values[missing[:, j], j] = self.rng.normal(
                loc=draw_means[column], scale=sd, size=n_missing
            )

        imputed = pd.DataFrame(values, index=matrix.index, columns=matrix.columns)
        return imputed, missing_counts


def impute_min_probability(
    matrix: pd.DataFrame,
    q: float = 0.01,
    tune_sigma: float = 1.0,
    random_state: RandomState = None,
) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Impute a log2 group matrix with the MinProb method.

    Parameters:
    -----------
    matrix : pd.DataFrame
        Log2 group matrix with NaN for missing entries
    q : float
        Low quantile of observed values used as the draw mean per column
    tune_sigma : float
        Scale factor for the draw standard deviation
    random_state : int, numpy Generator or None
        Seed for reproducible draws

    Returns:
    --------
    Tuple of (imputed matrix, per-row count of imputed entries)
    """
    return MinProbImputer(q=q, tune_sigma=tune_sigma, random_state=random_state).impute(matrix)
