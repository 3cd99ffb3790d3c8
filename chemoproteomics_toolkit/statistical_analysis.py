"""
Statistical Analysis Module for Chemoproteomics Competition Data

This module provides the differential analysis of probe experiments:
paired log2 differences between the probe group and a comparison group
(vehicle control or competitor+probe), tested per protein with a one-sample
t-test against zero, plus the configuration-driven pipeline that prepares,
imputes and assembles the result table.
"""

import pandas as pd
import numpy as np
import warnings
from scipy.stats import ttest_1samp
from statsmodels.stats.multitest import multipletests
from typing import Dict, Optional, Sequence, Tuple

from .imputation import ImputationStrategy, MinProbImputer
from .preprocessing import (
    QuantSchema,
    filter_rows_with_any_probe_signal,
    log2_transform,
    select_abundance_columns,
    select_group_columns,
)
from .validation import (
    AlignmentError,
    StatisticalError,
    check_replicate_counts,
    check_row_alignment,
    validate_table_schema,
)


class StatisticalConfig:
    """Configuration class for differential analysis parameters

    Thresholds are used for summaries, plots and filtered exports; they do not
    change the per-protein statistics.
    """

    def __init__(self):
        # Significance thresholds
        self.p_value_threshold = 0.05
        self.fold_change_threshold = 1.0  # log2 units

        # Multiple testing correction ("none" or any statsmodels multipletests method)
        self.correction_method = "none"
        self.use_adjusted_pvalue = "unadjusted"  # "adjusted" or "unadjusted"

        # MinProb imputation parameters
        self.imputation_q = 0.01
        self.imputation_tune_sigma = 1.0
        self.random_seed = None  # Set an int for reproducible imputation

        # Replicates required per group for the t-test
        self.min_replicates = 2

        self.verbose = True

    def validate(self):
        """Validate parameter ranges"""
        if not 0 < self.p_value_threshold < 1:
            raise ValueError(f"p_value_threshold must be between 0 and 1, got {self.p_value_threshold}")
        if self.fold_change_threshold < 0:
            raise ValueError(f"fold_change_threshold must be non-negative, got {self.fold_change_threshold}")
        if not 0 < self.imputation_q < 1:
            raise ValueError(f"imputation_q must be between 0 and 1, got {self.imputation_q}")
        if self.imputation_tune_sigma <= 0:
            raise ValueError(f"imputation_tune_sigma must be positive, got {self.imputation_tune_sigma}")
        if self.min_replicates < 2:
            raise ValueError("min_replicates must be at least 2 for a t-test")
        if self.use_adjusted_pvalue not in ("adjusted", "unadjusted"):
            raise ValueError("use_adjusted_pvalue must be 'adjusted' or 'unadjusted'")
        if self.use_adjusted_pvalue == "adjusted" and self.correction_method == "none":
            raise ValueError("use_adjusted_pvalue='adjusted' requires a correction_method")
        return True

    def to_dict(self) -> Dict:
        return dict(vars(self))


# =============================================================================
# PER-ROW STATISTICS
# =============================================================================

def _as_finite_array(values: Sequence[float]) -> np.ndarray:
    array = np.asarray(values, dtype=float).ravel()
    if not np.all(np.isfinite(array)):
        raise StatisticalError(f"Values must be finite, got {array.tolist()}")
    return array


def row_mean(values: Sequence[float]) -> float:
    """Arithmetic mean of one row (the log2 fold-change estimate)."""
    array = _as_finite_array(values)
    if len(array) == 0:
        raise StatisticalError("Cannot compute the mean of an empty row")
    return float(array.mean())


def one_sample_t_test(values: Sequence[float]) -> Tuple[float, float]:
    """
    One-sample two-tailed t-test of `values` against a mean of 0.

    Returns:
    --------
    Tuple of (t statistic, p-value) with n-1 degrees of freedom

    Raises:
    -------
    StatisticalError
        If fewer than 2 values are given or any value is not finite
    """
    array = _as_finite_array(values)
    if len(array) < 2:
        raise StatisticalError(
            f"t-test needs at least 2 values, got {len(array)}"
        )

    # Zero sample variance: t is 0/0 or +-inf
    if np.all(array == array[0]):
        if array[0] == 0:
            return 0.0, 1.0
        return float(np.sign(array[0]) * np.inf), 0.0

    t_stat, p_value = ttest_1samp(array, 0.0)
    return float(t_stat), float(p_value)


def row_t_test(values: Sequence[float]) -> float:
    """P-value of the one-sample two-tailed t-test of one row against 0."""
    return one_sample_t_test(values)[1]


def compute_differential(imputed_a: pd.DataFrame, imputed_b: pd.DataFrame) -> pd.DataFrame:
    """
    Per-protein differential statistics between two imputed group matrices.

    Parameters:
    -----------
    imputed_a : pd.DataFrame
        Imputed log2 matrix of the treatment group (e.g. probe)
    imputed_b : pd.DataFrame
        Imputed log2 matrix of the comparison group, with the same rows and
        the same number of replicate columns (paired by position)

    Returns:
    --------
    pd.DataFrame indexed like the inputs with columns
        'logFC', 't', 'P.Value', 'n_replicates'

    Raises:
    -------
    AlignmentError
        If row identifiers or replicate counts differ
    StatisticalError
        If a row has fewer than 2 replicates or non-finite values
    """
    check_row_alignment(imputed_a, imputed_b, stage="differential analysis")
    check_replicate_counts(imputed_a, imputed_b, stage="differential analysis")

    differences = imputed_a.to_numpy(dtype=float) - imputed_b.to_numpy(dtype=float)

    results = []
    for protein_idx, row in zip(imputed_a.index, differences):
        try:
            t_stat, p_value = one_sample_t_test(row)
            log_fc = row_mean(row)
        except StatisticalError as e:
            raise StatisticalError(f"Protein row {protein_idx!r}: {e}") from e

        results.append(
            {
                "logFC": log_fc,
                "t": t_stat,
                "P.Value": p_value,
                "n_replicates": len(row),
            }
        )

    return pd.DataFrame(
        results, index=imputed_a.index, columns=["logFC", "t", "P.Value", "n_replicates"]
    )


def apply_multiple_testing_correction(results_df: pd.DataFrame, config: StatisticalConfig) -> pd.DataFrame:
    """Insert an 'adj.P.Val' column after 'P.Value' unless correction is disabled"""

    if config.correction_method == "none" or len(results_df) == 0:
        return results_df

    corrected = results_df.copy()
    _, adj_pvalues, _, _ = multipletests(
        corrected["P.Value"].fillna(1.0), method=config.correction_method
    )
    corrected.insert(corrected.columns.get_loc("P.Value") + 1, "adj.P.Val", adj_pvalues)

    if config.verbose:
        print("Multiple testing correction applied:")
        print(f"  Method: {config.correction_method}")
        print(
            f"  Significant proteins (adjusted p < {config.p_value_threshold}): "
            f"{(corrected['adj.P.Val'] < config.p_value_threshold).sum()}"
        )

    return corrected


# =============================================================================
# PIPELINE
# =============================================================================

def _resolve_comparison_group(group_marker: str, schema: QuantSchema) -> str:
    """Accept a group name ('control', 'competitor') or its column marker."""
    if group_marker in ("control", "competitor"):
        return group_marker

    group = schema.group_for_marker(group_marker)
    if group in ("control", "competitor"):
        return group

    raise ValueError(
        f"Comparison marker '{group_marker}' is neither the control marker "
        f"'{schema.control_marker}' nor the competitor marker '{schema.competitor_marker}'"
    )


def _build_imputers(
    config: StatisticalConfig, imputer: Optional[ImputationStrategy]
) -> Tuple[ImputationStrategy, ImputationStrategy]:
    if imputer is not None:
        return imputer, imputer

    # Independent streams so each group's draws depend only on the seed
    probe_seed, comparison_seed = np.random.SeedSequence(config.random_seed).spawn(2)
    return (
        MinProbImputer(
            q=config.imputation_q,
            tune_sigma=config.imputation_tune_sigma,
            random_state=np.random.default_rng(probe_seed),
        ),
        MinProbImputer(
            q=config.imputation_q,
            tune_sigma=config.imputation_tune_sigma,
            random_state=np.random.default_rng(comparison_seed),
        ),
    )


def run_pipeline(
    table: pd.DataFrame,
    group_marker: str,
    schema: Optional[QuantSchema] = None,
    config: Optional[StatisticalConfig] = None,
    imputer: Optional[ImputationStrategy] = None,
) -> pd.DataFrame:
    """
    Compare the probe group against one comparison group.

    Parameters:
    -----------
    table : pd.DataFrame
        Quantification table with gene symbols and abundance columns
    group_marker : str
        Comparison group: its column marker or 'control' / 'competitor'
    schema : QuantSchema, optional
        Naming conventions (defaults to QuantSchema())
    config : StatisticalConfig, optional
        Analysis parameters (defaults to StatisticalConfig())
    imputer : ImputationStrategy, optional
        Replaces the MinProb imputers built from `config`

    Returns:
    --------
    pd.DataFrame indexed by the input row identifiers, with columns: gene
    symbol, 'logFC', 'P.Value' ('adj.P.Val' when correction is enabled),
    'Imputed_<probe>', 'Imputed_<comparison>', then the imputed log2 probe
    and comparison replicate columns. Rows without a gene symbol are dropped.
    """
    schema = schema if schema is not None else QuantSchema()
    config = config if config is not None else StatisticalConfig()
    config.validate()
    verbose = config.verbose

    comparison_group = _resolve_comparison_group(group_marker, schema)
    probe_label = schema.label_for("probe")
    comparison_label = schema.label_for(comparison_group)

    if verbose:
        print(f"=== DIFFERENTIAL ANALYSIS: {probe_label} vs {comparison_label} ===\n")

    validate_table_schema(table, schema, groups=["probe", comparison_group], verbose=verbose)
    if not table.index.is_unique:
        raise AlignmentError("Row identifiers (table index) must be unique")

    # 1. Drop proteins never seen in the probe group
    filtered = filter_rows_with_any_probe_signal(table, schema, verbose=verbose)

    # 2. Log2 group matrices
    log_abundance = log2_transform(select_abundance_columns(filtered, schema))
    probe_log2 = select_group_columns(log_abundance, "probe", schema)
    comparison_log2 = select_group_columns(log_abundance, comparison_group, schema)
    check_replicate_counts(probe_log2, comparison_log2, stage="group selection")

    if probe_log2.shape[1] < config.min_replicates:
        raise StatisticalError(
            f"{probe_label} group has {probe_log2.shape[1]} replicates; "
            f"at least {config.min_replicates} are required"
        )

    # 3. Impute each group independently
    probe_imputer, comparison_imputer = _build_imputers(config, imputer)
    probe_imputed, probe_counts = probe_imputer.impute(probe_log2)
    comparison_imputed, comparison_counts = comparison_imputer.impute(comparison_log2)
    check_row_alignment(filtered, probe_imputed, comparison_imputed, stage="imputation")

    if verbose:
        print(f"\nImputation method: {probe_imputer.describe()}")
        print(f"  {probe_label}: {int(probe_counts.sum())} values imputed in {(probe_counts > 0).sum()} proteins")
        print(f"  {comparison_label}: {int(comparison_counts.sum())} values imputed in {(comparison_counts > 0).sum()} proteins")

    # 4. Paired log2 differences and t-tests
    stats = compute_differential(probe_imputed, comparison_imputed)

    # 5. Assemble by row identifier
    results = pd.DataFrame(index=filtered.index)
    results[schema.gene_column] = filtered[schema.gene_column]
    results["logFC"] = stats["logFC"]
    results["P.Value"] = stats["P.Value"]
    results[f"Imputed_{probe_label}"] = probe_counts
    results[f"Imputed_{comparison_label}"] = comparison_counts
    results = pd.concat([results, probe_imputed, comparison_imputed], axis=1)

    genes = results[schema.gene_column]
    has_gene = genes.notna() & (genes.astype(str).str.strip() != "")
    if (~has_gene).sum() > 0:
        warnings.warn(f"Dropping {(~has_gene).sum()} proteins without a gene symbol")
    results = results.loc[has_gene]

    results = apply_multiple_testing_correction(results, config)

    if verbose:
        print(f"\n✓ {probe_label} vs {comparison_label} completed for {len(results)} proteins")

    return results


def run_probe_vs_control(
    table: pd.DataFrame,
    schema: Optional[QuantSchema] = None,
    config: Optional[StatisticalConfig] = None,
    imputer: Optional[ImputationStrategy] = None,
) -> pd.DataFrame:
    """Probe group vs vehicle control"""
    return run_pipeline(table, "control", schema=schema, config=config, imputer=imputer)


def run_probe_vs_competitor(
    table: pd.DataFrame,
    schema: Optional[QuantSchema] = None,
    config: Optional[StatisticalConfig] = None,
    imputer: Optional[ImputationStrategy] = None,
) -> pd.DataFrame:
    """Probe group vs competitor+probe"""
    return run_pipeline(table, "competitor", schema=schema, config=config, imputer=imputer)


def comparison_name(group: str, schema: Optional[QuantSchema] = None) -> str:
    schema = schema if schema is not None else QuantSchema()
    return f"{schema.label_for('probe')} vs {schema.label_for(group)}"


def run_both_comparisons(
    table: pd.DataFrame,
    schema: Optional[QuantSchema] = None,
    config: Optional[StatisticalConfig] = None,
) -> Dict[str, pd.DataFrame]:
    """
    Run probe vs control and probe vs competitor on the same table.

    Returns:
    --------
    Dict mapping comparison name (e.g. 'Probe vs Control') to its result table
    """
    schema = schema if schema is not None else QuantSchema()
    return {
        comparison_name("control", schema): run_probe_vs_control(table, schema, config),
        comparison_name("competitor", schema): run_probe_vs_competitor(table, schema, config),
    }


def _selected_pvalue_column(results: pd.DataFrame, config: StatisticalConfig) -> str:
    if config.use_adjusted_pvalue == "adjusted" and "adj.P.Val" in results.columns:
        return "adj.P.Val"
    return "P.Value"


def significant_proteins(results: pd.DataFrame, config: Optional[StatisticalConfig] = None) -> pd.DataFrame:
    """Rows passing both the p-value and the absolute log2 fold-change thresholds"""
    config = config if config is not None else StatisticalConfig()
    p_col = _selected_pvalue_column(results, config)
    passing = (results[p_col] < config.p_value_threshold) & (
        results["logFC"].abs() >= config.fold_change_threshold
    )
    return results.loc[passing].sort_values(p_col)


def display_analysis_summary(
    results: pd.DataFrame,
    config: Optional[StatisticalConfig] = None,
    label: str = "",
    label_top_n: int = 10,
    gene_column: str = "Gene Symbol",
) -> Dict[str, int]:
    """Print significance counts and top proteins of one comparison"""
    config = config if config is not None else StatisticalConfig()
    p_col = _selected_pvalue_column(results, config)
    significant = significant_proteins(results, config)
    imputed_cols = [col for col in results.columns if str(col).startswith("Imputed_")]
    any_imputed = results[imputed_cols].sum(axis=1) > 0 if imputed_cols else pd.Series(False, index=results.index)

    summary = {
        "total": len(results),
        "significant": len(significant),
        "up": int((significant["logFC"] > 0).sum()),
        "down": int((significant["logFC"] < 0).sum()),
        "imputed": int(any_imputed.sum()),
    }

    print(f"ANALYSIS SUMMARY{': ' + label if label else ''}")
    print("=" * 50)
    print(f"Total proteins: {summary['total']}")
    print(f"Proteins with imputed values: {summary['imputed']}")
    print(
        f"Significant ({p_col} < {config.p_value_threshold}, "
        f"|logFC| >= {config.fold_change_threshold}): {summary['significant']}"
    )
    print(f"  Up: {summary['up']}")
    print(f"  Down: {summary['down']}")

    if label_top_n > 0 and len(significant) > 0 and gene_column in significant.columns:
        print(f"\nTop {min(label_top_n, len(significant))} proteins:")
        for _, row in significant.head(label_top_n).iterrows():
            print(f"  {row[gene_column]}: logFC={row['logFC']:.2f}, {p_col}={row[p_col]:.2e}")

    return summary
