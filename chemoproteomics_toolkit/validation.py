"""
Data Validation Module for Chemoproteomics Competition Toolkit

Error types raised by the analysis pipeline and the checks that raise them:
schema validation of quantification tables and row alignment between stages.
"""

import pandas as pd
from typing import Dict, List, Optional


class ChemoproteomicsAnalysisError(Exception):
    """Base class for errors that abort a single pipeline run."""
    def __init__(self, message):
        super().__init__(message)


class SchemaError(ChemoproteomicsAnalysisError):
    """Expected columns are absent or misnamed in the quantification table."""
    def __init__(self, message):
        super().__init__(message)


class ImputationError(ChemoproteomicsAnalysisError):
    """A column or row lacks enough observed data to fit the imputation model."""
    def __init__(self, message):
        super().__init__(message)


class StatisticalError(ChemoproteomicsAnalysisError):
    """A row cannot be tested (too few or non-finite values)."""
    def __init__(self, message):
        super().__init__(message)


class AlignmentError(ChemoproteomicsAnalysisError):
    """Rows or replicate columns diverge between pipeline stages."""
    def __init__(self, message):
        super().__init__(message)


def validate_table_schema(
    table: pd.DataFrame,
    schema,
    groups: Optional[List[str]] = None,
    verbose: bool = True,
) -> Dict:
    """
    Validate a quantification table against a QuantSchema.

    Parameters:
    -----------
    table : pd.DataFrame
        Quantification table as read from the search engine export
    schema : QuantSchema
        Schema descriptor with identifier column, abundance prefix and markers
    groups : List[str], optional
        Groups that must be present ('control', 'probe', 'competitor').
        Defaults to all three.
    verbose : bool, default True
        Whether to print the validation summary

    Returns:
    --------
    Dict with 'abundance_columns' and 'group_columns' (group -> column list)

    Raises:
    -------
    SchemaError
        If the identifier column is missing, no abundance column matches the
        prefix, or a requested group matches zero columns.
    """
    # Local import: preprocessing imports this module for the error types
    from .preprocessing import select_abundance_columns, select_group_columns

    if groups is None:
        groups = ["control", "probe", "competitor"]

    schema.validate()

    if schema.gene_column not in table.columns:
        raise SchemaError(
            f"Identifier column '{schema.gene_column}' not found. "
            f"Available columns: {list(table.columns)[:10]}"
            f"{'...' if len(table.columns) > 10 else ''}"
        )

    abundance = select_abundance_columns(table, schema)

    group_columns = {}
    for group in groups:
        group_columns[group] = list(
            select_group_columns(abundance, group, schema).columns
        )

    if verbose:
        print("QUANTIFICATION TABLE SCHEMA VALIDATION")
        print("=" * 50)
        print(f"Proteins: {len(table)}")
        print(f"Identifier column: '{schema.gene_column}'")
        print(f"Abundance columns ('{schema.abundance_prefix}'): {abundance.shape[1]}")
        for group, columns in group_columns.items():
            print(f"  {schema.label_for(group)} ('{schema.marker_for(group)}'): {len(columns)} columns")
        print("\n✓ VALIDATION PASSED")

    return {
        "abundance_columns": list(abundance.columns),
        "group_columns": group_columns,
    }


def check_row_alignment(*frames, stage: str = "pipeline") -> None:
    """
    Check that every frame carries the same row identifiers in the same order.

    Raises AlignmentError naming the stage and the first diverging position.
    """
    if not frames:
        return

    reference = frames[0].index
    for position, frame in enumerate(frames[1:], start=1):
        if len(frame.index) != len(reference):
            raise AlignmentError(
                f"Row count mismatch at stage '{stage}': "
                f"{len(reference)} rows vs {len(frame.index)} rows (input {position})"
            )
        if not frame.index.equals(reference):
            mismatch = next(
                i for i, (a, b) in enumerate(zip(reference, frame.index)) if a != b
            )
            raise AlignmentError(
                f"Row order mismatch at stage '{stage}': row {mismatch} is "
                f"{reference[mismatch]!r} in input 0 but {frame.index[mismatch]!r} "
                f"in input {position}"
            )


def check_replicate_counts(
    matrix_a: pd.DataFrame, matrix_b: pd.DataFrame, stage: str = "differential"
) -> None:
    """Raise AlignmentError unless both group matrices have the same replicate count."""
    if matrix_a.shape[1] != matrix_b.shape[1]:
        raise AlignmentError(
            f"Replicate count mismatch at stage '{stage}': "
            f"{matrix_a.shape[1]} columns {list(matrix_a.columns)} vs "
            f"{matrix_b.shape[1]} columns {list(matrix_b.columns)}"
        )
