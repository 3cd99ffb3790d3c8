"""
Data Preprocessing Module for Chemoproteomics Competition Toolkit

Functions for column selection by naming convention, row filtering and
log2 transformation of abundance columns.
"""

import pandas as pd
import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Optional

from .validation import SchemaError


GROUP_NAMES = ("control", "probe", "competitor")


@dataclass
class QuantSchema:
    """Column naming conventions of a quantification table.

    Attributes
    ----------
    gene_column : str
        Identifier column carrying gene symbols
    abundance_prefix : str
        Prefix shared by every abundance (measurement) column
    control_marker : str
        Substring identifying vehicle control columns
    probe_marker : str
        Substring identifying probe-only columns
    competitor_marker : str
        Substring identifying competitor+probe columns
    exclusive_groups : bool
        When True, a group's columns exclude columns that also match a longer
        marker containing the group's marker (e.g. 'Probe' inside
        'Competitor+Probe'), so each column belongs to exactly one group.

    Examples
    --------
    >>> schema = QuantSchema()
    >>> schema.probe_marker = 'IA-alkyne'
    >>> schema.competitor_marker = 'KB02+IA-alkyne'
    """

    gene_column: str = "Gene Symbol"
    abundance_prefix: str = "Abundance: F"

    # Group markers
    control_marker: str = "Vehicle"
    probe_marker: str = "Probe"
    competitor_marker: str = "Competitor+Probe"
    exclusive_groups: bool = True

    # Labels used in result column names and plot titles
    control_label: str = "Control"
    probe_label: str = "Probe"
    competitor_label: str = "Competitor"

    def marker_for(self, group: str) -> str:
        """Return the column marker for 'control', 'probe' or 'competitor'."""
        if group not in GROUP_NAMES:
            raise ValueError(f"Unknown group '{group}'. Choose from {list(GROUP_NAMES)}")
        return getattr(self, f"{group}_marker")

    def label_for(self, group: str) -> str:
        """Return the display label for 'control', 'probe' or 'competitor'."""
        if group not in GROUP_NAMES:
            raise ValueError(f"Unknown group '{group}'. Choose from {list(GROUP_NAMES)}")
        return getattr(self, f"{group}_label")

    def group_for_marker(self, marker: str) -> Optional[str]:
        """Return the group name whose marker equals `marker`, if any."""
        for group in GROUP_NAMES:
            if self.marker_for(group) == marker:
                return group
        return None

    def validate(self):
        """Validate that the schema can identify every group unambiguously"""
        for attr in ("gene_column", "abundance_prefix"):
            if not getattr(self, attr):
                raise SchemaError(f"QuantSchema.{attr} must be a non-empty string")

        markers = [self.marker_for(group) for group in GROUP_NAMES]
        for group, marker in zip(GROUP_NAMES, markers):
            if not marker:
                raise SchemaError(f"QuantSchema.{group}_marker must be a non-empty string")
        if len(set(markers)) != len(markers):
            raise SchemaError(f"Group markers must be distinct, got {markers}")

        # Labels name the Imputed_<label> result columns
        labels = [self.label_for(group) for group in GROUP_NAMES]
        for group, label in zip(GROUP_NAMES, labels):
            if not label:
                raise SchemaError(f"QuantSchema.{group}_label must be a non-empty string")
        if len(set(labels)) != len(labels):
            raise SchemaError(f"Group labels must be distinct, got {labels}")

        return True


def _schema_or_default(schema: Optional[QuantSchema]) -> QuantSchema:
    return schema if schema is not None else QuantSchema()


def missing_value_mask(matrix: pd.DataFrame) -> pd.DataFrame:
    """
    Boolean mask of missing abundance entries.

    Empty cells and non-positive abundances (which have no logarithm) both
    count as missing.
    """
    return matrix.isna() | (matrix <= 0)


def select_abundance_columns(
    table: pd.DataFrame, schema: Optional[QuantSchema] = None
) -> pd.DataFrame:
    """
    Select the abundance columns of a quantification table.

    Parameters:
    -----------
    table : pd.DataFrame
        Quantification table
    schema : QuantSchema, optional
        Naming conventions (defaults to QuantSchema())

    Returns:
    --------
    pd.DataFrame : Sub-table of columns starting with the abundance prefix

    Raises:
    -------
    SchemaError
        If no column matches the prefix or a matching column is not numeric
    """
    schema = _schema_or_default(schema)

    columns = [
        col for col in table.columns
        if str(col).startswith(schema.abundance_prefix)
    ]
    if not columns:
        raise SchemaError(
            f"No abundance columns found with prefix '{schema.abundance_prefix}' "
            f"among {len(table.columns)} columns"
        )

    non_numeric = [
        col for col in columns
        if not pd.api.types.is_numeric_dtype(table[col]) and table[col].notna().any()
    ]
    if non_numeric:
        raise SchemaError(f"Abundance columns contain non-numeric values: {non_numeric}")

    return table[columns].astype(float)


def select_group(
    abundance_table: pd.DataFrame,
    marker: str,
    exclude_markers: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Select the columns whose header contains `marker`.

    Parameters:
    -----------
    abundance_table : pd.DataFrame
        Abundance columns (output of select_abundance_columns)
    marker : str
        Group marker substring
    exclude_markers : List[str], optional
        Columns containing any of these substrings are dropped

    Returns:
    --------
    pd.DataFrame : Group columns in table order

    Raises:
    -------
    SchemaError
        If zero columns match
    """
    exclude_markers = exclude_markers or []

    columns = [
        col for col in abundance_table.columns
        if marker in str(col)
        and not any(excluded in str(col) for excluded in exclude_markers)
    ]
    if not columns:
        excluded_note = f" (excluding {exclude_markers})" if exclude_markers else ""
        raise SchemaError(
            f"Group marker '{marker}'{excluded_note} matched zero of "
            f"{abundance_table.shape[1]} abundance columns"
        )

    return abundance_table[columns]


def overlapping_markers(group: str, schema: Optional[QuantSchema] = None) -> List[str]:
    """Markers of other groups that contain this group's marker as a substring."""
    schema = _schema_or_default(schema)
    marker = schema.marker_for(group)
    return [
        schema.marker_for(other)
        for other in GROUP_NAMES
        if other != group and marker in schema.marker_for(other)
    ]


def select_group_columns(
    abundance_table: pd.DataFrame, group: str, schema: Optional[QuantSchema] = None
) -> pd.DataFrame:
    """
    Select one condition's replicate columns by group name.

    With `schema.exclusive_groups` the probe group does not pick up
    competitor+probe columns even though its marker occurs in theirs.
    """
    schema = _schema_or_default(schema)
    exclude = overlapping_markers(group, schema) if schema.exclusive_groups else []
    return select_group(abundance_table, schema.marker_for(group), exclude_markers=exclude)


def filter_rows_with_any_probe_signal(
    table: pd.DataFrame, schema: Optional[QuantSchema] = None, verbose: bool = True
) -> pd.DataFrame:
    """
    Remove proteins with no usable measurement in the probe group.

    Parameters:
    -----------
    table : pd.DataFrame
        Quantification table
    schema : QuantSchema, optional
        Naming conventions (defaults to QuantSchema())
    verbose : bool, default True
        Whether to print the filtering summary

    Returns:
    --------
    pd.DataFrame : Rows whose missing count among probe columns is strictly
        less than the number of probe columns, in original order
    """
    schema = _schema_or_default(schema)

    probe = select_group_columns(select_abundance_columns(table, schema), "probe", schema)
    missing_per_row = missing_value_mask(probe).sum(axis=1)
    keep = missing_per_row < probe.shape[1]
    filtered = table.loc[keep].copy()

    if verbose:
        print("=== FILTERING PROTEINS WITHOUT PROBE SIGNAL ===\n")
        print(f"Probe columns: {probe.shape[1]}")
        print(f"Original proteins: {len(table)}")
        print(f"Proteins with probe signal: {len(filtered)}")
        print(f"Removed: {len(table) - len(filtered)} proteins")

    return filtered


def log2_transform(matrix: pd.DataFrame) -> pd.DataFrame:
    """
    Apply log2 transformation to raw abundances.

    Non-positive values are set to NaN before the transform so they are
    imputed rather than turned into -inf.
    """
    values = matrix.astype(float).mask(missing_value_mask(matrix))
    return pd.DataFrame(np.log2(values), index=matrix.index, columns=matrix.columns)


def assess_missing_values(
    table: pd.DataFrame, schema: Optional[QuantSchema] = None, verbose: bool = True
) -> pd.DataFrame:
    """
    Summarize missing values per group.

    Returns:
    --------
    pd.DataFrame indexed by group label with columns 'columns',
        'missing_values', 'missing_percent' and 'rows_all_missing'
    """
    schema = _schema_or_default(schema)
    abundance = select_abundance_columns(table, schema)

    rows = []
    for group in GROUP_NAMES:
        try:
            group_data = select_group_columns(abundance, group, schema)
        except SchemaError:
            continue
        mask = missing_value_mask(group_data)
        total = mask.size
        rows.append(
            {
                "group": schema.label_for(group),
                "columns": group_data.shape[1],
                "missing_values": int(mask.values.sum()),
                "missing_percent": mask.values.sum() / total * 100 if total else 0.0,
                "rows_all_missing": int(mask.all(axis=1).sum()),
            }
        )

    summary = pd.DataFrame(rows).set_index("group") if rows else pd.DataFrame()

    if verbose:
        print("=== ASSESSING MISSING VALUES ===\n")
        print(f"Total proteins: {len(table)}")
        for label, row in summary.iterrows():
            print(
                f"{label}: {int(row['columns'])} columns, {int(row['missing_values'])} missing "
                f"({row['missing_percent']:.1f}%), {int(row['rows_all_missing'])} proteins with no values"
            )

    return summary


def summarize_group_columns(
    table: pd.DataFrame, schema: Optional[QuantSchema] = None
) -> Dict[str, List[str]]:
    """Map each group label to its abundance columns (groups without columns map to [])."""
    schema = _schema_or_default(schema)
    abundance = select_abundance_columns(table, schema)

    summary = {}
    for group in GROUP_NAMES:
        try:
            summary[schema.label_for(group)] = list(
                select_group_columns(abundance, group, schema).columns
            )
        except SchemaError:
            summary[schema.label_for(group)] = []
    return summary
