"""
Visualization Module for Chemoproteomics Competition Toolkit

Functions for volcano plots of differential results and quality control plots
of group intensities and imputation.
"""

import pandas as pd
import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.figure import Figure
from typing import Dict, List, Optional, Tuple


IMPUTED_COLOR = "#ff7f0e"
OBSERVED_COLOR = "#1f77b4"


def imputed_count_columns(results: pd.DataFrame) -> List[str]:
    """Columns holding per-group imputed counts ('Imputed_<group>')."""
    return [col for col in results.columns if str(col).startswith("Imputed_")]


def imputation_flag(results: pd.DataFrame) -> pd.Series:
    """True for proteins with at least one imputed value in either group."""
    columns = imputed_count_columns(results)
    if not columns:
        return pd.Series(False, index=results.index, name="any_imputed")
    return (results[columns].sum(axis=1) > 0).rename("any_imputed")


def _neg_log10_pvalues(pvalues: pd.Series) -> pd.Series:
    # p = 0 (zero-variance rows) is drawn at the smallest observed p-value
    positive = pvalues[pvalues > 0]
    floor = positive.min() if len(positive) else 1e-300
    return -np.log10(pvalues.clip(lower=floor))


def plot_volcano(
    results: pd.DataFrame,
    label: str,
    p_column: str = "P.Value",
    p_threshold: Optional[float] = 0.05,
    fc_threshold: Optional[float] = None,
    figsize: Tuple[int, int] = (10, 8),
    output_file: Optional[str] = None,
    show: bool = True,
) -> Optional[Figure]:
    """
    Create a volcano plot of one comparison, coloured by imputation.

    Parameters:
    -----------
    results : pd.DataFrame
        Pipeline output with 'logFC', a p-value column and 'Imputed_' columns
    label : str
        Comparison label used in the title (e.g. 'Probe vs Control')
    p_column : str
        P-value column plotted on the y axis
    p_threshold : float, optional
        Draw a dashed line at -log10(p_threshold); None for no line
    fc_threshold : float, optional
        Draw dashed lines at +-fc_threshold; None for no lines
    figsize : Tuple[int, int]
        Figure size (width, height)
    output_file : str, optional
        Save the figure to this path
    show : bool
        Whether to call plt.show()

    Returns:
    --------
    matplotlib Figure, or None when there is nothing to plot
    """

    if len(results) == 0:
        print("No data to plot")
        return None

    if p_column not in results.columns:
        raise KeyError(f"P-value column '{p_column}' not found in results")

    df = results.copy()
    df["neg_log10_p"] = _neg_log10_pvalues(df[p_column])
    df["any_imputed"] = imputation_flag(df)

    fig, ax = plt.subplots(figsize=figsize)

    for flag, color, legend in [
        (False, OBSERVED_COLOR, "No imputation"),
        (True, IMPUTED_COLOR, "Imputed values"),
    ]:
        subset = df[df["any_imputed"] == flag]
        if len(subset) > 0:
            ax.scatter(
                subset["logFC"],
                subset["neg_log10_p"],
                c=color,
                alpha=0.6,
                s=30,
                label=f"{legend} (n={len(subset)})",
            )

    if p_threshold is not None:
        ax.axhline(y=-np.log10(p_threshold), color="black", linestyle="--", alpha=0.5)
    if fc_threshold is not None:
        ax.axvline(x=fc_threshold, color="black", linestyle="--", alpha=0.5)
        ax.axvline(x=-fc_threshold, color="black", linestyle="--", alpha=0.5)

    ax.set_xlabel("Log2 Fold Change", fontsize=16, fontweight="bold")
    ax.set_ylabel("-Log10 P-value", fontsize=16, fontweight="bold")
    ax.set_title(f"Volcano Plot: {label}", fontsize=16, fontweight="bold")

    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.spines["left"].set_linewidth(2)
    ax.spines["bottom"].set_linewidth(2)
    ax.tick_params(axis="both", which="major", labelsize=12, width=1.5, length=6)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="upper right", frameon=True, fontsize=11)

    plt.tight_layout()

    if output_file:
        fig.savefig(output_file, dpi=300, bbox_inches="tight")
        print(f"Volcano plot saved to: {output_file}")
    if show:
        plt.show()

    print(f"Volcano plot summary ({label}):")
    print(f"Total proteins: {len(df)}")
    print(f"Proteins with imputed values: {int(df['any_imputed'].sum())}")

    return fig


def plot_group_distributions(
    log2_groups: Dict[str, pd.DataFrame],
    title: str = "Log2 Abundance Distribution by Replicate",
    group_colors: Optional[Dict[str, str]] = None,
    figsize: Tuple[int, int] = (14, 7),
    show: bool = True,
) -> Figure:
    """
    Box plot of log2 abundances per replicate column, coloured by group.

    Parameters:
    -----------
    log2_groups : Dict[str, pd.DataFrame]
        Group label -> log2 group matrix (before imputation)
    title : str
        Plot title
    group_colors : Dict[str, str], optional
        Colors for each group label
    """

    if group_colors is None:
        palette = plt.cm.tab10(np.linspace(0, 1, max(len(log2_groups), 1)))
        group_colors = {group: palette[i] for i, group in enumerate(log2_groups)}

    fig, ax = plt.subplots(figsize=figsize)

    positions = []
    box_data = []
    colors = []
    labels = []
    pos = 0

    for group, matrix in log2_groups.items():
        for column in matrix.columns:
            box_data.append(matrix[column].dropna())
            positions.append(pos)
            colors.append(group_colors.get(group, "#7f7f7f"))
            labels.append(str(column))
            pos += 1
        pos += 0.5  # Space between groups

    bp = ax.boxplot(
        box_data,
        positions=positions,
        patch_artist=True,
        widths=0.8,
        showfliers=True,
        flierprops={"marker": "o", "markersize": 2, "alpha": 0.5},
    )
    for patch, color in zip(bp["boxes"], colors):
        patch.set_facecolor(color)
        patch.set_alpha(0.7)

    ax.set_xlabel("Replicate", fontsize=14)
    ax.set_ylabel("Log2 Abundance", fontsize=14)
    ax.set_title(title, fontsize=16, fontweight="bold")
    ax.set_xticks(positions)
    ax.set_xticklabels(labels, rotation=45, ha="right", fontsize=9)
    ax.grid(True, alpha=0.3, axis="y")

    legend_elements = [
        plt.Rectangle((0, 0), 1, 1, facecolor=group_colors.get(group, "#7f7f7f"), alpha=0.7, label=group)
        for group in log2_groups
    ]
    ax.legend(handles=legend_elements, loc="upper right")

    plt.tight_layout()
    if show:
        plt.show()

    return fig


def plot_imputation_overview(
    results: pd.DataFrame,
    label: str,
    figsize: Tuple[int, int] = (10, 5),
    show: bool = True,
) -> Figure:
    """Histogram of imputed values per protein for each group of one comparison"""

    columns = imputed_count_columns(results)
    if not columns:
        raise KeyError("Results contain no 'Imputed_' count columns")

    long_counts = results[columns].melt(var_name="Group", value_name="Imputed values")
    long_counts["Group"] = long_counts["Group"].str.replace("Imputed_", "", regex=False)

    fig, ax = plt.subplots(figsize=figsize)
    sns.histplot(
        data=long_counts,
        x="Imputed values",
        hue="Group",
        multiple="dodge",
        discrete=True,
        shrink=0.8,
        ax=ax,
    )
    ax.set_title(f"Imputed Values per Protein: {label}", fontsize=14, fontweight="bold")
    ax.set_ylabel("Proteins", fontsize=12)

    plt.tight_layout()
    if show:
        plt.show()

    return fig
