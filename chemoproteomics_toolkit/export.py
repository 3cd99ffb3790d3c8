"""
Export Module for Chemoproteomics Competition Toolkit

This module handles exporting comparison result tables and the analysis
configuration. Configurations are written as timestamped Python files so an
analysis can be rerun with identical settings (including the imputation seed).
"""

import pandas as pd
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from .preprocessing import QuantSchema
from .statistical_analysis import StatisticalConfig, significant_proteins


def _slugify(name: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in name).strip("_")


def export_results(
    results: pd.DataFrame,
    output_file: str,
    include_all: bool = True,
    config: Optional[StatisticalConfig] = None,
) -> str:
    """
    Export one comparison's result table.

    Parameters:
    -----------
    results : pd.DataFrame
        Pipeline output
    output_file : str
        Output path; '.xlsx' writes Excel, anything else CSV
    include_all : bool
        Whether to include all proteins or only those passing the thresholds
    config : StatisticalConfig, optional
        Thresholds used when include_all is False

    Returns:
    --------
    str : Path written
    """

    if not include_all:
        export_df = significant_proteins(results, config)
        print(f"Exporting {len(export_df)} significant proteins to {output_file}")
    else:
        export_df = results
        print(f"Exporting all {len(export_df)} proteins to {output_file}")

    if output_file.lower().endswith(".xlsx"):
        export_df.to_excel(output_file, index=False)
    else:
        export_df.to_csv(output_file, index=False)

    return output_file


def create_config_dict(
    config: Optional[StatisticalConfig] = None,
    schema: Optional[QuantSchema] = None,
    **kwargs,
) -> Dict[str, Any]:
    """Flatten schema, statistical settings and extra values into one dict"""
    config_dict = {}
    config_dict.update(asdict(schema if schema is not None else QuantSchema()))
    config_dict.update((config if config is not None else StatisticalConfig()).to_dict())
    config_dict.update(kwargs)
    return config_dict


def export_timestamped_config(
    config_dict: Dict[str, Any],
    output_prefix: str = "chemoproteomics_analysis",
    analysis_description: str = "Probe competition analysis",
    computed_values: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Export analysis configuration as a timestamped Python file.

    Parameters:
    -----------
    config_dict : dict
        Configuration parameters (see create_config_dict)
    output_prefix : str
        Prefix for the configuration filename
    analysis_description : str
        Description written in the header
    computed_values : dict, optional
        Additional values written as comments

    Returns:
    --------
    str : Path to the exported configuration file
    """

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    config_file = f"{output_prefix}_config_{timestamp}.py"

    print(f"Exporting analysis configuration to: {config_file}")

    section_configs = [
        (1, "INPUT FILES", ["protein_file", "sheet_name"]),
        (
            2,
            "TABLE SCHEMA",
            ["gene_column", "abundance_prefix", "control_marker", "probe_marker",
             "competitor_marker", "exclusive_groups", "control_label", "probe_label",
             "competitor_label"],
        ),
        (
            3,
            "IMPUTATION",
            ["imputation_q", "imputation_tune_sigma", "random_seed"],
        ),
        (
            4,
            "SIGNIFICANCE THRESHOLDS",
            ["p_value_threshold", "fold_change_threshold", "correction_method",
             "use_adjusted_pvalue", "min_replicates"],
        ),
        (5, "OUTPUT", ["output_prefix"]),
    ]

    with open(config_file, "w", encoding="utf-8") as f:
        f.write(
            "# =============================================================================\n"
        )
        f.write("# CHEMOPROTEOMICS ANALYSIS CONFIGURATION\n")
        f.write(f"# Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
        f.write(f"# Analysis: {analysis_description}\n")
        f.write(
            "# =============================================================================\n\n"
        )

        for section_num, section_name, param_names in section_configs:
            _write_config_section(f, section_name, config_dict, param_names, section_num)

        if computed_values:
            f.write(
                "# =============================================================================\n"
            )
            f.write("# COMPUTED VALUES (for reference)\n")
            f.write(
                "# =============================================================================\n"
            )
            for key, value in computed_values.items():
                f.write(f"# {key}: {value}\n")

    return config_file


def _write_config_section(
    file_handle,
    section_name: str,
    config_dict: Dict[str, Any],
    param_names: List[str],
    section_number: int = 1,
) -> None:
    """Write a configuration section to file."""

    file_handle.write(
        "# =============================================================================\n"
    )
    file_handle.write(f"# {section_number}. {section_name}\n")
    file_handle.write(
        "# =============================================================================\n"
    )

    for param in param_names:
        if param in config_dict:
            file_handle.write(f"{param} = {repr(config_dict[param])}\n")

    file_handle.write("\n")


def export_complete_analysis(
    results_by_comparison: Dict[str, pd.DataFrame],
    config: Optional[StatisticalConfig] = None,
    schema: Optional[QuantSchema] = None,
    output_prefix: str = "chemoproteomics_analysis",
    protein_file: Optional[str] = None,
) -> Dict[str, str]:
    """
    Export every comparison table plus the timestamped configuration.

    Returns:
    --------
    Dict mapping comparison name (and 'config') to the written file path
    """

    print("Exporting analysis results...")

    exported_files = {}
    for name, results in results_by_comparison.items():
        output_file = f"{output_prefix}_{_slugify(name)}.csv"
        exported_files[name] = export_results(results, output_file)

    config_dict = create_config_dict(
        config, schema, protein_file=protein_file, output_prefix=output_prefix
    )
    computed_values = {
        f"{name} proteins": len(results) for name, results in results_by_comparison.items()
    }
    exported_files["config"] = export_timestamped_config(
        config_dict, output_prefix=output_prefix, computed_values=computed_values
    )

    print(f"\n✓ Exported {len(exported_files)} files")
    for name, path in exported_files.items():
        print(f"  {name}: {path}")

    return exported_files
