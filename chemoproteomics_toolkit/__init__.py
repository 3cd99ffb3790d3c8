"""
Chemoproteomics Competition Toolkit
===================================

A Python library for differential analysis of probe-based chemoproteomics
experiments quantified by a mass-spectrometry search engine. Each protein's
probe signal is compared against either a vehicle control or a
competitor+probe condition: log2 fold-change of paired replicates, a
one-sample t-test p-value, and MinProb imputation of missing values.

QUICK START EXAMPLE:
-------------------
    import chemoproteomics_toolkit as cptk

    # 1. Load data and describe its column conventions
    table = cptk.load_quantification_table('proteins.xlsx')
    schema = cptk.QuantSchema(control_marker='DMSO', probe_marker='IA',
                              competitor_marker='KB02+IA')

    # 2. Run both comparisons
    config = cptk.StatisticalConfig()
    config.random_seed = 42
    results = cptk.run_both_comparisons(table, schema, config)

    # 3. Visualization and export
    for name, result in results.items():
        cptk.plot_volcano(result, name)
    cptk.export_complete_analysis(results, config, schema)

MODULE OVERVIEW:
===============

data_import
    Purpose: Load quantification exports (Excel, CSV, TSV)
    Key functions: load_quantification_table()

preprocessing
    Purpose: Column selection by naming convention, row filtering, log2 transform
    Key functions: QuantSchema, select_abundance_columns(), select_group(),
                   filter_rows_with_any_probe_signal()

imputation
    Purpose: Missing value imputation for left-censored intensities
    Key functions: MinProbImputer, impute_min_probability()

statistical_analysis
    Purpose: Paired log2 differences, t-tests and the comparison pipeline
    Key functions: run_pipeline(), run_probe_vs_control(),
                   run_probe_vs_competitor(), StatisticalConfig

visualization
    Purpose: Volcano plots and QC plots
    Key functions: plot_volcano(), plot_group_distributions()

validation
    Purpose: Error types, schema validation and row alignment checks
    Key functions: validate_table_schema(), check_row_alignment()

export
    Purpose: Export result tables and timestamped configurations
    Key functions: export_complete_analysis(), export_results()

ERROR HANDLING:
==============
Every error aborts the run that raised it:
- SchemaError: expected columns absent or misnamed
- ImputationError: not enough observed values to fit the imputation model
- StatisticalError: a protein row cannot be tested
- AlignmentError: rows or replicate counts diverge between stages
"""

from . import data_import           # Data loading
from . import preprocessing         # Column selection and filtering
from . import imputation            # Missing value imputation
from . import statistical_analysis  # Differential analysis pipeline
from . import visualization         # Plotting
from . import validation            # Errors and consistency checks
from . import export                # Results export

__version__ = "1.0.0"

# DATA LOADING
from .data_import import load_quantification_table

# PREPROCESSING
from .preprocessing import (
    QuantSchema,                        # Column naming conventions
    select_abundance_columns,           # Abundance columns by prefix
    select_group,                       # Group columns by marker
    select_group_columns,               # Group columns by group name
    filter_rows_with_any_probe_signal,  # Drop proteins absent from the probe group
    log2_transform,                     # Log2 with non-positive values as missing
    assess_missing_values,              # Missing value summary per group
    summarize_group_columns,            # Abundance columns per group label
)

# IMPUTATION
from .imputation import (
    ImputationStrategy,       # Interface for imputation methods
    MinProbImputer,           # Minimum probability imputation
    impute_min_probability,   # Functional MinProb wrapper
)

# STATISTICAL ANALYSIS
from .statistical_analysis import (
    StatisticalConfig,
    row_t_test,
    row_mean,
    compute_differential,
    run_pipeline,
    run_probe_vs_control,
    run_probe_vs_competitor,
    run_both_comparisons,
    display_analysis_summary,
)

# VALIDATION
from .validation import (
    validate_table_schema,
    check_row_alignment,
    ChemoproteomicsAnalysisError,
    SchemaError,
    ImputationError,
    StatisticalError,
    AlignmentError,
)

# EXPORT
from .export import (
    export_results,
    export_timestamped_config,
    export_complete_analysis,
)

# VISUALIZATION
from .visualization import (
    plot_volcano,
    plot_group_distributions,
    plot_imputation_overview,
)

__all__ = [
    # MODULES
    "data_import",
    "preprocessing",
    "imputation",
    "statistical_analysis",
    "visualization",
    "validation",
    "export",

    # DATA LOADING
    "load_quantification_table",

    # PREPROCESSING
    "QuantSchema",
    "select_abundance_columns",
    "select_group",
    "select_group_columns",
    "filter_rows_with_any_probe_signal",
    "log2_transform",
    "assess_missing_values",
    "summarize_group_columns",

    # IMPUTATION
    "ImputationStrategy",
    "MinProbImputer",
    "impute_min_probability",

    # STATISTICAL ANALYSIS
    "StatisticalConfig",
    "row_t_test",
    "row_mean",
    "compute_differential",
    "run_pipeline",
    "run_probe_vs_control",
    "run_probe_vs_competitor",
    "run_both_comparisons",
    "display_analysis_summary",

    # VALIDATION
    "validate_table_schema",
    "check_row_alignment",
    "ChemoproteomicsAnalysisError",
    "SchemaError",
    "ImputationError",
    "StatisticalError",
    "AlignmentError",

    # EXPORT
    "export_results",
    "export_timestamped_config",
    "export_complete_analysis",

    # VISUALIZATION
    "plot_volcano",
    "plot_group_distributions",
    "plot_imputation_overview",
]
