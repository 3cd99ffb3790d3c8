"""
Data Import Module for Chemoproteomics Competition Toolkit

Functions for loading protein quantification exports (Excel or delimited text)
from the search engine.
"""

import pandas as pd
import os
import warnings
from typing import Optional, Union

from .preprocessing import QuantSchema, summarize_group_columns


EXCEL_EXTENSIONS = (".xlsx", ".xlsm")
DELIMITED_EXTENSIONS = {".csv": ",", ".tsv": "\t", ".txt": "\t"}


def load_quantification_table(
    protein_file: str,
    sheet_name: Union[int, str] = 0,
    schema: Optional[QuantSchema] = None,
    verbose: bool = True,
) -> pd.DataFrame:
    """
    Load a protein quantification table.

    Parameters:
    -----------
    protein_file : str
        Path to an Excel workbook (.xlsx/.xlsm) or a delimited text file
        (.csv, .tsv, .txt)
    sheet_name : int or str
        Worksheet to read from Excel workbooks
    schema : QuantSchema, optional
        When given, the number of columns per group is printed
    verbose : bool, default True
        Whether to print loading progress

    Returns:
    --------
    pd.DataFrame : Quantification table, one row per protein group
    """

    if verbose:
        print("=== LOADING QUANTIFICATION TABLE ===\n")

    if not os.path.exists(protein_file):
        raise FileNotFoundError(f"Protein file not found: {protein_file}")

    extension = os.path.splitext(protein_file)[1].lower()

    try:
        if extension in EXCEL_EXTENSIONS:
            protein_data = pd.read_excel(protein_file, sheet_name=sheet_name)
        elif extension in DELIMITED_EXTENSIONS:
            protein_data = pd.read_csv(protein_file, sep=DELIMITED_EXTENSIONS[extension])
        else:
            raise ValueError(
                f"Unsupported file type '{extension}'. "
                f"Use one of {list(EXCEL_EXTENSIONS) + list(DELIMITED_EXTENSIONS)}"
            )
    except ValueError:
        raise
    except Exception as e:
        raise ValueError(f"Error loading protein file: {e}")

    if verbose:
        print(f"✓ Loaded protein data: {protein_data.shape}")

    if schema is not None:
        for label, columns in summarize_group_columns(protein_data, schema).items():
            if not columns:
                warnings.warn(f"No abundance columns found for group '{label}'")
            if verbose:
                print(f"  {label}: {len(columns)} abundance columns")

    return protein_data
