"""
Pytest configuration and fixtures for chemoproteomics_toolkit tests
"""

import matplotlib

matplotlib.use("Agg")

import pytest
import pandas as pd
import numpy as np

from chemoproteomics_toolkit.preprocessing import QuantSchema
from chemoproteomics_toolkit.statistical_analysis import StatisticalConfig


CONTROL_COLUMNS = [
    "Abundance: F1: Sample, Vehicle, Rep1",
    "Abundance: F2: Sample, Vehicle, Rep2",
    "Abundance: F3: Sample, Vehicle, Rep3",
]
PROBE_COLUMNS = [
    "Abundance: F4: Sample, Probe, Rep1",
    "Abundance: F5: Sample, Probe, Rep2",
    "Abundance: F6: Sample, Probe, Rep3",
]
COMPETITOR_COLUMNS = [
    "Abundance: F7: Sample, Competitor+Probe, Rep1",
    "Abundance: F8: Sample, Competitor+Probe, Rep2",
    "Abundance: F9: Sample, Competitor+Probe, Rep3",
]


@pytest.fixture
def schema():
    """Default column conventions"""
    return QuantSchema()


@pytest.fixture
def quiet_config():
    """Statistical configuration with a fixed seed and no printing"""
    config = StatisticalConfig()
    config.random_seed = 7
    config.verbose = False
    return config


@pytest.fixture
def competition_table():
    """Quantification table with 30 proteins and three groups of 3 replicates"""
    rng = np.random.default_rng(42)
    n_proteins = 30

    base = rng.normal(22, 2, size=(n_proteins, 1))
    log_values = base + rng.normal(0, 0.3, size=(n_proteins, 9))
    # Probe-enriched proteins: higher in probe than in both other groups
    log_values[:5, 3:6] += 3
    raw = 2 ** log_values

    # Sporadic missing values
    raw[6, 0] = np.nan
    raw[7, 4] = np.nan
    raw[8, 7] = np.nan
    raw[9, 1] = 0.0

    columns = CONTROL_COLUMNS + PROBE_COLUMNS + COMPETITOR_COLUMNS
    df = pd.DataFrame(raw, columns=columns)
    df.insert(0, "Accession", [f"P{i:05d}" for i in range(n_proteins)])
    df.insert(1, "Gene Symbol", [f"GENE{i}" for i in range(n_proteins)])
    df["# PSMs"] = rng.integers(1, 50, n_proteins)

    # Protein never detected with the probe
    df.loc[10, PROBE_COLUMNS] = np.nan
    # Protein without a gene symbol
    df.loc[11, "Gene Symbol"] = np.nan

    return df


@pytest.fixture
def three_protein_table():
    """3 proteins, 3 control and 3 probe replicates, no missing values.

    Row 0: probe is twice control, row 1: probe equals control,
    row 2: control is twice probe.
    """
    control = np.array(
        [
            [1000.0, 1200.0, 900.0],
            [5000.0, 4000.0, 4500.0],
            [8000.0, 7000.0, 7600.0],
        ]
    )
    noise = np.array([1.05, 0.95, 1.0])
    probe = np.vstack(
        [
            control[0] * 2 * noise,
            control[1],
            control[2] / 2 * noise,
        ]
    )

    df = pd.DataFrame(
        np.hstack([control, probe]), columns=CONTROL_COLUMNS + PROBE_COLUMNS
    )
    df.insert(0, "Gene Symbol", ["UP1", "FLAT1", "DOWN1"])
    return df


@pytest.fixture
def log2_matrix_with_missing():
    """200 x 4 log2 matrix with ~10% missing values"""
    rng = np.random.default_rng(0)
    values = rng.normal(25, 2, size=(200, 4))
    mask = rng.random(values.shape) < 0.1
    values[mask] = np.nan
    return pd.DataFrame(
        values,
        index=[f"prot{i}" for i in range(200)],
        columns=PROBE_COLUMNS + ["Abundance: F10: Sample, Probe, Rep4"],
    )
