"""
Tests for chemoproteomics_toolkit.export module
"""

import os

import pandas as pd

from chemoproteomics_toolkit.export import (
    create_config_dict,
    export_complete_analysis,
    export_results,
    export_timestamped_config,
)
from chemoproteomics_toolkit.preprocessing import QuantSchema
from chemoproteomics_toolkit.statistical_analysis import run_both_comparisons


class TestExportResults:
    """Test result table export"""

    def test_export_all_csv(self, three_protein_table, quiet_config, tmp_path):
        from chemoproteomics_toolkit.statistical_analysis import run_probe_vs_control

        results = run_probe_vs_control(three_protein_table, config=quiet_config)
        output_file = str(tmp_path / "results.csv")

        export_results(results, output_file)

        exported = pd.read_csv(output_file)
        assert len(exported) == 3
        assert exported["Gene Symbol"].tolist() == ["UP1", "FLAT1", "DOWN1"]

    def test_export_significant_only(self, competition_table, quiet_config, tmp_path):
        results = run_both_comparisons(competition_table, config=quiet_config)["Probe vs Competitor"]
        output_file = str(tmp_path / "significant.csv")

        export_results(results, output_file, include_all=False, config=quiet_config)

        exported = pd.read_csv(output_file)
        assert 0 < len(exported) < len(results)
        assert (exported["P.Value"] < quiet_config.p_value_threshold).all()

    def test_export_excel(self, three_protein_table, quiet_config, tmp_path):
        from chemoproteomics_toolkit.statistical_analysis import run_probe_vs_control

        results = run_probe_vs_control(three_protein_table, config=quiet_config)
        output_file = str(tmp_path / "results.xlsx")

        export_results(results, output_file)

        assert pd.read_excel(output_file).shape == results.shape


class TestConfigExport:
    """Test configuration export"""

    def test_create_config_dict(self, quiet_config):
        config_dict = create_config_dict(quiet_config, QuantSchema(control_marker="DMSO"), protein_file="x.xlsx")

        assert config_dict["control_marker"] == "DMSO"
        assert config_dict["random_seed"] == 7
        assert config_dict["protein_file"] == "x.xlsx"

    def test_timestamped_config_is_valid_python(self, quiet_config, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config_dict = create_config_dict(quiet_config, QuantSchema())

        config_file = export_timestamped_config(config_dict, output_prefix="run1")

        assert os.path.basename(config_file).startswith("run1_config_")
        namespace = {}
        with open(config_file, encoding="utf-8") as f:
            exec(f.read(), namespace)
        assert namespace["probe_marker"] == "Probe"
        assert namespace["random_seed"] == 7
        assert namespace["exclusive_groups"] is True


class TestExportCompleteAnalysis:
    """Test full export"""

    def test_exports_every_comparison(self, competition_table, quiet_config, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        results = run_both_comparisons(competition_table, config=quiet_config)

        exported = export_complete_analysis(results, quiet_config, output_prefix="study")

        assert exported["Probe vs Control"] == "study_Probe_vs_Control.csv"
        assert exported["Probe vs Competitor"] == "study_Probe_vs_Competitor.csv"
        assert os.path.exists(exported["config"])
        for name in ("Probe vs Control", "Probe vs Competitor"):
            assert len(pd.read_csv(exported[name])) == len(results[name])
