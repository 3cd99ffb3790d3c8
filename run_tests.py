#!/usr/bin/env python3
"""
Run the chemoproteomics_toolkit test suites one group at a time.

Usage:
    python run_tests.py            # every suite, then the full quick run
    python run_tests.py imputation # only suites whose name contains 'imputation'
"""

import os
import subprocess
import sys
from typing import List, Tuple


PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

# (suite name, test files)
SUITES: List[Tuple[str, List[str]]] = [
    ("basic", ["tests/test_basic.py"]),
    ("data import", ["tests/test_data_import.py"]),
    ("preprocessing and validation", ["tests/test_preprocessing.py", "tests/test_validation.py"]),
    ("imputation", ["tests/test_imputation.py"]),
    ("statistical analysis", ["tests/test_statistical_analysis.py"]),
    ("visualization and export", ["tests/test_visualization.py", "tests/test_export.py"]),
]


def run_suite(name: str, test_files: List[str], extra_args: List[str]) -> int:
    """Run pytest on one suite and return its exit code"""
    print(f"\n=== {name.upper()} ===")
    command = [sys.executable, "-m", "pytest", *test_files, *extra_args]
    return subprocess.run(command, cwd=PROJECT_ROOT, check=False).returncode


def main(argv: List[str]) -> int:
    selected = [
        (name, files) for name, files in SUITES
        if not argv or any(pattern in name for pattern in argv)
    ]
    if not selected:
        print(f"No suite matches {argv}. Available: {[name for name, _ in SUITES]}")
        return 2

    exit_codes = {name: run_suite(name, files, ["-v", "--tb=short"]) for name, files in selected}
    if not argv:
        exit_codes["complete (quick)"] = run_suite("complete (quick)", ["tests"], ["-q", "--tb=short"])

    print("\n=== TEST SUMMARY ===")
    for name, code in exit_codes.items():
        print(f"{'PASSED' if code == 0 else f'FAILED ({code})':12} {name}")

    failed = sum(1 for code in exit_codes.values() if code != 0)
    print(f"\n{len(exit_codes) - failed}/{len(exit_codes)} suites passed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
