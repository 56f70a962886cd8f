"""
Reporting helpers.

Formats result tables and the derived-metric summary as text, and writes
tables to CSV for downstream plotting or spreadsheets.
"""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd
from tabulate import tabulate

logger = logging.getLogger(__name__)

NANOMOLAR = 1e9


@dataclass(frozen=True)
class MetricReport:
    """
    Derived metrics of one full analysis.

    Attributes:
        t50 (float, optional): Time to 50% of the ON peak [s]
        t90 (float, optional): Time to 90% of the ON peak [s]
        ec50 (float): Half-maximal activating input concentration [M]
        ic50 (float): Half-maximal inhibiting miR34 concentration [M]
        on_off_ratio (float): Mean ON peak over mean non-ON peak
        inhibition_efficiency (float): Suppression of the ON peak by miR34 [%]
    """

    t50: Optional[float]
    t90: Optional[float]
    ec50: float
    ic50: float
    on_off_ratio: float
    inhibition_efficiency: float

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


def format_truth_table(table: pd.DataFrame) -> str:
    """Truth table as a psql-style text table."""
    display = table.copy()
    display['max_signal'] = display['max_signal'].map(lambda v: f"{v:.3e}")
    display = display.rename(columns={'max_signal': 'Max Signal [M]', 'label': 'Expected State'})
    return tabulate(display, headers="keys", showindex=False, tablefmt="psql")


def format_report(report: MetricReport) -> str:
    """Derived metrics as a psql-style text table."""

    def _seconds(value):
        return "n/a" if value is None else f"{value:.3f} s"

    rows = [
        ("t50", _seconds(report.t50)),
        ("t90", _seconds(report.t90)),
        ("EC50", f"{report.ec50 * NANOMOLAR:.2f} nM"),
        ("IC50", f"{report.ic50 * NANOMOLAR:.2f} nM"),
        ("ON/OFF ratio", f"{report.on_off_ratio:.1f}x"),
        ("Inhibition efficiency (miR34)", f"{report.inhibition_efficiency:.1f} %"),
    ]
    return tabulate(rows, headers=["Metric", "Value"], tablefmt="psql")


def export_table(table: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write a result table to CSV, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(path, index=False)
    logger.info("Saved %s", path)
    return path


def export_tables(tables: Dict[str, pd.DataFrame], directory: Union[str, Path],
                  prefix: str = "biocomputer") -> Dict[str, Path]:
    """Write each table to ``<directory>/<prefix>_<name>.csv``."""
    directory = Path(directory)
    return {name: export_table(table, directory / f"{prefix}_{name}.csv") for name, table in tables.items()}
