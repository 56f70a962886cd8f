"""
Analysis module.

Derived metrics of simulated trajectories and the sweeps that produce them:
- Truth table classification and ON/OFF ratio
- Response times, EC50 and IC50
- Leak and crosstalk robustness sweeps
"""

from .metrics import (Label, classify, response_time, t50, t90, half_max_concentration,
                      ec50, ic50, on_off_summary, on_off_ratio, inhibition_efficiency,
                      label_consistency)
from .report import MetricReport, format_report, format_truth_table, export_table, export_tables
from .sweeps import (COMBINATIONS, run_batch, truth_table_sweep, ec50_sweep, ic50_sweep,
                     on_off_ratio_under_override, robustness_sweep, leak_sweep, crosstalk_sweep,
                     response_dynamics, run_full_analysis, ResponseDynamics, AnalysisResults)

__all__ = [
    "Label",
    "classify",
    "response_time",
    "t50",
    "t90",
    "half_max_concentration",
    "ec50",
    "ic50",
    "on_off_summary",
    "on_off_ratio",
    "inhibition_efficiency",
    "label_consistency",
    "MetricReport",
    "format_report",
    "format_truth_table",
    "export_table",
    "export_tables",
    "COMBINATIONS",
    "run_batch",
    "truth_table_sweep",
    "ec50_sweep",
    "ic50_sweep",
    "on_off_ratio_under_override",
    "robustness_sweep",
    "leak_sweep",
    "crosstalk_sweep",
    "response_dynamics",
    "run_full_analysis",
    "ResponseDynamics",
    "AnalysisResults",
]
