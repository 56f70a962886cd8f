"""
Visualization module.

Contains plotting utilities for analysis results:
- Concentration time courses and the ON-state response
- Truth table and ON/OFF ratio
- Dose-response and robustness curves
"""

from .plotting import (plot_trajectory, plot_truth_table, plot_response,
                       plot_dose_response, plot_robustness)

__all__ = [
    "plot_trajectory",
    "plot_truth_table",
    "plot_response",
    "plot_dose_response",
    "plot_robustness",
]
