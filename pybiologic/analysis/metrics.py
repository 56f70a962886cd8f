"""
Derived metrics.

Reduces trajectories and sweep results to scalar diagnostics: response times,
half-maximal concentrations, truth-table labels, ON/OFF ratio and inhibition
efficiency.
"""

from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd


class Label(str, Enum):
    """Expected state of the gate for an input combination."""

    OFF = "OFF"
    ON = "ON"
    INHIBITED = "INHIBITED"


# Only these two combinations of (miR21, miR155, miR34) differ from OFF
_TRUTH_TABLE = {
    (1, 1, 0): Label.ON,
    (1, 1, 1): Label.INHIBITED,
}


def classify(levels: Sequence[int]) -> Label:
    """
    Expected label of a binary input combination (miR21, miR155, miR34).

    This is a fixed lookup and never looks at simulated signals.
    """
    levels = tuple(int(b) for b in levels)
    if len(levels) != 3 or any(b not in (0, 1) for b in levels):
        raise ValueError(f"Expected three binary levels, got {levels}")
    return _TRUTH_TABLE.get(levels, Label.OFF)


def response_time(time: np.ndarray, signal: np.ndarray, fraction: float) -> Optional[float]:
    """
    First time at which ``signal`` reaches ``fraction`` of its own peak.

    Args:
        time (np.ndarray): Sample times
        signal (np.ndarray): Signal samples
        fraction (float): Fraction of the peak, in (0, 1]

    Returns:
        float or None: The time, or None if the peak is not positive
    """
    if not 0 < fraction <= 1:
        raise ValueError(f"fraction must be in (0, 1], got {fraction}")
    time = np.asarray(time, dtype=float)
    signal = np.asarray(signal, dtype=float)
    peak = signal.max() if signal.size else 0.0
    if peak <= 0:
        return None
    idx = int(np.argmax(signal >= fraction * peak))
    return float(time[idx])


def t50(time: np.ndarray, signal: np.ndarray) -> Optional[float]:
    return response_time(time, signal, 0.5)


def t90(time: np.ndarray, signal: np.ndarray) -> Optional[float]:
    return response_time(time, signal, 0.9)


def half_max_concentration(concentrations: Sequence[float], peaks: Sequence[float]) -> float:
    """
    Swept concentration whose peak signal is closest to half the largest peak.

    This is a nearest-sample estimate: no interpolation or curve fit, so its
    precision is bounded by the sweep density. Ties go to the first sample.

    Args:
        concentrations (Sequence[float]): Swept concentrations
        peaks (Sequence[float]): Peak signal at each concentration

    Returns:
        float: The selected concentration (same units as ``concentrations``)
    """
    concentrations = np.asarray(concentrations, dtype=float)
    peaks = np.asarray(peaks, dtype=float)
    if concentrations.shape != peaks.shape or concentrations.size == 0:
        raise ValueError("concentrations and peaks must be non-empty and of equal length")
    half = 0.5 * peaks.max()
    return float(concentrations[int(np.argmin(np.abs(peaks - half)))])


# Activation and inhibition curves use the same selection rule
ec50 = half_max_concentration
ic50 = half_max_concentration


def on_off_summary(on_signals: Sequence[float], off_signals: Sequence[float]) -> Tuple[float, float, float]:
    """
    Mean ON signal, mean OFF signal and their ratio.

    The ratio is infinite when every OFF signal is zero.
    """
    on_signal = float(np.mean(on_signals))
    avg_off = float(np.mean(off_signals))
    ratio = on_signal / avg_off if avg_off > 0 else float("inf")
    return on_signal, avg_off, ratio


def on_off_ratio(table: pd.DataFrame) -> float:
    """
    Mean peak over ON rows divided by mean peak over OFF and INHIBITED rows.

    Args:
        table (pd.DataFrame): Truth table with 'label' and 'max_signal' columns
    """
    on = table.loc[table['label'] == Label.ON.value, 'max_signal']
    off = table.loc[table['label'] != Label.ON.value, 'max_signal']
    if on.empty or off.empty:
        raise ValueError("Truth table needs at least one ON and one non-ON row")
    return on_off_summary(on, off)[2]


def inhibition_efficiency(table: pd.DataFrame) -> float:
    """Percentage by which the inhibitor suppresses the ON signal."""
    on = table.loc[table['label'] == Label.ON.value, 'max_signal']
    inhibited = table.loc[table['label'] == Label.INHIBITED.value, 'max_signal']
    if on.empty or inhibited.empty:
        raise ValueError("Truth table needs at least one ON and one INHIBITED row")
    return float((1.0 - inhibited.mean() / on.mean()) * 100.0)


def label_consistency(table: pd.DataFrame, threshold: float = 0.1) -> pd.Series:
    """
    Check that simulated peaks agree with the expected labels.

    An ON row is consistent when its peak is at least ``threshold`` times the
    mean ON peak; any other row when it stays below that level.

    Returns:
        pd.Series: Boolean per row
    """
    on_level = table.loc[table['label'] == Label.ON.value, 'max_signal'].mean()
    cutoff = threshold * on_level
    is_on = table['label'] == Label.ON.value
    return (is_on & (table['max_signal'] >= cutoff)) | (~is_on & (table['max_signal'] < cutoff))
