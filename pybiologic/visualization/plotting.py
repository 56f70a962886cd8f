"""
Plotting utilities.

This module renders the tables produced by the analysis sweeps: time courses,
the truth table with its ON/OFF ratio, dose-response curves and robustness
stress tests. Every function either shows the figure or, when ``save_path``
is given, writes it to disk and closes it.
"""

import logging
from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ..analysis.metrics import Label
from ..simulation.ode import Trajectory

logger = logging.getLogger(__name__)

LABEL_COLORS = {
    Label.ON.value: (0.0, 0.8, 0.0),
    Label.INHIBITED.value: (1.0, 0.0, 0.0),
    Label.OFF.value: (0.3, 0.3, 0.3),
}
NANOMOLAR = 1e9


def _finish(fig, save_path: Optional[str]):
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches='tight')
        plt.close(fig)
        logger.info("Plot saved to %s", save_path)
    else:
        plt.show()
    return fig


def plot_trajectory(trajectory: Trajectory, title: Optional[str] = None,
                    figsize: Tuple[float, float] = (10, 6),
                    style: str = 'seaborn-v0_8-whitegrid',
                    species_subset: Optional[List[str]] = None,
                    log_scale: bool = False,
                    save_path: Optional[str] = None):
    """
    Plot the concentration time courses of a simulated trajectory.

    Args:
        trajectory (Trajectory): Result of an integration
        title (str, optional): Plot title
        figsize (Tuple[float, float]): Figure size as (width, height)
        style (str): Matplotlib style to use
        species_subset (List[str], optional): Subset of species to plot
        log_scale (bool): Use a logarithmic concentration axis
        save_path (str, optional): Path to save the plot. If None, displays interactively.
    """
    plt.style.use(style)
    fig, ax = plt.subplots(1, 1, figsize=figsize)

    names = species_subset if species_subset else list(trajectory.species_names)
    for name in names:
        ax.plot(trajectory.t, trajectory[name], label=name, lw=2.5)

    ax.set_title(title or "ODE Simulation", fontsize=16)
    ax.set_xlabel("Time [s]", fontsize=14)
    ax.set_ylabel("Concentration [M]", fontsize=14)
    if log_scale:
        ax.set_yscale('log')
    ax.legend(fontsize=12, loc='best')
    ax.grid(True, which='both', linestyle='--', linewidth=0.5)
    return _finish(fig, save_path)


def plot_truth_table(table: pd.DataFrame, figsize: Tuple[float, float] = (14, 6),
                     style: str = 'seaborn-v0_8-whitegrid',
                     save_path: Optional[str] = None):
    """
    Bar chart of the peak signal for every input combination, next to the
    mean ON signal compared with the mean of all other combinations.

    Args:
        table (pd.DataFrame): Output of truth_table_sweep
        figsize (Tuple[float, float]): Figure size
        style (str): Matplotlib style
        save_path (str, optional): Path to save the plot
    """
    plt.style.use(style)
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    labels = [f"{r.miR21}{r.miR155}{r.miR34}" for r in table.itertuples()]
    colors = [LABEL_COLORS[label] for label in table['label']]
    x_pos = np.arange(len(table))

    ax1.bar(x_pos, table['max_signal'], color=colors)
    ax1.set_yscale('log')
    ax1.set_ylim(bottom=1e-15)
    ax1.set_xticks(x_pos)
    ax1.set_xticklabels(labels)
    ax1.set_xlabel("Input combination (miR21-miR155-miR34)", fontsize=12)
    ax1.set_ylabel("Max Signal [M]", fontsize=12)
    ax1.set_title("Output signal for all combinations", fontsize=14)
    ax1.grid(True, alpha=0.3)

    is_on = table['label'] == Label.ON.value
    on_signal = table.loc[is_on, 'max_signal'].mean()
    avg_off = table.loc[~is_on, 'max_signal'].mean()
    ratio = on_signal / avg_off if avg_off > 0 else float('inf')

    ax2.bar([0, 1], [on_signal, avg_off], color=[LABEL_COLORS[Label.ON.value], LABEL_COLORS[Label.OFF.value]])
    ax2.set_yscale('log')
    ax2.set_xticks([0, 1])
    ax2.set_xticklabels(['ON (1,1,0)', 'Avg OFF'])
    ax2.set_ylabel("Signal [M]", fontsize=12)
    ax2.set_title(f"ON/OFF Ratio: {ratio:.1f}x", fontsize=14)
    ax2.grid(True, alpha=0.3)
    return _finish(fig, save_path)


def plot_response(time: np.ndarray, signal: np.ndarray, t50: Optional[float] = None,
                  t90: Optional[float] = None, figsize: Tuple[float, float] = (10, 5),
                  style: str = 'seaborn-v0_8-whitegrid',
                  save_path: Optional[str] = None):
    """
    Signal time course of the ON state with the t50 and t90 points marked.
    """
    plt.style.use(style)
    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.plot(time, signal, 'b-', lw=2, label='Signal')

    for value, fmt, name in ((t50, 'ro', '50% max'), (t90, 'go', '90% max')):
        if value is not None:
            ax.plot(value, np.interp(value, time, signal), fmt, markersize=10, label=name)

    ax.set_xlabel("Time [s]", fontsize=14)
    ax.set_ylabel("Signal [M]", fontsize=14)
    ax.set_title("System response (ON state: 1,1,0)", fontsize=16)
    ax.set_yscale('log')
    ax.legend(loc='best')
    ax.grid(True, which='both', linestyle='--', linewidth=0.5)
    return _finish(fig, save_path)


def plot_dose_response(table: pd.DataFrame, xlabel: str, title: str,
                       half_max: Optional[float] = None, fmt: str = 'b-o',
                       figsize: Tuple[float, float] = (8, 6),
                       style: str = 'seaborn-v0_8-whitegrid',
                       save_path: Optional[str] = None):
    """
    Peak signal against swept concentration, concentration axis in nM.

    Args:
        table (pd.DataFrame): Output of ec50_sweep or ic50_sweep
        xlabel (str): Concentration axis label
        title (str): Plot title
        half_max (float, optional): EC50/IC50 in M, drawn as a vertical line
        fmt (str): Matplotlib line format
    """
    plt.style.use(style)
    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.semilogx(table['concentration'] * NANOMOLAR, table['max_signal'], fmt, lw=2, markersize=8)
    if half_max is not None:
        ax.axvline(half_max * NANOMOLAR, color='gray', linestyle='--', label=f"{half_max * NANOMOLAR:.2f} nM")
        ax.legend(loc='best')
    ax.set_yscale('log')
    ax.set_xlabel(xlabel, fontsize=14)
    ax.set_ylabel("Max Signal [M]", fontsize=14)
    ax.set_title(title, fontsize=16)
    ax.grid(True, which='both', linestyle='--', linewidth=0.5)
    return _finish(fig, save_path)


def plot_robustness(table: pd.DataFrame, parameter_name: str,
                    figsize: Tuple[float, float] = (12, 6),
                    style: str = 'seaborn-v0_8-whitegrid',
                    save_path: Optional[str] = None):
    """
    Effect of one rate constant on the ON and mean OFF signals and on their ratio.

    Args:
        table (pd.DataFrame): Output of robustness_sweep
        parameter_name (str): Name of the swept rate constant
    """
    plt.style.use(style)
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    ax1.loglog(table['value'], table['on_signal'], 'g-o', lw=2, markersize=8, label='ON signal (1,1,0)')
    ax1.loglog(table['value'], table['avg_off'], 'r-x', lw=2, markersize=8, label='Mean OFF signal')
    ax1.set_xlabel(parameter_name, fontsize=12)
    ax1.set_ylabel("Max Signal [M]", fontsize=12)
    ax1.set_title(f"Effect of {parameter_name} on ON vs OFF signal", fontsize=14)
    ax1.legend(loc='best')
    ax1.grid(True, which='both', linestyle='--', linewidth=0.5)

    ax2.loglog(table['value'], table['on_off_ratio'], 'b-d', lw=2, markersize=8)
    ax2.set_xlabel(parameter_name, fontsize=12)
    ax2.set_ylabel("ON/OFF Ratio", fontsize=12)
    ax2.set_title(f"Effect of {parameter_name} on ON/OFF ratio", fontsize=14)
    ax2.grid(True, which='both', linestyle='--', linewidth=0.5)
    return _finish(fig, save_path)
