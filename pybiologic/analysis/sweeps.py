"""
Sweep orchestration.

Drives batches of independent scenario runs (truth table, dose-response,
leak and crosstalk stress tests) and collects the peak signals into pandas
tables. Every batch is dispatched through joblib; results come back in
submission order, so tables are identical for any worker count.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ..circuits import CROSSTALK_PARAMETER, INPUT_SPECIES, LEAK_PARAMETER, gate_scenario, logic_scenario
from ..config import OperatingConfig
from ..core.exceptions import ConfigurationError
from ..simulation.kinetics import KineticsEvaluator
from ..simulation.ode import Trajectory
from ..simulation.scenario import Scenario, run_scenario
from . import metrics
from .metrics import Label, classify
from .report import MetricReport

logger = logging.getLogger(__name__)

# Binary input combinations (miR21, miR155, miR34) in order 000 ... 111
COMBINATIONS: List[Tuple[int, int, int]] = list(itertools.product((0, 1), repeat=3))
ON_COMBINATION = (1, 1, 0)
NON_ON_COMBINATIONS = [c for c in COMBINATIONS if classify(c) is not Label.ON]

EC50_CONCENTRATIONS = np.logspace(-9, -5, 10)   # 1 nM to 10 uM
IC50_CONCENTRATIONS = np.logspace(-10, -5, 20)  # 100 pM to 10 uM
LEAK_VALUES = np.logspace(-8, -2, 20)
CROSSTALK_VALUES = np.logspace(1, 8, 20)


def _peak_signal(model, scenario: Scenario, evaluator: KineticsEvaluator, signal_species: str) -> float:
    return run_scenario(model, scenario, evaluator=evaluator, signal_species=signal_species)[1]


def run_batch(model, scenarios: Sequence[Scenario], config: OperatingConfig,
              evaluator: Optional[KineticsEvaluator] = None) -> List[float]:
    """
    Peak signal of each scenario, in the order given.

    Scenarios share nothing but the read-only base model and the compiled
    kinetics, so they are dispatched as independent joblib tasks on a thread
    pool. The first failure aborts the batch.

    Args:
        model (SystemModel): Base model
        scenarios (Sequence[Scenario]): Scenarios to run
        config (OperatingConfig): Supplies ``n_jobs`` and the signal species
        evaluator (KineticsEvaluator, optional): Compiled kinetics of ``model``

    Returns:
        List[float]: Peak signal per scenario
    """
    if evaluator is None:
        evaluator = KineticsEvaluator.from_model(model)
    tasks = (delayed(_peak_signal)(model, s, evaluator, config.signal_species) for s in scenarios)
    return list(Parallel(n_jobs=config.n_jobs, prefer="threads")(tasks))


def _check_parameters(model, names) -> None:
    unknown = sorted(set(names) - set(model.parameters))
    if unknown:
        raise ConfigurationError(f"Unknown parameters for sweep on '{model.name}': {unknown}")


def truth_table_sweep(model, config: OperatingConfig,
                      parameter_overrides: Optional[Mapping[str, float]] = None,
                      evaluator: Optional[KineticsEvaluator] = None) -> pd.DataFrame:
    """
    Simulate all 8 binary input combinations at the configured high/low levels.

    Returns:
        pd.DataFrame: One row per combination with columns
            miR21, miR155, miR34 (logical levels), max_signal, label
    """
    logger.info("Testing all %d input combinations", len(COMBINATIONS))
    scenarios = [logic_scenario(c, config, parameter_overrides) for c in COMBINATIONS]
    peaks = run_batch(model, scenarios, config, evaluator)

    rows = []
    for combination, peak in zip(COMBINATIONS, peaks):
        row = dict(zip(INPUT_SPECIES, combination))
        row['max_signal'] = peak
        row['label'] = classify(combination).value
        rows.append(row)
    return pd.DataFrame(rows, columns=list(INPUT_SPECIES) + ['max_signal', 'label'])


def ec50_sweep(model, config: OperatingConfig, concentrations: Optional[Sequence[float]] = None,
               evaluator: Optional[KineticsEvaluator] = None) -> pd.DataFrame:
    """
    Activation curve: miR21 and miR155 co-varied, miR34 held at the low level.

    Returns:
        pd.DataFrame: Columns concentration [M], max_signal
    """
    concentrations = EC50_CONCENTRATIONS if concentrations is None else np.asarray(concentrations, dtype=float)
    logger.info("EC50 sweep over %d concentrations", len(concentrations))
    scenarios = [gate_scenario(c, c, config.conc_low, config, horizon=config.dose_response_time)
                 for c in concentrations]
    peaks = run_batch(model, scenarios, config, evaluator)
    return pd.DataFrame({'concentration': concentrations, 'max_signal': peaks})


def ic50_sweep(model, config: OperatingConfig, concentrations: Optional[Sequence[float]] = None,
               evaluator: Optional[KineticsEvaluator] = None) -> pd.DataFrame:
    """
    Inhibition curve: miR34 varied, miR21 and miR155 held at the high level.

    Returns:
        pd.DataFrame: Columns concentration [M], max_signal
    """
    concentrations = IC50_CONCENTRATIONS if concentrations is None else np.asarray(concentrations, dtype=float)
    logger.info("IC50 sweep over %d inhibitor concentrations", len(concentrations))
    scenarios = [gate_scenario(config.conc_high, config.conc_high, c, config, horizon=config.dose_response_time)
                 for c in concentrations]
    peaks = run_batch(model, scenarios, config, evaluator)
    return pd.DataFrame({'concentration': concentrations, 'max_signal': peaks})


def _on_off_scenarios(config: OperatingConfig, overrides: Optional[Mapping[str, float]]) -> List[Scenario]:
    return [logic_scenario(c, config, overrides) for c in [ON_COMBINATION] + NON_ON_COMBINATIONS]


def on_off_ratio_under_override(model, config: OperatingConfig,
                                overrides: Optional[Mapping[str, float]] = None,
                                evaluator: Optional[KineticsEvaluator] = None) -> Tuple[float, float, float]:
    """
    Re-simulate the ON combination and the seven others under parameter overrides.

    Returns:
        Tuple[float, float, float]: ON peak, mean non-ON peak, ON/OFF ratio
    """
    _check_parameters(model, (overrides or {}).keys())
    peaks = run_batch(model, _on_off_scenarios(config, overrides), config, evaluator)
    return metrics.on_off_summary(peaks[:1], peaks[1:])


def robustness_sweep(model, config: OperatingConfig, parameter: str, values: Sequence[float],
                     evaluator: Optional[KineticsEvaluator] = None) -> pd.DataFrame:
    """
    ON/OFF ratio as a function of one rate constant.

    Each row is :func:`on_off_ratio_under_override` for ``{parameter: value}``:
    both build their runs with ``_on_off_scenarios`` and summarize them with
    :func:`metrics.on_off_summary`. Here all (value, combination) pairs go into
    a single batch, so every run shares one worker pool, and are regrouped by
    index.

    Returns:
        pd.DataFrame: Columns value, on_signal, avg_off, on_off_ratio
    """
    _check_parameters(model, [parameter])
    values = np.asarray(values, dtype=float)
    logger.info("Robustness sweep of '%s' over %d values", parameter, len(values))

    scenarios = []
    for value in values:
        scenarios.extend(_on_off_scenarios(config, {parameter: value}))
    peaks = run_batch(model, scenarios, config, evaluator)

    per_value = 1 + len(NON_ON_COMBINATIONS)
    rows = []
    for i, value in enumerate(values):
        chunk = peaks[i * per_value:(i + 1) * per_value]
        on_signal, avg_off, ratio = metrics.on_off_summary(chunk[:1], chunk[1:])
        rows.append({'value': value, 'on_signal': on_signal, 'avg_off': avg_off, 'on_off_ratio': ratio})
    return pd.DataFrame(rows, columns=['value', 'on_signal', 'avg_off', 'on_off_ratio'])


def leak_sweep(model, config: OperatingConfig, values: Optional[Sequence[float]] = None,
               evaluator: Optional[KineticsEvaluator] = None) -> pd.DataFrame:
    """Stress test of the signal leak from the half-open gate."""
    return robustness_sweep(model, config, LEAK_PARAMETER,
                            LEAK_VALUES if values is None else values, evaluator)


def crosstalk_sweep(model, config: OperatingConfig, values: Optional[Sequence[float]] = None,
                    evaluator: Optional[KineticsEvaluator] = None) -> pd.DataFrame:
    """Stress test of the off-target miR21/miR155 duplex."""
    return robustness_sweep(model, config, CROSSTALK_PARAMETER,
                            CROSSTALK_VALUES if values is None else values, evaluator)


@dataclass
class ResponseDynamics:
    """ON-state time course and its response times."""

    trajectory: Trajectory
    max_signal: float
    t50: Optional[float]
    t90: Optional[float]


def response_dynamics(model, config: OperatingConfig,
                      evaluator: Optional[KineticsEvaluator] = None) -> ResponseDynamics:
    """Simulate the ON combination over ``config.dynamics_time`` and extract t50/t90."""
    scenario = logic_scenario(ON_COMBINATION, config, horizon=config.dynamics_time)
    trajectory, max_signal = run_scenario(model, scenario, evaluator=evaluator,
                                          signal_species=config.signal_species)
    signal = trajectory[config.signal_species]
    dynamics = ResponseDynamics(trajectory, max_signal,
                                metrics.t50(trajectory.t, signal), metrics.t90(trajectory.t, signal))
    if dynamics.t50 is not None:
        logger.info("Time to 50%% of max signal (t50): %.3f s", dynamics.t50)
    if dynamics.t90 is not None:
        logger.info("Time to 90%% of max signal (t90): %.3f s", dynamics.t90)
    return dynamics


@dataclass
class AnalysisResults:
    """Every table and metric produced by :func:`run_full_analysis`."""

    truth_table: pd.DataFrame
    dynamics: ResponseDynamics
    ec50_table: pd.DataFrame
    ic50_table: pd.DataFrame
    report: MetricReport
    leak_table: Optional[pd.DataFrame] = None
    crosstalk_table: Optional[pd.DataFrame] = None

    def tables(self) -> Dict[str, pd.DataFrame]:
        tables = {
            'truth_table': self.truth_table,
            'ec50': self.ec50_table,
            'ic50': self.ic50_table,
            'response': self.dynamics.trajectory.to_frame(),
        }
        if self.leak_table is not None:
            tables['robustness_leak'] = self.leak_table
        if self.crosstalk_table is not None:
            tables['robustness_crosstalk'] = self.crosstalk_table
        return tables


def run_full_analysis(model, config: OperatingConfig, include_robustness: bool = True) -> AnalysisResults:
    """
    Truth table, response dynamics, EC50/IC50 and (optionally) robustness sweeps.

    The model's kinetics are compiled once and shared by every batch.
    """
    evaluator = KineticsEvaluator.from_model(model)

    truth_table = truth_table_sweep(model, config, evaluator=evaluator)
    dynamics = response_dynamics(model, config, evaluator=evaluator)
    ec50_table = ec50_sweep(model, config, evaluator=evaluator)
    ic50_table = ic50_sweep(model, config, evaluator=evaluator)

    report = MetricReport(
        t50=dynamics.t50,
        t90=dynamics.t90,
        ec50=metrics.ec50(ec50_table['concentration'], ec50_table['max_signal']),
        ic50=metrics.ic50(ic50_table['concentration'], ic50_table['max_signal']),
        on_off_ratio=metrics.on_off_ratio(truth_table),
        inhibition_efficiency=metrics.inhibition_efficiency(truth_table),
    )
    inconsistent = truth_table[~metrics.label_consistency(truth_table)]
    for _, row in inconsistent.iterrows():
        logger.warning("Combination %d%d%d: max signal %.3e does not match expected state %s",
                       row['miR21'], row['miR155'], row['miR34'], row['max_signal'], row['label'])

    results = AnalysisResults(truth_table, dynamics, ec50_table, ic50_table, report)
    if include_robustness:
        results.leak_table = leak_sweep(model, config, evaluator=evaluator)
        results.crosstalk_table = crosstalk_sweep(model, config, evaluator=evaluator)
    return results
