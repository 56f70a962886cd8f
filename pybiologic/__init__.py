"""
PyBiologic: deterministic simulation and analysis of molecular logic circuits.

This library provides tools for:
- Defining reaction networks of nucleic-acid strand-displacement gates
- Integrating their stiff mass-action kinetics
- Verifying logic behaviour (truth table, ON/OFF ratio, EC50/IC50, robustness)
- Exporting and plotting the results

Main classes:
    Species: A molecular species with an initial concentration and a role
    Parameter: A named rate constant
    SystemModel: Container for a complete reaction network
    MassActionReaction: Reaction with mass-action kinetics

Simulation:
    KineticsEvaluator: Compiled rate-of-change function of a model
    integrate: Stiff ODE integration returning an IntegrationResult
    Scenario, run_scenario: One configuration of a base model

Analysis:
    truth_table_sweep, ec50_sweep, ic50_sweep, leak_sweep, crosstalk_sweep
    run_full_analysis: Everything above plus the derived-metric report
"""

from .core.exceptions import (PyBiologicError, ModelLoadError, ConfigurationError,
                              IntegrationError, SignalNotFoundError)
from .core.models import Role, Species, Parameter, SystemModel
from .core.reactions import Reaction, MassActionReaction
from .core.loader import load_model, model_to_dict
from .simulation import (KineticsEvaluator, SolverOptions, Trajectory, IntegrationResult,
                         integrate, simulate_ode, Scenario, run_scenario)
from .config import OperatingConfig
from .circuits import load_circuit, logic_scenario, gate_scenario
from .analysis import (Label, classify, MetricReport, truth_table_sweep, ec50_sweep, ic50_sweep,
                       on_off_ratio_under_override, robustness_sweep, leak_sweep, crosstalk_sweep,
                       response_dynamics, run_full_analysis)

__version__ = "0.1.0"

__all__ = [
    # Errors
    "PyBiologicError",
    "ModelLoadError",
    "ConfigurationError",
    "IntegrationError",
    "SignalNotFoundError",

    # Core classes
    "Role",
    "Species",
    "Parameter",
    "SystemModel",
    "Reaction",
    "MassActionReaction",
    "load_model",
    "model_to_dict",

    # Simulation
    "KineticsEvaluator",
    "SolverOptions",
    "Trajectory",
    "IntegrationResult",
    "integrate",
    "simulate_ode",
    "Scenario",
    "run_scenario",

    # Circuit and configuration
    "OperatingConfig",
    "load_circuit",
    "logic_scenario",
    "gate_scenario",

    # Analysis
    "Label",
    "classify",
    "MetricReport",
    "truth_table_sweep",
    "ec50_sweep",
    "ic50_sweep",
    "on_off_ratio_under_override",
    "robustness_sweep",
    "leak_sweep",
    "crosstalk_sweep",
    "response_dynamics",
    "run_full_analysis",
]
