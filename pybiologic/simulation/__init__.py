"""
Contains the deterministic simulation engine for reaction networks:
- Kinetics: numerical rate-of-change and Jacobian of a model
- ODE: stiff integration into trajectories
- Scenario: per-run overlays of a base model
"""

from .kinetics import KineticsEvaluator
from .ode import SolverOptions, Trajectory, IntegrationResult, integrate, simulate_ode
from .scenario import Scenario, run_scenario, SIGNAL_SPECIES

__all__ = [
    "KineticsEvaluator",
    "SolverOptions",
    "Trajectory",
    "IntegrationResult",
    "integrate",
    "simulate_ode",
    "Scenario",
    "run_scenario",
    "SIGNAL_SPECIES",
]
