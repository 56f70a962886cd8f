"""
ODE simulation utilities.

This module provides deterministic simulation capabilities using the
implicit, adaptive ODE solvers from SciPy. Reaction networks of molecular
circuits are stiff (concentrations range from zero to micromolar and binding
transients are fast), so only implicit variable-step methods are accepted.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.integrate import solve_ivp

from ..core.exceptions import ConfigurationError, IntegrationError

logger = logging.getLogger(__name__)

STIFF_METHODS = ('BDF', 'LSODA', 'Radau')


@dataclass(frozen=True)
class SolverOptions:
    """
    Settings of the stiff integrator.

    Attributes:
        atol (float): Absolute tolerance. Tiny because concentrations are molar.
        rtol (float): Relative tolerance.
        max_step (float): Upper bound on the step size [s].
        method (str): One of 'BDF' (variable order 1-5), 'LSODA' or 'Radau'.
        n_points (int, optional): Number of evenly spaced output samples.
            None keeps the solver's own steps.
    """

    atol: float = 1e-20
    rtol: float = 1e-12
    max_step: float = 0.5
    method: str = 'BDF'
    n_points: Optional[int] = 1001

    def __post_init__(self):
        if self.method not in STIFF_METHODS:
            raise ConfigurationError(f"Solver method must be one of {STIFF_METHODS}, got '{self.method}'")
        if self.atol <= 0 or self.rtol <= 0:
            raise ConfigurationError("Solver tolerances must be positive")
        if self.max_step <= 0:
            raise ConfigurationError("max_step must be positive")
        if self.n_points is not None and self.n_points < 2:
            raise ConfigurationError("n_points must be at least 2")

    def with_overrides(self, **kwargs) -> "SolverOptions":
        return replace(self, **kwargs)


@dataclass(frozen=True, eq=False)
class Trajectory:
    """
    Time series of one integration.

    Attributes:
        t (np.ndarray): Sample times, shape (n_times,)
        y (np.ndarray): Concentrations, shape (n_species, n_times)
        species_names (Tuple[str, ...]): Row labels of ``y``
    """

    t: np.ndarray
    y: np.ndarray
    species_names: Tuple[str, ...]

    def __contains__(self, name: str) -> bool:
        return name in self.species_names

    def __getitem__(self, name: str) -> np.ndarray:
        try:
            return self.y[self.species_names.index(name)]
        except ValueError:
            raise KeyError(f"Species '{name}' not in trajectory") from None

    def __len__(self) -> int:
        return len(self.t)

    def clamped(self) -> "Trajectory":
        """Copy with negative samples (numerical noise) set to zero."""
        return Trajectory(self.t.copy(), np.clip(self.y, 0.0, None), self.species_names)

    def to_frame(self) -> pd.DataFrame:
        """Trajectory as a DataFrame with a 'time' column and one column per species."""
        df = pd.DataFrame(self.y.T, columns=list(self.species_names))
        df.insert(0, 'time', self.t)
        return df


@dataclass(frozen=True)
class IntegrationResult:
    """
    Outcome of :func:`integrate`: either a trajectory or a solver diagnostic.

    Attributes:
        success (bool): Whether the solver reached the horizon
        trajectory (Trajectory, optional): The raw solution when successful
        message (str): The solver's message
        status (int, optional): The solver's status code
    """

    success: bool
    trajectory: Optional[Trajectory] = None
    message: str = ""
    status: Optional[int] = None

    def unwrap(self) -> Trajectory:
        """Return the trajectory or raise IntegrationError with the solver diagnostic."""
        if not self.success:
            raise IntegrationError(self.message, self.status)
        return self.trajectory


def integrate(derivative_fn: Callable, initial_state: Sequence[float], horizon: float,
              options: Optional[SolverOptions] = None, params: Sequence[float] = (),
              species_names: Optional[Sequence[str]] = None) -> IntegrationResult:
    """
    Integrate dy/dt = derivative_fn(t, y, *params) from t=0 to ``horizon``.

    If ``derivative_fn`` is a KineticsEvaluator its analytic Jacobian and species
    names are used automatically.

    Args:
        derivative_fn (Callable): Right-hand side f(t, y, *params)
        initial_state (Sequence[float]): Initial concentrations
        horizon (float): End time [s]
        options (SolverOptions, optional): Tolerances, step cap and method
        params (Sequence[float]): Extra arguments passed to the right-hand side
        species_names (Sequence[str], optional): Labels for the state vector

    Returns:
        IntegrationResult: Success with a trajectory, or failure with the solver's message
    """
    options = options or SolverOptions()
    if horizon <= 0:
        raise ConfigurationError(f"Integration horizon must be positive, got {horizon}")

    y0 = np.asarray(initial_state, dtype=float)
    if species_names is None:
        species_names = getattr(derivative_fn, 'species_names', None)
    if species_names is None:
        species_names = [f"x{i}" for i in range(len(y0))]

    t_eval = None
    if options.n_points is not None:
        t_eval = np.linspace(0.0, horizon, options.n_points)

    solution = solve_ivp(
        fun=derivative_fn,
        t_span=(0.0, horizon),
        y0=y0,
        method=options.method,
        t_eval=t_eval,
        args=tuple(params),
        jac=getattr(derivative_fn, 'jacobian', None),
        rtol=options.rtol,
        atol=options.atol,
        max_step=options.max_step,
    )

    if not solution.success:
        logger.debug("Solver failed with status %s: %s", solution.status, solution.message)
        return IntegrationResult(False, None, solution.message, solution.status)
    if not np.all(np.isfinite(solution.y)):
        return IntegrationResult(False, None, "Solution contains non-finite concentrations", solution.status)

    trajectory = Trajectory(solution.t, solution.y, tuple(species_names))
    logger.debug("Integrated %d species to t=%g in %d evaluations",
                 len(y0), horizon, solution.nfev)
    return IntegrationResult(True, trajectory, solution.message, solution.status)


def simulate_ode(system_model, t_span: Tuple[float, float], t_eval: Optional[np.ndarray] = None,
                 method: str = 'BDF', **kwargs) -> Dict[str, Any]:
    """
    Simulate a SystemModel using ODE integration.

    Args:
        system_model: The SystemModel to simulate
        t_span (Tuple[float, float]): Time span as (t_start, t_end)
        t_eval (np.ndarray, optional): Specific time points to evaluate.
            If None, uses 1000 evenly spaced points.
        method (str): Integration method for solve_ivp. Default is 'BDF'.
        **kwargs: Additional keyword arguments passed to solve_ivp

    Returns:
        Dict[str, Any]: Dictionary containing:
            - 'solution': The scipy.integrate.OdeResult object
            - 'sim_data': The lambdified ODE data from the system model
            - 'success': Boolean indicating if integration was successful
    """
    sim_data = system_model.lambdify_odes()

    if t_eval is None:
        t_eval = np.linspace(t_span[0], t_span[1], 1000)

    if method in STIFF_METHODS:
        kwargs.setdefault('jac', sim_data['jac'])

    solution = solve_ivp(
        fun=sim_data['func'],
        t_span=t_span,
        y0=sim_data['y0'],
        args=sim_data['params'],
        t_eval=t_eval,
        method=method,
        **kwargs
    )

    return {
        'solution': solution,
        'sim_data': sim_data,
        'success': solution.success
    }
