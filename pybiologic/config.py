"""
Operating configuration.

Holds the values every analysis entry point needs (logical high/low input
concentrations, simulation horizons, solver settings, worker count). A
configuration is an explicit, immutable value passed to each call; it can be
read from YAML and overridden field by field.
"""

from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .core.exceptions import ConfigurationError
from .simulation.ode import SolverOptions

_FLOAT_FIELDS = ("conc_high", "conc_low", "stop_time", "dynamics_time", "dose_response_time")
_SOLVER_FLOAT_FIELDS = ("atol", "rtol", "max_step")


def _coerce(name: str, value: Any, float_fields) -> Any:
    if name in float_fields and value is not None:
        return float(value)
    return value


@dataclass(frozen=True)
class OperatingConfig:
    """
    Fixed operating parameters of the gate analysis.

    Attributes:
        conc_high (float): Concentration representing logical 1 [M]
        conc_low (float): Concentration representing logical 0 [M]
        stop_time (float): Default integration horizon [s]
        dynamics_time (float): Horizon of the response-time analysis [s]
        dose_response_time (float): Horizon of the EC50/IC50 sweeps [s]
        solver (SolverOptions): Integrator settings
        n_jobs (int): joblib worker count for sweeps (1 runs sequentially)
        signal_species (str): Name of the output species
    """

    conc_high: float = 1e-6
    conc_low: float = 0.0
    stop_time: float = 50.0
    dynamics_time: float = 20.0
    dose_response_time: float = 30.0
    solver: SolverOptions = field(default_factory=SolverOptions)
    n_jobs: int = 1
    signal_species: str = "Signal"

    def __post_init__(self):
        if self.conc_high <= 0:
            raise ConfigurationError(f"conc_high must be positive, got {self.conc_high}")
        if self.conc_low < 0 or self.conc_low >= self.conc_high:
            raise ConfigurationError(f"conc_low must be in [0, conc_high), got {self.conc_low}")
        for name in ("stop_time", "dynamics_time", "dose_response_time"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        if self.n_jobs == 0:
            raise ConfigurationError("n_jobs must be non-zero")

    def level(self, bit: int) -> float:
        """Concentration encoding a logical bit."""
        return self.conc_high if bit else self.conc_low

    def with_overrides(self, **kwargs) -> "OperatingConfig":
        """Copy with the given fields replaced; ``None`` values are ignored."""
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OperatingConfig":
        """
        Build a configuration from a mapping, e.g. a parsed YAML document.

        The optional ``solver`` entry is a mapping of SolverOptions fields.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {unknown}")

        values = dict(data)
        solver = values.pop("solver", None) or {}
        if not isinstance(solver, Mapping):
            raise ConfigurationError("'solver' must be a mapping")
        solver_known = {f.name for f in fields(SolverOptions)}
        unknown = sorted(set(solver) - solver_known)
        if unknown:
            raise ConfigurationError(f"Unknown solver keys: {unknown}")
        try:
            # YAML 1.1 reads exponents without a dot (1e-6) as strings
            values = {k: _coerce(k, v, _FLOAT_FIELDS) for k, v in values.items()}
            solver = {k: _coerce(k, v, _SOLVER_FLOAT_FIELDS) for k, v in solver.items()}
            return cls(solver=SolverOptions(**solver), **values)
        except (TypeError, ValueError) as e:
            if isinstance(e, ConfigurationError):
                raise
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "OperatingConfig":
        path = Path(path)
        if not path.is_file():
            raise ConfigurationError(f"Configuration file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not parse {path}: {e}") from e
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Configuration file {path} does not contain a mapping")
        return cls.from_dict(data)
