"""
Kinetics evaluation.

Turns the symbolic reaction network of a SystemModel into numerical functions
for the rate of change dy/dt = S . v(y, k) and its Jacobian. The compiled
functions depend only on the network structure, so one evaluator serves every
override of the same base model.
"""

import logging
from typing import List

import numpy as np
import sympy as sp

logger = logging.getLogger(__name__)


class KineticsEvaluator:
    """
    Numerical right-hand side of a reaction network.

    Args:
        model (SystemModel): The model whose structure is compiled

    Attributes:
        species_names (List[str]): Order of the state vector
        param_names (List[str]): Order of the rate constants
        S (np.ndarray): Stoichiometric matrix (num_species, num_reactions)
    """

    def __init__(self, model):
        self.model = model
        self.species_names: List[str] = list(model.species)
        self.param_names: List[str] = list(model.parameters)
        self.S = model.generate_stoichiometric_matrix()
        self._compiled = None

    @classmethod
    def from_model(cls, model) -> "KineticsEvaluator":
        """Build and compile an evaluator for ``model``."""
        evaluator = cls(model)
        evaluator.compile()
        return evaluator

    def compile(self):
        """Lambdify the ODE system, Jacobian and flux vector (idempotent)."""
        if self._compiled is not None:
            return
        sim_data = self.model.lambdify_odes()

        species_symbols = [s.symbol for s in self.model.species.values()]
        param_symbols = [p.symbol for p in self.model.parameters.values()]
        rate_laws = [rxn.rate_law for rxn in self.model.reactions]
        flux_func = sp.lambdify(species_symbols + param_symbols, rate_laws, 'numpy')

        self._compiled = {
            'func': sim_data['func'],
            'jac': sim_data['jac'],
            'flux': flux_func,
        }
        logger.debug("Compiled kinetics for '%s' (%d species, %d reactions)",
                     self.model.name, len(self.species_names), len(rate_laws))

    def is_compatible(self, model) -> bool:
        """True if ``model`` has the same species, parameters and reactions as the compiled one."""
        return (list(model.species) == self.species_names
                and list(model.parameters) == self.param_names
                and [r.name for r in model.reactions] == [r.name for r in self.model.reactions])

    def derivative(self, t: float, y: np.ndarray, *params) -> np.ndarray:
        """Rate of change of every species at state ``y``."""
        self.compile()
        return self._compiled['func'](t, y, *params)

    def jacobian(self, t: float, y: np.ndarray, *params) -> np.ndarray:
        """Jacobian of :meth:`derivative` with respect to ``y``."""
        self.compile()
        return self._compiled['jac'](t, y, *params)

    def fluxes(self, y: np.ndarray, *params) -> np.ndarray:
        """Per-reaction mass-action flux vector v(y, k)."""
        self.compile()
        if not self.model.reactions:
            return np.zeros(0)
        return np.asarray(self._compiled['flux'](*y, *params), dtype=float)

    __call__ = derivative

    def __repr__(self) -> str:
        return (f"KineticsEvaluator(model='{self.model.name}', "
                f"species={len(self.species_names)}, reactions={self.S.shape[1]})")
