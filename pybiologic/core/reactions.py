"""
Reaction classes

This module defines reaction types that can be added to a SystemModel:
- Reaction: Abstract base holding reactants, products and a rate parameter
- MassActionReaction: Standard mass-action kinetics
"""

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Dict, Mapping

import sympy as sp

from .models import Parameter, Species


def _format_side(side: Mapping[Species, int]) -> str:
    if not side:
        return "0"
    return " + ".join(f"{stoich if stoich != 1 else ''}{species.name}" for species, stoich in side.items())


class Reaction(ABC):
    """
    Base class for a reaction between species.

    Reactants and products are stored as read-only mappings so a reaction
    cannot change once it has been added to a model.

    Args:
        name (str): Unique reaction name
        reactants (Dict[Species, int]): Consumed species and their stoichiometry
        products (Dict[Species, int]): Produced species and their stoichiometry
        rate (Parameter): The rate constant
    """

    def __init__(self, name: str, reactants: Dict[Species, int], products: Dict[Species, int],
                 rate: Parameter):
        for species, stoich in list(reactants.items()) + list(products.items()):
            if stoich <= 0:
                raise ValueError(f"Stoichiometry of '{species.name}' in reaction '{name}' must be positive")
        self.name = name
        self.reactants = MappingProxyType(dict(reactants))
        self.products = MappingProxyType(dict(products))
        self.rate = rate
        self.rate_law = self._generate_rate_law()

    @abstractmethod
    def _generate_rate_law(self) -> sp.Expr:
        """Build the symbolic rate law of the reaction."""

    def __repr__(self) -> str:
        return (f"{type(self).__name__}('{self.name}': "
                f"{_format_side(self.reactants)} -> {_format_side(self.products)}, "
                f"rate={self.rate.name})")


class MassActionReaction(Reaction):
    """
    Reaction following mass-action kinetics: rate = k * prod([R_i] ** nu_i).

    A reaction without reactants is zero order (constant flux k).
    """

    def _generate_rate_law(self) -> sp.Expr:
        rate_law = self.rate.symbol
        for species, stoich in self.reactants.items():
            rate_law = rate_law * species.symbol ** stoich
        return rate_law
