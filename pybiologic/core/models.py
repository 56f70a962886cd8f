"""
Core model classes

This module contains the fundamental building blocks for reaction-network modeling:
- Species: Represents molecular entities (miRNA inputs, gate complexes, signal)
- Parameter: Represents named rate constants with values
- SystemModel: Container class for a complete well-mixed reaction network
"""

import copy
from enum import Enum
from typing import Dict, List, Mapping, Optional, Set

import networkx as nx
import numpy as np
import sympy as sp
from sympy.core.symbol import Symbol

from .exceptions import ConfigurationError

# Define global time symbol
t = sp.Symbol('t', positive=True)


class Role(str, Enum):
    """Role a species plays in a molecular circuit."""

    INPUT = "input"
    GATE = "gate"
    SIGNAL = "signal"


class Parameter:
    """
    A named rate constant with a symbolic representation and a default value.
    """

    def __init__(self, name: str, default_value: float = None, **kwargs):
        """
        Initialize a Parameter.

        Args:
            name (str): The parameter name
            default_value (float, optional): Default value for the parameter
            **kwargs: Additional arguments passed to sympy.Symbol
        """
        self.name = name
        self.symbol = sp.Symbol(name, **kwargs)
        self.default_value = default_value

    def get_symbol(self) -> Symbol:
        """Get the symbolic representation of the parameter."""
        return self.symbol

    def get_default_value(self) -> float:
        """Get the default value, raising an error if not set."""
        if self.default_value is None:
            raise ValueError(f"No default value for '{self.name}'")
        return self.default_value

    def with_value(self, value: float) -> "Parameter":
        """Return a copy of this parameter sharing its symbol but holding a new value."""
        clone = copy.copy(self)
        clone.default_value = float(value)
        return clone

    def __repr__(self) -> str:
        return f"Parameter('{self.name}', default={self.default_value})"


class Species:
    """
    Represents a species in a model, holding its symbolic representation,
    an initial concentration and the role it plays in the circuit.
    """

    def __init__(self, name: str, initial_condition: float = 0.0, role: Role = Role.GATE, **kwargs):
        """
        Initialize a Species.

        Args:
            name (str): The name of the species (e.g., 'miR21', 'Signal')
            initial_condition (float, optional): Starting concentration [M]. Defaults to 0.0
            role (Role, optional): Input miRNA, gate/intermediate complex or signal output
            **kwargs: Additional keyword arguments passed to sympy.Function (e.g., positive=True)
        """
        if initial_condition < 0:
            raise ValueError(f"Initial condition of '{name}' must be non-negative, got {initial_condition}")
        self.name = name
        # Represent the species as a function of time, e.g., x(t), which is ideal for ODEs
        self.symbol = sp.Function(name, **kwargs)(t)
        self.initial_condition = float(initial_condition)
        self.role = Role(role)

    def with_initial_condition(self, value: float) -> "Species":
        """Return a copy of this species sharing its symbol but starting at ``value``."""
        if value < 0:
            raise ValueError(f"Initial condition of '{self.name}' must be non-negative, got {value}")
        clone = copy.copy(self)
        clone.initial_condition = float(value)
        return clone

    def __repr__(self) -> str:
        """Provides a clear string representation of the Species object."""
        return (f"Species('{self.name}', initial_condition={self.initial_condition}, "
                f"role='{self.role.value}')")

    # --- Methods for NetworkX compatibility ---

    def __hash__(self):
        """Allows the object to be used as a key in a dictionary or a node in a graph."""
        return hash(self.name)

    def __eq__(self, other):
        """Defines equality based on the unique species name."""
        if not isinstance(other, Species):
            return NotImplemented
        return self.name == other.name


class SystemModel:
    """
    A class to build and represent a system of interacting species using a network graph.

    A model is assembled once with the builder methods and treated as read-only
    afterwards. Per-run variants are produced with :meth:`override`, which returns
    a lightweight overlay sharing the reactions and graph of its base.
    """

    def __init__(self, name: str):
        """
        Initialize a SystemModel.

        Args:
            name (str): Name of the reaction network
        """
        self.name = name
        self.graph = nx.DiGraph()
        self.species: Dict[str, Species] = {}
        self.parameters: Dict[str, Parameter] = {}
        self.reactions: List = []  # Will contain Reaction objects
        self._read_only = False

    def _check_mutable(self):
        if self._read_only:
            raise ValueError(f"Model '{self.name}' is an override of a base model and cannot be modified.")

    def add_species(self, species: Species):
        """
        Add a species to the model, creating a node in the graph.

        Args:
            species (Species): The species to add

        Returns:
            SystemModel: Self for method chaining
        """
        self._check_mutable()
        if species.name in self.species:
            raise ValueError(f"Species '{species.name}' already exists in the model.")
        self.species[species.name] = species
        self.graph.add_node(species, label=species.name)
        return self

    def add_parameter(self, parameter: Parameter):
        """
        Add a parameter to the model.

        Args:
            parameter (Parameter): The parameter to add

        Returns:
            SystemModel: Self for method chaining
        """
        self._check_mutable()
        if parameter.name in self.parameters:
            raise ValueError(f"Parameter '{parameter.name}' already exists in the model.")
        self.parameters[parameter.name] = parameter
        return self

    def add_reaction(self, reaction):
        """
        Add a reaction to the model, creating edges in the graph.
        An edge from A to B means that reactant A is involved in a reaction that produces B.

        Args:
            reaction: The reaction to add (must have reactants, products, rate and name attributes)

        Returns:
            SystemModel: Self for method chaining
        """
        self._check_mutable()
        for species in list(reaction.reactants) + list(reaction.products):
            if species.name not in self.species:
                raise ValueError(f"Reaction '{reaction.name}' references undefined species '{species.name}'.")
        if reaction.rate.name not in self.parameters:
            raise ValueError(f"Reaction '{reaction.name}' references undefined parameter '{reaction.rate.name}'.")

        self.reactions.append(reaction)
        # An edge (u, v) means species u influences the abundance of species v
        for reactant in reaction.reactants:
            for product in reaction.products:
                if self.graph.has_edge(reactant, product):
                    self.graph.edges[reactant, product]['reactions'].append(reaction.name)
                else:
                    self.graph.add_edge(reactant, product, reactions=[reaction.name])
        return self

    def override(self, initial_conditions: Optional[Mapping[str, float]] = None,
                 parameters: Optional[Mapping[str, float]] = None) -> "SystemModel":
        """
        Create an independent variant of this model with selected values replaced.

        Only the overridden species and parameters are copied; reactions and the
        influence graph are shared with the base, which is left untouched.

        Args:
            initial_conditions (Mapping[str, float], optional): Species name -> initial concentration
            parameters (Mapping[str, float], optional): Parameter name -> value

        Returns:
            SystemModel: A read-only overlay of this model

        Raises:
            ConfigurationError: If a name is not defined in the model or a concentration is negative
        """
        initial_conditions = dict(initial_conditions or {})
        parameters = dict(parameters or {})

        unknown_species = sorted(set(initial_conditions) - set(self.species))
        if unknown_species:
            raise ConfigurationError(f"Unknown species in override of '{self.name}': {unknown_species}")
        unknown_params = sorted(set(parameters) - set(self.parameters))
        if unknown_params:
            raise ConfigurationError(f"Unknown parameters in override of '{self.name}': {unknown_params}")

        negative = sorted(name for name, value in initial_conditions.items() if value < 0)
        if negative:
            raise ConfigurationError(f"Negative initial concentration requested for: {negative}")

        overlay = SystemModel.__new__(SystemModel)
        overlay.name = self.name
        overlay.graph = self.graph.copy(as_view=True)
        overlay.reactions = list(self.reactions)
        overlay.species = {
            name: s.with_initial_condition(initial_conditions[name]) if name in initial_conditions else s
            for name, s in self.species.items()
        }
        overlay.parameters = {
            name: p.with_value(parameters[name]) if name in parameters else p
            for name, p in self.parameters.items()
        }
        overlay._read_only = True
        return overlay

    def initial_state(self) -> np.ndarray:
        """Initial concentrations in species order."""
        return np.array([s.initial_condition for s in self.species.values()], dtype=float)

    def parameter_values(self) -> tuple:
        """Parameter values in parameter order."""
        return tuple(p.get_default_value() for p in self.parameters.values())

    def species_names(self) -> List[str]:
        return list(self.species)

    def connected_species(self, name: str) -> Set[str]:
        """
        Names of all other species linked to ``name`` by any chain of reactions.

        Direction is ignored, so inhibitors that only sequester an upstream complex
        count as connected to the output.

        Args:
            name (str): Species name

        Returns:
            Set[str]: Species in the same connected component of the reaction graph
        """
        if name not in self.species:
            raise ConfigurationError(f"Species '{name}' not found in model '{self.name}'")
        component = nx.node_connected_component(self.graph.to_undirected(as_view=True), self.species[name])
        return {s.name for s in component} - {name}

    def generate_rate_vector(self) -> sp.Matrix:
        """
        Generate the symbolic rate vector where each element is the
        rate law for a reaction.

        Returns:
            sp.Matrix: Vector of rate laws
        """
        rate_laws = [rxn.rate_law for rxn in self.reactions]
        return sp.Matrix(rate_laws)

    def generate_stoichiometric_matrix(self) -> np.ndarray:
        """
        Generate the stoichiometric matrix S where S[i,j] is the change in
        species i due to reaction j.

        Returns:
            np.ndarray: Matrix of shape (num_species, num_reactions)
        """
        index = {name: i for i, name in enumerate(self.species)}
        S = np.zeros((len(self.species), len(self.reactions)), dtype=int)

        for j, reaction in enumerate(self.reactions):
            # Species consumed (negative stoichiometry)
            for species, stoich in reaction.reactants.items():
                S[index[species.name], j] -= stoich

            # Species produced (positive stoichiometry)
            for species, stoich in reaction.products.items():
                S[index[species.name], j] += stoich

        return S

    def generate_odes(self) -> Dict[Symbol, sp.Expr]:
        """
        Generate the system of Ordinary Differential Equations (ODEs)
        by multiplying the stoichiometric matrix S by the rate vector v.

        Returns:
            Dict[Symbol, sp.Expr]: Mapping from species symbols to ODE expressions
        """
        species_symbols = [s.symbol for s in self.species.values()]
        if not self.reactions:
            return {symbol: sp.Integer(0) for symbol in species_symbols}

        S = sp.Matrix(self.generate_stoichiometric_matrix())
        v = self.generate_rate_vector()

        # Each element of S * v is the right-hand side of one ODE
        dxdt_vector = S * v
        return {symbol: expr for symbol, expr in zip(species_symbols, dxdt_vector)}

    def generate_jacobian(self) -> sp.Matrix:
        """
        Generate the symbolic Jacobian of the ODE system with respect to the species.

        Returns:
            sp.Matrix: Matrix J where J[i, k] = d(dx_i/dt) / dx_k
        """
        species_symbols = [s.symbol for s in self.species.values()]
        odes = self.generate_odes()
        rhs = sp.Matrix([odes[s] for s in species_symbols])
        return rhs.jacobian(species_symbols)

    def lambdify_odes(self) -> Dict:
        """
        Convert the symbolic ODE system into numerical functions and return
        all necessary information for simulation in a dictionary.

        Returns:
            Dict: A dictionary containing:
            - 'func' (Callable): The numerical function f(t, y, *params).
            - 'jac' (Callable): The numerical Jacobian J(t, y, *params).
            - 'y0' (np.ndarray): The array of initial conditions.
            - 'params' (Tuple): A tuple of the default parameter values.
            - 'species_names' (List[str]): Ordered list of species names.
            - 'param_names' (List[str]): Ordered list of parameter names.
        """
        ordered_species = list(self.species.values())
        ordered_params = list(self.parameters.values())

        species_symbols = [s.symbol for s in ordered_species]
        param_symbols = [p.symbol for p in ordered_params]

        symbolic_odes = self.generate_odes()
        ode_expressions = [symbolic_odes[s] for s in species_symbols]

        lambda_func = sp.lambdify(species_symbols + param_symbols, ode_expressions, 'numpy')
        lambda_jac = sp.lambdify(species_symbols + param_symbols, self.generate_jacobian(), 'numpy')

        # Wrappers matching the standard f(t, y, *p) signature
        def ode_function(t, y, *p):
            return np.asarray(lambda_func(*y, *p), dtype=float)

        def jacobian_function(t, y, *p):
            return np.asarray(lambda_jac(*y, *p), dtype=float)

        return {
            'func': ode_function,
            'jac': jacobian_function,
            'y0': self.initial_state(),
            'params': self.parameter_values(),
            'species_names': [s.name for s in ordered_species],
            'param_names': [p.name for p in ordered_params],
        }

    def __repr__(self) -> str:
        return (f"SystemModel(name='{self.name}', "
                f"species={len(self.species)}, "
                f"parameters={len(self.parameters)}, "
                f"reactions={len(self.reactions)})")
