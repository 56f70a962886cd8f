"""
Shared fixtures.

The gate model and its compiled kinetics are built once per session. The
solver settings are looser than the production defaults to keep the suite
quick; the gate's ON and OFF levels are separated by orders of magnitude,
so the assertions do not depend on the last digits.
"""

import pytest

from pybiologic.circuits import load_circuit
from pybiologic.config import OperatingConfig
from pybiologic.core.models import Parameter, Species, SystemModel
from pybiologic.core.reactions import MassActionReaction
from pybiologic.simulation.kinetics import KineticsEvaluator
from pybiologic.simulation.ode import SolverOptions


@pytest.fixture(scope="session")
def gate_model():
    return load_circuit()


@pytest.fixture(scope="session")
def gate_evaluator(gate_model):
    return KineticsEvaluator.from_model(gate_model)


@pytest.fixture(scope="session")
def fast_config():
    return OperatingConfig(solver=SolverOptions(atol=1e-18, rtol=1e-8, n_points=401))


@pytest.fixture
def decay_model():
    """A -> 0 with k = 0.5, A(0) = 2."""
    model = SystemModel("decay")
    a = Species('A', initial_condition=2.0)
    k = Parameter('k', default_value=0.5)
    model.add_species(a).add_parameter(k)
    model.add_reaction(MassActionReaction('decay', reactants={a: 1}, products={}, rate=k))
    return model


@pytest.fixture
def binding_model():
    """A + B -> C, C -> D. D is the output species."""
    model = SystemModel("binding")
    a = Species('A', initial_condition=1.0, role='input')
    b = Species('B', initial_condition=1.0, role='input')
    c = Species('C')
    d = Species('D', role='signal')
    k_on = Parameter('k_on', default_value=2.0)
    k_out = Parameter('k_out', default_value=0.5)
    for s in (a, b, c, d):
        model.add_species(s)
    model.add_parameter(k_on).add_parameter(k_out)
    model.add_reaction(MassActionReaction('bind', reactants={a: 1, b: 1}, products={c: 1}, rate=k_on))
    model.add_reaction(MassActionReaction('output', reactants={c: 1}, products={d: 1}, rate=k_out))
    return model
