"""
The AND-NOT molecular classifier.

Signal = (miR21 AND miR155) AND NOT miR34

A toehold gate complex is opened by miR21, then completed by miR155 into the
signal-producing complex, which converts a reporter into fluorescent Signal.
miR34 sequesters both the half-open intermediate and the active complex. A
slow leak releases Signal from the half-open gate, consuming it, so each
opened gate reports at most once. The leak and an off-target miR21/miR155
duplex are the two imperfections exercised by the robustness sweeps. Rate
constants are the finished output of the sequence design step.

Concentrations are molar, time is in seconds.
"""

import logging
from typing import Dict, Mapping, Optional, Sequence

from .config import OperatingConfig
from .core.loader import ModelSource, load_model
from .core.models import Role, SystemModel
from .simulation.scenario import SIGNAL_SPECIES, Scenario

logger = logging.getLogger(__name__)

INPUT_SPECIES = ("miR21", "miR155", "miR34")
LEAK_PARAMETER = "k_leak_gate21"
CROSSTALK_PARAMETER = "k_cross_21_155"

AND_NOT_GATE = {
    "name": "biocomputer_and_not_gate",
    "species": [
        {"name": "miR21", "initial": 0.0, "role": "input"},
        {"name": "miR155", "initial": 0.0, "role": "input"},
        {"name": "miR34", "initial": 0.0, "role": "input"},
        {"name": "Gate", "initial": 2e-7, "role": "gate"},
        {"name": "Gate_miR21", "initial": 0.0, "role": "gate"},
        {"name": "Gate_active", "initial": 0.0, "role": "gate"},
        {"name": "Reporter", "initial": 4e-7, "role": "gate"},
        {"name": "Signal", "initial": 0.0, "role": "signal"},
        {"name": "Waste", "initial": 0.0, "role": "gate"},
        {"name": "Gate_blocked", "initial": 0.0, "role": "gate"},
        {"name": "Duplex_21_155", "initial": 0.0, "role": "gate"},
    ],
    "parameters": {
        "k_bind21": 1e6,         # 1/(M s), toehold-mediated opening by miR21
        "k_bind155": 1e6,        # 1/(M s), completion by miR155
        "k_report": 1e6,         # 1/(M s), reporter displacement
        "k_inhib34": 1e7,        # 1/(M s), sequestration by miR34
        "k_deg": 1e-3,           # 1/s, miRNA degradation
        LEAK_PARAMETER: 1e-4,    # 1/s, signal leak from the half-open gate
        CROSSTALK_PARAMETER: 1e2,  # 1/(M s), off-target miR21:miR155 duplex
    },
    "reactions": [
        {"name": "bind_miR21", "reactants": {"miR21": 1, "Gate": 1},
         "products": {"Gate_miR21": 1}, "rate": "k_bind21"},
        {"name": "bind_miR155", "reactants": {"Gate_miR21": 1, "miR155": 1},
         "products": {"Gate_active": 1}, "rate": "k_bind155"},
        {"name": "report", "reactants": {"Gate_active": 1, "Reporter": 1},
         "products": {"Signal": 1, "Waste": 1}, "rate": "k_report"},
        {"name": "inhibit_intermediate", "reactants": {"miR34": 1, "Gate_miR21": 1},
         "products": {"Gate_blocked": 1}, "rate": "k_inhib34"},
        {"name": "inhibit_active", "reactants": {"miR34": 1, "Gate_active": 1},
         "products": {"Gate_blocked": 1}, "rate": "k_inhib34"},
        {"name": "leak_gate21", "reactants": {"Gate_miR21": 1},
         "products": {"Signal": 1, "Waste": 1}, "rate": LEAK_PARAMETER},
        {"name": "crosstalk_21_155", "reactants": {"miR21": 1, "miR155": 1},
         "products": {"Duplex_21_155": 1}, "rate": CROSSTALK_PARAMETER},
        {"name": "degrade_miR21", "reactants": {"miR21": 1}, "products": {}, "rate": "k_deg"},
        {"name": "degrade_miR155", "reactants": {"miR155": 1}, "products": {}, "rate": "k_deg"},
        {"name": "degrade_miR34", "reactants": {"miR34": 1}, "products": {}, "rate": "k_deg"},
    ],
}


def load_circuit(source: Optional[ModelSource] = None, signal_species: str = SIGNAL_SPECIES) -> SystemModel:
    """
    Load an AND-NOT gate model.

    Args:
        source: Model mapping or JSON/YAML path. None loads the built-in design.
        signal_species (str): Name of the output species

    Returns:
        SystemModel: The gate model

    Raises:
        ModelLoadError: If the source is invalid or lacks the inputs, the signal,
            or the leak and crosstalk constants
    """
    model = load_model(
        AND_NOT_GATE if source is None else source,
        required_species=INPUT_SPECIES + (signal_species,),
        required_parameters=(LEAK_PARAMETER, CROSSTALK_PARAMETER),
    )

    for name in INPUT_SPECIES:
        if model.species[name].role is not Role.INPUT:
            logger.warning("Species '%s' is used as an input but tagged '%s'", name, model.species[name].role.value)
        if signal_species not in model.connected_species(name):
            logger.warning("Input '%s' is not linked to '%s' by any reaction", name, signal_species)
    return model


def gate_inputs(levels: Sequence[int], config: OperatingConfig) -> Dict[str, float]:
    """Map logical levels (miR21, miR155, miR34) to input concentrations."""
    if len(levels) != len(INPUT_SPECIES):
        raise ValueError(f"Expected {len(INPUT_SPECIES)} input levels, got {len(levels)}")
    return {name: config.level(bit) for name, bit in zip(INPUT_SPECIES, levels)}


def gate_scenario(mir21: float, mir155: float, mir34: float, config: OperatingConfig,
                  parameter_overrides: Optional[Mapping[str, float]] = None,
                  horizon: Optional[float] = None) -> Scenario:
    """Scenario with explicit input concentrations [M]."""
    return Scenario(
        inputs={"miR21": mir21, "miR155": mir155, "miR34": mir34},
        parameter_overrides=parameter_overrides or {},
        horizon=config.stop_time if horizon is None else horizon,
        solver=config.solver,
    )


def logic_scenario(levels: Sequence[int], config: OperatingConfig,
                   parameter_overrides: Optional[Mapping[str, float]] = None,
                   horizon: Optional[float] = None) -> Scenario:
    """Scenario for a binary input combination, e.g. (1, 1, 0)."""
    inputs = gate_inputs(levels, config)
    return gate_scenario(inputs["miR21"], inputs["miR155"], inputs["miR34"], config,
                         parameter_overrides=parameter_overrides, horizon=horizon)
