"""
Model loading.

Reaction networks are described by a plain mapping with four sections::

    name: and_not_gate
    species:
      - {name: miR21, initial: 0.0, role: input}
      - {name: Signal, initial: 0.0, role: signal}
    parameters:
      k_bind21: 1.0e6
    reactions:
      - name: bind21
        reactants: {miR21: 1, Gate: 1}
        products: {Gate_miR21: 1}
        rate: k_bind21

The mapping can be passed directly or read from a JSON or YAML file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Union

import yaml

from .exceptions import ModelLoadError
from .models import Parameter, Role, Species, SystemModel
from .reactions import MassActionReaction

logger = logging.getLogger(__name__)

ModelSource = Union[Mapping[str, Any], str, Path]


def _read_document(path: Path) -> Mapping[str, Any]:
    if not path.is_file():
        raise ModelLoadError(f"Model source not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                document = json.load(f)
            elif path.suffix.lower() in (".yaml", ".yml"):
                document = yaml.safe_load(f)
            else:
                raise ModelLoadError(f"Unsupported model file type '{path.suffix}' (expected .json, .yaml or .yml)")
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ModelLoadError(f"Could not read model source {path}: {e}") from e

    if not isinstance(document, Mapping):
        raise ModelLoadError(f"Model source {path} does not contain a mapping")
    return document


def _as_float(value: Any, what: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ModelLoadError(f"{what} must be a number, got {value!r}") from None


def _stoichiometry(model: SystemModel, side: Any, reaction_name: str) -> Dict[Species, int]:
    if side is None:
        return {}
    if not isinstance(side, Mapping):
        raise ModelLoadError(f"Reaction '{reaction_name}': reactants/products must be a mapping")
    result = {}
    for species_name, stoich in side.items():
        if species_name not in model.species:
            raise ModelLoadError(f"Reaction '{reaction_name}' references undefined species '{species_name}'")
        if not isinstance(stoich, int) or isinstance(stoich, bool) or stoich <= 0:
            raise ModelLoadError(
                f"Reaction '{reaction_name}': stoichiometry of '{species_name}' must be a positive integer")
        result[model.species[species_name]] = stoich
    return result


def load_model(source: ModelSource, required_species: Iterable[str] = (),
               required_parameters: Iterable[str] = ()) -> SystemModel:
    """
    Build a SystemModel from a mapping or a JSON/YAML file.

    Args:
        source: A model mapping or a path to a .json, .yaml or .yml file
        required_species (Iterable[str]): Species that must be defined
        required_parameters (Iterable[str]): Parameters that must be defined

    Returns:
        SystemModel: The loaded model

    Raises:
        ModelLoadError: If the source is missing or malformed, a reaction references an
            undefined species or parameter, or a required entity is absent
    """
    if isinstance(source, (str, Path)):
        document = _read_document(Path(source))
    elif isinstance(source, Mapping):
        document = source
    else:
        raise ModelLoadError(f"Unsupported model source type: {type(source).__name__}")

    for section in ("species", "parameters", "reactions"):
        if section not in document:
            raise ModelLoadError(f"Model source is missing the '{section}' section")

    model = SystemModel(str(document.get("name", "model")))

    species_entries = document["species"]
    if not isinstance(species_entries, list):
        raise ModelLoadError("'species' must be a list")
    for entry in species_entries:
        if not isinstance(entry, Mapping) or "name" not in entry:
            raise ModelLoadError(f"Invalid species entry: {entry!r}")
        name = str(entry["name"])
        initial = _as_float(entry.get("initial", 0.0), f"Initial concentration of '{name}'")
        try:
            role = Role(entry.get("role", Role.GATE.value))
        except ValueError:
            raise ModelLoadError(f"Unknown role {entry.get('role')!r} for species '{name}'") from None
        try:
            model.add_species(Species(name, initial_condition=initial, role=role))
        except ValueError as e:
            raise ModelLoadError(str(e)) from e

    parameter_entries = document["parameters"]
    if not isinstance(parameter_entries, Mapping):
        raise ModelLoadError("'parameters' must be a mapping of name to value")
    for name, value in parameter_entries.items():
        model.add_parameter(Parameter(str(name), default_value=_as_float(value, f"Parameter '{name}'")))

    reaction_entries = document["reactions"]
    if not isinstance(reaction_entries, list):
        raise ModelLoadError("'reactions' must be a list")
    for i, entry in enumerate(reaction_entries):
        if not isinstance(entry, Mapping):
            raise ModelLoadError(f"Invalid reaction entry: {entry!r}")
        name = str(entry.get("name", f"reaction_{i}"))
        rate_name = entry.get("rate")
        if not isinstance(rate_name, str) or rate_name not in model.parameters:
            raise ModelLoadError(f"Reaction '{name}' references undefined parameter {rate_name!r}")
        reaction = MassActionReaction(
            name,
            reactants=_stoichiometry(model, entry.get("reactants"), name),
            products=_stoichiometry(model, entry.get("products"), name),
            rate=model.parameters[rate_name],
        )
        model.add_reaction(reaction)

    missing_species = sorted(set(required_species) - set(model.species))
    if missing_species:
        raise ModelLoadError(f"Model '{model.name}' is missing required species: {missing_species}")
    missing_params = sorted(set(required_parameters) - set(model.parameters))
    if missing_params:
        raise ModelLoadError(f"Model '{model.name}' is missing required parameters: {missing_params}")

    logger.debug("Loaded %r", model)
    return model


def model_to_dict(model: SystemModel) -> Dict[str, Any]:
    """
    Serialize a SystemModel into the mapping format understood by :func:`load_model`.

    Only mass-action reactions can be represented.
    """
    return {
        "name": model.name,
        "species": [
            {"name": s.name, "initial": s.initial_condition, "role": s.role.value}
            for s in model.species.values()
        ],
        "parameters": {p.name: p.get_default_value() for p in model.parameters.values()},
        "reactions": [
            {
                "name": r.name,
                "reactants": {s.name: n for s, n in r.reactants.items()},
                "products": {s.name: n for s, n in r.products.items()},
                "rate": r.rate.name,
            }
            for r in model.reactions
        ],
    }
