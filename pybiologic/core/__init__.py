from .exceptions import (PyBiologicError, ModelLoadError, ConfigurationError,
                         IntegrationError, SignalNotFoundError)
from .models import Role, Species, Parameter, SystemModel
from .reactions import Reaction, MassActionReaction
from .loader import load_model, model_to_dict

__all__ = [
    "PyBiologicError",
    "ModelLoadError",
    "ConfigurationError",
    "IntegrationError",
    "SignalNotFoundError",
    "Role",
    "Species",
    "Parameter",
    "SystemModel",
    "Reaction",
    "MassActionReaction",
    "load_model",
    "model_to_dict",
]
