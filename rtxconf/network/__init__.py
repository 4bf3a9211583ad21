"""Network model collaborator used by the configuration loader.

Public API:
    - Model, EpanetModel, EpanetSyntheticModel, model_for_type
    - Element variants and Capability
"""

from __future__ import annotations

from .elements import (
    Capability,
    Element,
    Junction,
    Pipe,
    Pump,
    Reservoir,
    Tank,
    Valve,
    Zone,
)
from .model import (
    MODEL_TYPES,
    EpanetModel,
    EpanetSyntheticModel,
    Model,
    ModelLoadError,
    model_for_type,
    parse_inp,
)

__all__ = [
    "Capability",
    "Element",
    "EpanetModel",
    "EpanetSyntheticModel",
    "Junction",
    "MODEL_TYPES",
    "Model",
    "ModelLoadError",
    "Pipe",
    "Pump",
    "Reservoir",
    "Tank",
    "Valve",
    "Zone",
    "model_for_type",
    "parse_inp",
]
