"""Configuration loader for real-time water network monitoring.

Reads a YAML configuration document and builds the point records, clocks,
time-series pipeline, network model bindings, and persistence policy it
describes.
"""

from .diagnostics import Diagnostic, DiagnosticKind, Diagnostics
from .errors import DocumentError, RtxConfigError, StrictLoadError
from .factory import ConfigFactory, LoadStage, load_config
from .registry import TypeRegistry, default_registry

__version__ = "0.1.0"

__all__ = [
    "ConfigFactory",
    "Diagnostic",
    "DiagnosticKind",
    "Diagnostics",
    "DocumentError",
    "LoadStage",
    "RtxConfigError",
    "StrictLoadError",
    "TypeRegistry",
    "default_registry",
    "load_config",
]
