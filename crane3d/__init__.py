# crane3d/__init__.py

"""Physics model of a 3D overhead crane carrying a pendulum payload."""

from .component import Component
from .config import CraneConfig, ModelType
from .model import Model
from .state import ModelState
from .units import Accel, Force, Mass

__all__ = [
    "Accel",
    "Component",
    "CraneConfig",
    "Force",
    "Mass",
    "Model",
    "ModelState",
    "ModelType",
]
