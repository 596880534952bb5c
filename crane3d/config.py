# crane3d/config.py

"""Configuration for the 3D crane model."""

from dataclasses import dataclass
from enum import Enum

import numpy as np

# Default size of one simulation sub-step, in seconds.
DEFAULT_FIXED_STEP: float = 0.01

# Velocities and angles smaller than this are snapped to exactly zero
# after every sub-step.
DAMPEN_EPSILON: float = 1e-9

# Upper bound of sub-steps run by a single update_fixed() call.
MAX_SUBSTEPS: int = 1000

# Initial length of the lift-line in metres.
INITIAL_LIFT_LINE: float = 0.5


class ModelType(Enum):
    """Allows switching between different crane model dynamics."""

    # The most basic and foolproof crane model
    LINEAR = "linear"

    # Non-linear model with constant pendulum length and 2 control forces.
    # The winding force is ignored.
    NON_LINEAR_CONST_LINE = "nonlinear-const-line"

    # Non-linear fully dynamic model with all 3 forces
    NON_LINEAR_COMPLETE = "nonlinear-complete"

    # Same dynamics as NON_LINEAR_COMPLETE. Sliding friction gains the
    # viscous term of the reference mathematical model on top of the
    # Coulomb part, so it does not vanish at breakaway.
    NON_LINEAR_ORIGINAL = "nonlinear-original"


@dataclass
class CraneConfig:
    """Physical parameters of the crane. Set once by the owner of the model."""

    model_type: ModelType = ModelType.LINEAR

    # Masses
    payload_mass: float = 1.000      # kg  Mc mass of the payload
    cart_mass: float = 1.155         # kg  Mw mass of the cart
    rail_mass: float = 2.200         # kg  Ms mass of the moving rail

    gravity: float = 9.81            # m/s²

    # Viscous friction constants, added to sliding friction by NON_LINEAR_ORIGINAL
    rail_friction: float = 100.0     # N·s/m  Tx
    cart_friction: float = 82.0      # N·s/m  Ty
    winding_friction: float = 75.0   # N·s/m  Tr

    # Friction coefficients for steel on steel, dry surface
    # https://hypertextbook.com/facts/2005/steel.shtml
    coeff_static: float = 0.8
    coeff_kinetic: float = 0.7

    # Travel limits (m)
    rail_limit_min: float = -0.30
    rail_limit_max: float = +0.30
    cart_limit_min: float = -0.35
    cart_limit_max: float = +0.35
    line_limit_min: float = 0.05
    line_limit_max: float = 0.90

    # Velocity limits (m/s), 0 = unbounded. The winch has a finite
    # reeling speed.
    rail_vel_max: float = 0.0
    cart_vel_max: float = 0.0
    line_vel_max: float = 0.5

    # Swing bounds. Beyond swing_limit (rad) the line would hit the cart
    # frame; swing_rate_max (rad/s) bounds the angular velocities.
    swing_limit: float = 1.4
    swing_rate_max: float = 20.0

    max_substeps: int = MAX_SUBSTEPS

    @property
    def railcart_mass(self) -> float:
        """Mass moved by the rail force: the rail carries the cart."""
        return self.rail_mass + self.cart_mass

    def validate(self) -> None:
        """Raise ValueError if the configuration is physically meaningless.

        The model itself never calls this; it is up to the owner.
        """
        for name in ("payload_mass", "cart_mass", "rail_mass", "gravity"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for axis in ("rail", "cart", "line"):
            lo = getattr(self, f"{axis}_limit_min")
            hi = getattr(self, f"{axis}_limit_max")
            if lo > hi:
                raise ValueError(f"{axis} limits are inverted: [{lo}, {hi}]")
        if self.line_limit_min <= 0.0:
            raise ValueError("line_limit_min must be positive")
        if not 0.0 < self.swing_limit < np.pi / 2:
            raise ValueError("swing_limit must be within (0, pi/2)")
        if self.max_substeps < 1:
            raise ValueError("max_substeps must be at least 1")
