# crane3d/state.py

"""Output state of the crane model.

Coordinate system:
    X: outermost movement of the rail, considered as forward
    Y: left-right movement of the cart
    Z: up-down movement of the payload (positive up, hook at Z = 0)
"""

from __future__ import annotations

from dataclasses import astuple, dataclass

import numpy as np
from numpy.typing import NDArray


def payload_position(
    rail_offset: float,
    cart_offset: float,
    lift_line: float,
    alfa: float,
    beta: float,
) -> NDArray[np.floating]:
    """Cartesian position of the payload hanging from the cart.

    β is the angle between −Z and the projection of the lift-line onto the
    XZ plane, α the out-of-plane swing towards +Y.
    """
    ca = np.cos(alfa)
    return np.array(
        [
            rail_offset + lift_line * ca * np.sin(beta),
            cart_offset + lift_line * np.sin(alfa),
            -lift_line * ca * np.cos(beta),
        ]
    )


@dataclass(frozen=True)
class ModelState:
    """Snapshot of the crane, recomputed on every Model.get_state() call."""

    alfa: float = 0.0         # α pendulum swing angle (rad)
    beta: float = 0.0         # β pendulum swing angle (rad)

    rail_offset: float = 0.0  # X distance of the rail from the centre of the frame
    cart_offset: float = 0.0  # Y distance of the cart from the centre of the rail
    lift_line: float = 0.0    # R lift-line length

    payload_x: float = 0.0
    payload_y: float = 0.0
    payload_z: float = 0.0

    @classmethod
    def from_axes(
        cls,
        rail_offset: float,
        cart_offset: float,
        lift_line: float,
        alfa: float,
        beta: float,
    ) -> "ModelState":
        px, py, pz = payload_position(rail_offset, cart_offset, lift_line, alfa, beta)
        return cls(
            alfa=float(alfa),
            beta=float(beta),
            rail_offset=float(rail_offset),
            cart_offset=float(cart_offset),
            lift_line=float(lift_line),
            payload_x=float(px),
            payload_y=float(py),
            payload_z=float(pz),
        )

    @property
    def payload(self) -> NDArray[np.floating]:
        return np.array([self.payload_x, self.payload_y, self.payload_z])

    def as_array(self) -> NDArray[np.floating]:
        return np.array(astuple(self))

    def debug_text(self) -> str:
        return "\n".join(
            [
                f"Alfa    {np.degrees(self.alfa):8.3f} deg",
                f"Beta    {np.degrees(self.beta):8.3f} deg",
                f"Rail    {self.rail_offset:8.3f} m",
                f"Cart    {self.cart_offset:8.3f} m",
                f"Line    {self.lift_line:8.3f} m",
                f"Payload ({self.payload_x:.3f}, {self.payload_y:.3f}, {self.payload_z:.3f})",
            ]
        )
