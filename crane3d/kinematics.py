# crane3d/kinematics.py

"""Basic physics relations shared by Component and Model.

Velocity-Verlet style integration:

    v  = v0 + a·Δt
    x  = x0 + (v0 + v)·Δt·½

and the Coulomb stick/slip resolution used by the non-linear models.
"""

from __future__ import annotations

from typing import NamedTuple, Union

from .units import Accel, Force, sign

# A body moving slower than this (m/s) is considered to be at rest.
REST_VELOCITY: float = 1e-9


def integrate_velocity(v0: float, a: Union[Accel, float], dt: float) -> float:
    """v = v0 + a·Δt"""
    return v0 + float(a) * dt


def integrate_pos(x0: float, v: float, a: Union[Accel, float], dt: float) -> float:
    """x = x0 + (v0 + v1)·Δt·½ where v1 = v0 + a·Δt"""
    old_v = v
    new_v = v + float(a) * dt
    return x0 + (old_v + new_v) * dt * 0.5


def average_velocity(x1: float, x2: float, dt: float) -> float:
    """avg velocity = (x2 - x1) / (t2 - t1)"""
    return (x2 - x1) / dt


def is_at_rest(velocity: float) -> bool:
    return abs(velocity) <= REST_VELOCITY


class FrictionResult(NamedTuple):
    net: Force        # applied + friction
    friction: Force   # signed friction force actually acting
    direction: float  # direction of motion friction opposes (±1, 0 if none)


def resolve_friction(
    applied: Force,
    velocity: float,
    kinetic: Union[Force, float],
    static: Union[Force, float],
) -> FrictionResult:
    """Resolve Coulomb friction with stiction for a single axis.

    Parameters
    ----------
    applied : driving force
    velocity : current velocity of the body
    kinetic : magnitude of the sliding friction force
    static : static friction threshold; a resting body does not move
        while ``|applied| <= static``
    """
    kinetic = Force.of(kinetic)
    static = Force.of(static)

    if is_at_rest(velocity):
        if abs(applied) <= static:
            # stuck: friction cancels the applied force exactly
            return FrictionResult(Force.ZERO, -applied, sign(applied))
        direction = sign(applied)
    else:
        direction = sign(velocity)

    friction = kinetic * -direction
    return FrictionResult(applied + friction, friction, direction)
