# crane3d/dynamics.py

"""Equations of motion of the 3D crane.

Generalised coordinates:
    q = [X, Y, R, α, β]
X is the rail offset, Y the cart offset along the rail, R the lift-line
length.  The payload hangs from the cart at

    P = (X + R cosα sinβ,  Y + R sinα,  −R cosα cosβ)

so α = β = 0 is the resting, vertical line.

Every model variant is a pure function ``(g, q, rel) -> Accelerations``
selected through :data:`EQUATIONS`.  The variants share all state and only
differ in the equations, so there is no class hierarchy here.

The non-linear equations follow from projecting the payload's equation of
motion onto the orthonormal frame

    e   = ( cα sβ,  sα, −cα cβ)      (along the line)
    e_α = (−sα sβ,  cα,  sα cβ)
    e_β = (    cβ,   0,     sβ)

which eliminates the line tension S from the swing equations.  The tension
couples back into the frame through the mass ratios μ1 = Mc/Mw (cart) and
μ2 = Mc/(Mw+Ms) (rail).  The winch carries the payload weight, so the line
length is driven by the net winding acceleration alone.

A frame axis held by static friction (``Relations.rail_stuck`` or
``cart_stuck``) does not take part in that coupling.  Its acceleration is
exactly zero and the tension is solved as if it were part of the fixed
frame.
"""

from __future__ import annotations

from typing import Callable, Dict, NamedTuple

import numpy as np

from .config import ModelType

# cos(α) is kept at least this far from zero in the β equation
MIN_COS_ALFA: float = 1e-3


class AxisState(NamedTuple):
    """Positions and velocities of all five degrees of freedom."""

    x: float
    x_vel: float
    y: float
    y_vel: float
    r: float
    r_vel: float
    alfa: float
    alfa_vel: float
    beta: float
    beta_vel: float


class Relations(NamedTuple):
    """Per-step accelerations derived from the applied forces.

    u: driving acceleration, t: friction acceleration, n: net acceleration
    of rail, cart and winding.
    """

    u_rail: float
    u_cart: float
    u_wind: float
    t_rail: float
    t_cart: float
    t_wind: float
    n_rail: float
    n_cart: float
    n_wind: float
    mu1: float  # payload / cart mass ratio
    mu2: float  # payload / (rail + cart) mass ratio
    rail_stuck: bool = False  # held by static friction for the whole step
    cart_stuck: bool = False


class Accelerations(NamedTuple):
    x: float
    y: float
    r: float
    alfa: float
    beta: float


Equation = Callable[[float, AxisState, Relations], Accelerations]


def linear_model(g: float, q: AxisState, rel: Relations) -> Accelerations:
    """Small-angle model with decoupled axes.

    The swing is driven by the frame acceleration but does not act back on
    the frame, and the line is treated as constant length for the swing.
    """
    x_acc = rel.n_rail
    y_acc = rel.n_cart
    alfa_acc = -(g * q.alfa + y_acc) / q.r
    beta_acc = -(g * q.beta + x_acc) / q.r
    return Accelerations(x_acc, y_acc, rel.n_wind, alfa_acc, beta_acc)


def line_tension(
    g: float, q: AxisState, n_rail: float, n_cart: float, n_wind: float,
    mu1: float, mu2: float,
) -> float:
    """Lift-line tension per unit payload mass, S/Mc.

    Solved from the radial equation together with the tension-coupled frame
    accelerations.  A slack line carries no tension, so the result is
    never negative.
    """
    sa, ca = np.sin(q.alfa), np.cos(q.alfa)
    sb, cb = np.sin(q.beta), np.cos(q.beta)
    ex = ca * sb
    ey = sa

    centripetal = q.r * q.alfa_vel ** 2 + q.r * ca ** 2 * q.beta_vel ** 2
    s = (g * ca * cb + centripetal - n_wind - ex * n_rail - ey * n_cart) / (
        1.0 + mu2 * ex ** 2 + mu1 * ey ** 2
    )
    return max(float(s), 0.0)


def _swing(
    g: float, q: AxisState, x_acc: float, y_acc: float, r_vel: float
) -> tuple[float, float]:
    sa, ca = np.sin(q.alfa), np.cos(q.alfa)
    sb, cb = np.sin(q.beta), np.cos(q.beta)
    ca_safe = max(ca, MIN_COS_ALFA)

    alfa_acc = (
        -g * sa * cb + x_acc * sa * sb - y_acc * ca - 2.0 * r_vel * q.alfa_vel
    ) / q.r - sa * ca * q.beta_vel ** 2

    beta_acc = (
        -g * sb
        - x_acc * cb
        - 2.0 * r_vel * ca * q.beta_vel
        + 2.0 * q.r * sa * q.alfa_vel * q.beta_vel
    ) / (q.r * ca_safe)

    return float(alfa_acc), float(beta_acc)


def _coupled(g: float, q: AxisState, rel: Relations, n_wind: float, r_vel: float) -> Accelerations:
    # a stuck axis is part of the fixed frame: no acceleration, no coupling
    n_rail, mu2 = (0.0, 0.0) if rel.rail_stuck else (rel.n_rail, rel.mu2)
    n_cart, mu1 = (0.0, 0.0) if rel.cart_stuck else (rel.n_cart, rel.mu1)
    s = line_tension(g, q, n_rail, n_cart, n_wind, mu1, mu2)

    ex = np.cos(q.alfa) * np.sin(q.beta)
    ey = np.sin(q.alfa)
    x_acc = float(n_rail + mu2 * s * ex)
    y_acc = float(n_cart + mu1 * s * ey)

    alfa_acc, beta_acc = _swing(g, q, x_acc, y_acc, r_vel)
    return Accelerations(x_acc, y_acc, n_wind, alfa_acc, beta_acc)


def nonlinear_const_line(g: float, q: AxisState, rel: Relations) -> Accelerations:
    """Non-linear model with a constant line length; winding is ignored."""
    return _coupled(g, q, rel, n_wind=0.0, r_vel=0.0)


def nonlinear_complete(g: float, q: AxisState, rel: Relations) -> Accelerations:
    """Non-linear fully dynamic model with all 3 forces.

    Used by both NON_LINEAR_COMPLETE and NON_LINEAR_ORIGINAL; the two
    differ in how the model resolves friction before getting here.
    """
    return _coupled(g, q, rel, n_wind=rel.n_wind, r_vel=q.r_vel)


EQUATIONS: Dict[ModelType, Equation] = {
    ModelType.LINEAR: linear_model,
    ModelType.NON_LINEAR_CONST_LINE: nonlinear_const_line,
    ModelType.NON_LINEAR_COMPLETE: nonlinear_complete,
    ModelType.NON_LINEAR_ORIGINAL: nonlinear_complete,
}
