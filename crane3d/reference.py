# crane3d/reference.py

"""High-accuracy reference integration of the frictionless crane.

Integrates the same equations of motion as :class:`crane3d.model.Model`
with an adaptive Runge-Kutta solver instead of fixed Verlet sub-steps.
Friction, end-stops and dampening are left out, so this is only a
fidelity reference for short, unconstrained motions.

State layout:
    s = [X, Y, R, α, β, Ẋ, Ẏ, Ṙ, α̇, β̇]
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.integrate import solve_ivp

from .config import CraneConfig, ModelType
from .dynamics import EQUATIONS, AxisState, Relations


def frictionless_relations(
    cfg: CraneConfig, f_rail: float, f_cart: float, f_wind: float
) -> Relations:
    """Relations with every applied force acting in full."""
    u_rail = f_rail / cfg.railcart_mass
    u_cart = f_cart / cfg.cart_mass
    u_wind = f_wind / cfg.payload_mass
    if cfg.model_type is ModelType.NON_LINEAR_CONST_LINE:
        u_wind = 0.0
    return Relations(
        u_rail=u_rail, u_cart=u_cart, u_wind=u_wind,
        t_rail=0.0, t_cart=0.0, t_wind=0.0,
        n_rail=u_rail, n_cart=u_cart, n_wind=u_wind,
        mu1=cfg.payload_mass / cfg.cart_mass,
        mu2=cfg.payload_mass / cfg.railcart_mass,
    )


def derivatives(
    cfg: CraneConfig,
    state: NDArray[np.floating],
    forces: tuple[float, float, float],
) -> NDArray[np.floating]:
    """Compute state derivatives  ṡ = [q̇, q̈].

    Parameters
    ----------
    cfg : CraneConfig, ``model_type`` selects the equations
    state : array [X, Y, R, α, β, Ẋ, Ẏ, Ṙ, α̇, β̇]
    forces : (Frail, Fcart, Fwind) in Newtons
    """
    x, y, r, alfa, beta, x_vel, y_vel, r_vel, alfa_vel, beta_vel = state
    q = AxisState(x, x_vel, y, y_vel, r, r_vel, alfa, alfa_vel, beta, beta_vel)
    rel = frictionless_relations(cfg, *forces)
    acc = EQUATIONS[cfg.model_type](cfg.gravity, q, rel)
    return np.array([x_vel, y_vel, r_vel, alfa_vel, beta_vel, *acc])


def step(
    cfg: CraneConfig,
    state: NDArray[np.floating],
    forces: tuple[float, float, float] = (0.0, 0.0, 0.0),
    dt: float = 0.01,
) -> NDArray[np.floating]:
    """Advance the reference state by *dt* seconds with RK45.

    Returns
    -------
    new_state : state after dt seconds
    """
    sol = solve_ivp(
        fun=lambda _t, s: derivatives(cfg, s, forces),
        t_span=(0.0, dt),
        y0=np.asarray(state, dtype=float),
        method="RK45",
        rtol=1e-9,
        atol=1e-9,
    )
    return sol.y[:, -1].copy()


def initial_state(
    lift_line: float = 0.5, alfa: float = 0.0, beta: float = 0.0
) -> NDArray[np.floating]:
    """Resting crane at the centre of the frame, optionally with a swing."""
    s = np.zeros(10)
    s[2] = lift_line
    s[3] = alfa
    s[4] = beta
    return s
