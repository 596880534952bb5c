# crane3d/model.py

"""3D crane model: rail, cart and lift-line carrying a pendulum payload.

The host drives the model once per frame through :meth:`Model.update_fixed`
which runs as many fixed-size sub-steps as fit into the accumulated frame
time.  Each sub-step:

1. resolves the applied forces into net accelerations (friction, end-stops)
2. evaluates the equations of the selected :class:`ModelType`
3. integrates all axes with velocity Verlet
4. clamps positions to the travel limits and snaps tiny values to zero
"""

from __future__ import annotations

import logging
from typing import Union

import numpy as np

from .component import Component
from .config import (
    DAMPEN_EPSILON,
    INITIAL_LIFT_LINE,
    CraneConfig,
    ModelType,
)
from .dynamics import EQUATIONS, Accelerations, AxisState, Relations, line_tension
from .kinematics import integrate_pos, integrate_velocity, is_at_rest, resolve_friction
from .state import ModelState
from .units import Accel, Force, Mass

logger = logging.getLogger(__name__)

ForceLike = Union[Force, float]

# Accumulated time within this tolerance of a whole step still runs the step,
# so that 0.03 s of frame time is exactly three 0.01 s sub-steps.
STEP_TOLERANCE: float = 1e-9


class Model:
    """Crane dynamics engine.

    Coordinate system:
        X: outermost movement of the rail, considered as forward
        Y: left-right movement of the cart
        Z: up-down movement of the payload

    ``config`` may be modified by the owner at any time; it is read anew on
    every sub-step.  Positive masses and ``min <= max`` limits are the
    owner's responsibility (see :meth:`CraneConfig.validate`).
    """

    def __init__(self, config: CraneConfig | None = None):
        self.config = config or CraneConfig()
        cfg = self.config

        self.rail = Component(0.0, cfg.rail_limit_min, cfg.rail_limit_max, cfg.railcart_mass)
        self.cart = Component(0.0, cfg.cart_limit_min, cfg.cart_limit_max, cfg.cart_mass)
        self.line = Component(
            INITIAL_LIFT_LINE, cfg.line_limit_min, cfg.line_limit_max, cfg.payload_mass
        )

        self.alfa = 0.0
        self.alfa_vel = 0.0
        self.beta = 0.0
        self.beta_vel = 0.0

        # time sink for running the correct number of sub-steps every update
        self.simulation_time = 0.0
        self.simulation_counter = 0

        self._sync_components()

    @classmethod
    def from_config(cls, config: CraneConfig) -> "Model":
        return cls(config)

    # ------------------------------------------------------------------
    # Configuration shortcuts
    # ------------------------------------------------------------------

    @property
    def type(self) -> ModelType:
        return self.config.model_type

    @type.setter
    def type(self, model_type: ModelType) -> None:
        if model_type is not self.config.model_type:
            logger.debug("Switching crane model %s -> %s", self.config.model_type.value, model_type.value)
        self.config.model_type = model_type

    def _sync_components(self) -> None:
        cfg = self.config
        axes = (
            (self.rail, cfg.railcart_mass, cfg.rail_limit_min, cfg.rail_limit_max, cfg.rail_vel_max),
            (self.cart, cfg.cart_mass, cfg.cart_limit_min, cfg.cart_limit_max, cfg.cart_vel_max),
            (self.line, cfg.payload_mass, cfg.line_limit_min, cfg.line_limit_max, cfg.line_vel_max),
        )
        for comp, mass, lo, hi, vel_max in axes:
            comp.mass = Mass(mass)
            comp.set_limits(lo, hi)
            comp.vel_max = vel_max
            comp.coeff_static = cfg.coeff_static
            comp.coeff_kinetic = cfg.coeff_kinetic

        self.line.const = cfg.model_type is ModelType.NON_LINEAR_CONST_LINE
        if self.line.const:
            self.line.vel = 0.0

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return the crane to rest at the centre of the frame."""
        self.rail.reset()
        self.cart.reset()
        self.line.reset()
        self.line.pos = INITIAL_LIFT_LINE
        self.alfa = self.alfa_vel = 0.0
        self.beta = self.beta_vel = 0.0
        self.simulation_time = 0.0
        self.simulation_counter = 0

    def update_fixed(
        self,
        fixed_step: float,
        elapsed_time: float,
        f_rail: ForceLike = 0.0,
        f_cart: ForceLike = 0.0,
        f_wind: ForceLike = 0.0,
    ) -> ModelState:
        """Update the model using a fixed time step.

        Parameters
        ----------
        fixed_step : size of one sub-step, for example 0.01
        elapsed_time : time since the last update
        f_rail : force driving the rail with the cart (Fx)
        f_cart : force driving the cart along the rail (Fy)
        f_wind : force winding the lift-line (Fr), negative reels in

        Returns
        -------
        New state of the crane.  Whatever time does not fill a whole
        sub-step is carried over to the next call.
        """
        if fixed_step <= 0.0:
            raise ValueError(f"fixed_step must be positive, got {fixed_step}")

        self.simulation_time += max(elapsed_time, 0.0)
        max_substeps = self.config.max_substeps

        steps = 0
        while self.simulation_time + STEP_TOLERANCE >= fixed_step:
            if steps >= max_substeps:
                dropped = self.simulation_time - self.simulation_time % fixed_step
                logger.warning(
                    "Sub-step limit %d reached, dropping %.3fs of simulation time",
                    max_substeps, dropped,
                )
                self.simulation_time %= fixed_step
                break
            self._step(fixed_step, f_rail, f_cart, f_wind)
            self.simulation_time -= fixed_step
            steps += 1

        self.simulation_time = max(self.simulation_time, 0.0)
        logger.debug("update_fixed ran %d sub-steps, %.6fs carried over", steps, self.simulation_time)
        return self.get_state()

    def update(
        self,
        delta_time: float,
        f_rail: ForceLike = 0.0,
        f_cart: ForceLike = 0.0,
        f_wind: ForceLike = 0.0,
    ) -> ModelState:
        """Update the model using *delta_time* as the time step.

        This can be unstable if delta_time is large or varies between calls;
        prefer :meth:`update_fixed`.
        """
        self._step(delta_time, f_rail, f_cart, f_wind)
        return self.get_state()

    def get_state(self) -> ModelState:
        """Current rail, cart, lift-line and swing angles of the payload."""
        return ModelState.from_axes(
            self.rail.pos, self.cart.pos, self.line.pos, self.alfa, self.beta
        )

    def state_debug_text(self) -> str:
        cfg = self.config
        return "\n".join(
            [
                f"Model   {cfg.model_type.value}",
                self.get_state().debug_text(),
                f"Vel     rail {self.rail.vel:7.3f}  cart {self.cart.vel:7.3f}  line {self.line.vel:7.3f}",
                f"Fnet    rail {self.rail.f_net.value:7.2f}  cart {self.cart.f_net.value:7.2f}"
                f"  line {self.line.f_net.value:7.2f}",
                f"Steps   {self.simulation_counter}",
            ]
        )

    def net_force(
        self,
        f_applied: Force,
        velocity: float,
        m: Mass,
        mu_static: float,
        mu_kinetic: float,
        viscous: float = 0.0,
    ) -> tuple[Force, Force]:
        """Net force on a body of mass *m* under Coulomb friction.

        Returns ``(net, friction)``.  A resting body stays put while the
        applied force is within the static friction limit.  *viscous*
        (N·s/m) adds a velocity-proportional part to the sliding friction.
        """
        g = Accel(self.config.gravity)
        kinetic = m * g * mu_kinetic + Force(viscous * abs(velocity))
        result = resolve_friction(f_applied, velocity, kinetic, m * g * mu_static)
        return result.net, result.friction

    # ------------------------------------------------------------------
    # Simulation step
    # ------------------------------------------------------------------

    def prepare_basic_relations(
        self, f_rail: ForceLike, f_cart: ForceLike, f_wind: ForceLike
    ) -> Relations:
        """Resolve applied forces into driving, friction and net accelerations.

        In the non-linear variants the lift-line also pulls on the rail and
        the cart.  Static friction holds those axes against the sum of the
        applied force and that pull; an axis held this way is reported as
        stuck and does not move during the step.
        """
        self._sync_components()
        cfg = self.config
        g = Accel(cfg.gravity)

        if cfg.model_type is ModelType.NON_LINEAR_CONST_LINE:
            f_wind = Force.ZERO

        comps = (self.rail, self.cart, self.line)
        applied = [
            comp.clamp_force_by_pos_limits(Force.of(force))
            for comp, force in zip(comps, (f_rail, f_cart, f_wind))
        ]
        mu1 = cfg.payload_mass / cfg.cart_mass
        mu2 = cfg.payload_mass / cfg.railcart_mass

        if cfg.model_type is ModelType.LINEAR:
            for comp, force in zip(comps, applied):
                comp.apply_force(force, g)
            n = [float(comp.net_acc) for comp in comps]
            stuck = [False, False]
        else:
            n, stuck = self._resolve_coupled_friction(applied, g, mu1, mu2)

        u = [float(force / comp.mass) for comp, force in zip(comps, applied)]
        t = [driving - net_acc for driving, net_acc in zip(u, n)]

        return Relations(
            u_rail=u[0], u_cart=u[1], u_wind=u[2],
            t_rail=t[0], t_cart=t[1], t_wind=t[2],
            n_rail=n[0], n_cart=n[1], n_wind=n[2],
            mu1=mu1, mu2=mu2,
            rail_stuck=stuck[0], cart_stuck=stuck[1],
        )

    def _resolve_coupled_friction(
        self, applied: list[Force], g: Accel, mu1: float, mu2: float
    ) -> tuple[list[float], list[bool]]:
        """Friction of the non-linear variants.

        Returns the net accelerations of rail, cart and winding due to the
        applied forces, and which of rail and cart static friction holds.
        """
        cfg = self.config
        mu_s, mu_k = cfg.coeff_static, cfg.coeff_kinetic
        original = cfg.model_type is ModelType.NON_LINEAR_ORIGINAL
        payload = Mass(cfg.payload_mass)

        # the winch carries the payload weight, only the applied force counts
        line = self.line
        if original:
            line.apply_force_nonlinear(
                applied[2], g,
                T=payload * g * mu_k + Force(cfg.winding_friction * abs(line.vel)),
                Ts=payload * g * mu_s,
            )
        else:
            net, friction = self.net_force(applied[2], line.vel, payload, mu_s, mu_k)
            line.set_forces(applied[2], net, friction, payload * g * mu_s)
        n_wind = float(line.net_acc)

        # normal load carried by each frame axis
        frame = (
            (self.rail, applied[0], Mass(cfg.railcart_mass + cfg.payload_mass),
             cfg.rail_friction if original else 0.0),
            (self.cart, applied[1], Mass(cfg.cart_mass + cfg.payload_mass),
             cfg.cart_friction if original else 0.0),
        )

        # Line tension with every resting axis held.  A moving axis keeps
        # sliding, its friction only depends on the direction of motion.
        resting = [is_at_rest(comp.vel) for comp, *_ in frame]
        sliding_acc = []
        for (comp, force, normal, visc), at_rest in zip(frame, resting):
            if at_rest:
                sliding_acc.append(0.0)
                continue
            net, _ = self.net_force(force, comp.vel, normal, mu_s, mu_k, visc)
            sliding_acc.append(float(net / comp.mass))

        q = self._axis_state()
        s = line_tension(
            cfg.gravity, q, sliding_acc[0], sliding_acc[1], n_wind,
            0.0 if resting[1] else mu1,
            0.0 if resting[0] else mu2,
        )
        ex = np.cos(q.alfa) * np.sin(q.beta)
        ey = np.sin(q.alfa)

        n, stuck = [], []
        for (comp, force, normal, visc), e, at_rest in zip(frame, (ex, ey), resting):
            total = force + Force(float(cfg.payload_mass * s * e))
            net, friction = self.net_force(total, comp.vel, normal, mu_s, mu_k, visc)
            comp.set_forces(total, net, friction, normal * g * mu_s)

            held = at_rest and not net
            stuck.append(held)
            n.append(0.0 if held else float((force + friction) / comp.mass))

        n.append(n_wind)
        return n, stuck

    def _axis_state(self) -> AxisState:
        return AxisState(
            self.rail.pos, self.rail.vel,
            self.cart.pos, self.cart.vel,
            self.line.pos, self.line.vel,
            self.alfa, self.alfa_vel,
            self.beta, self.beta_vel,
        )

    def _predict(self, q: AxisState, a: Accelerations, dt: float) -> AxisState:
        """State after *dt* assuming constant acceleration *a*."""
        r = integrate_pos(q.r, q.r_vel, a.r, dt)
        r = min(max(r, self.config.line_limit_min), self.config.line_limit_max)
        return AxisState(
            integrate_pos(q.x, q.x_vel, a.x, dt), integrate_velocity(q.x_vel, a.x, dt),
            integrate_pos(q.y, q.y_vel, a.y, dt), integrate_velocity(q.y_vel, a.y, dt),
            r, integrate_velocity(q.r_vel, a.r, dt),
            integrate_pos(q.alfa, q.alfa_vel, a.alfa, dt), integrate_velocity(q.alfa_vel, a.alfa, dt),
            integrate_pos(q.beta, q.beta_vel, a.beta, dt), integrate_velocity(q.beta_vel, a.beta, dt),
        )

    def _step(self, dt: float, f_rail: ForceLike, f_cart: ForceLike, f_wind: ForceLike) -> None:
        rel = self.prepare_basic_relations(f_rail, f_cart, f_wind)
        equations = EQUATIONS[self.config.model_type]
        g = self.config.gravity

        # average of the accelerations at the start and predicted end of the step
        q0 = self._axis_state()
        a0 = equations(g, q0, rel)
        a1 = equations(g, self._predict(q0, a0, dt), rel)
        acc = Accelerations(*((start + end) * 0.5 for start, end in zip(a0, a1)))

        self.rail.update(acc.x, dt)
        self.cart.update(acc.y, dt)
        self.line.update(acc.r, dt)

        self.alfa = integrate_pos(self.alfa, self.alfa_vel, acc.alfa, dt)
        self.alfa_vel = integrate_velocity(self.alfa_vel, acc.alfa, dt)
        self.beta = integrate_pos(self.beta, self.beta_vel, acc.beta, dt)
        self.beta_vel = integrate_velocity(self.beta_vel, acc.beta, dt)

        self.apply_limits()
        self.dampen_all_values()
        self.simulation_counter += 1

    def apply_limits(self) -> None:
        """Clamp positions to the frame; a clamped axis stops dead.

        The swing angles get the same treatment at ``swing_limit`` and their
        rates are bounded by ``swing_rate_max``.
        """
        for comp in (self.rail, self.cart, self.line):
            if comp.pos < comp.limit_min:
                comp.pos = comp.limit_min
                comp.vel = 0.0
            elif comp.pos > comp.limit_max:
                comp.pos = comp.limit_max
                comp.vel = 0.0

        self.alfa, self.alfa_vel = self._limit_swing(self.alfa, self.alfa_vel)
        self.beta, self.beta_vel = self._limit_swing(self.beta, self.beta_vel)

    def _limit_swing(self, angle: float, rate: float) -> tuple[float, float]:
        limit = self.config.swing_limit
        rate_max = self.config.swing_rate_max
        if angle > limit:
            return limit, 0.0
        if angle < -limit:
            return -limit, 0.0
        return angle, min(max(rate, -rate_max), rate_max)

    def dampen_all_values(self) -> None:
        """Snap values close to zero to exactly zero."""
        for comp in (self.rail, self.cart, self.line):
            if abs(comp.vel) < DAMPEN_EPSILON:
                comp.vel = 0.0
        if abs(self.alfa) < DAMPEN_EPSILON:
            self.alfa = 0.0
        if abs(self.alfa_vel) < DAMPEN_EPSILON:
            self.alfa_vel = 0.0
        if abs(self.beta) < DAMPEN_EPSILON:
            self.beta = 0.0
        if abs(self.beta_vel) < DAMPEN_EPSILON:
            self.beta_vel = 0.0
