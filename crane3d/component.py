# crane3d/component.py

"""Single force component with its own position, velocity, acceleration
and net force.

One Component models one linear degree of freedom of the crane (rail, cart
or lift-line).  The owning Model decides which friction law drives it and
then calls :meth:`Component.update` once per sub-step.
"""

from __future__ import annotations

from .kinematics import integrate_velocity, is_at_rest, resolve_friction
from .units import Accel, Force, Mass, sign


class Component:
    """A single dynamic degree of freedom.

    ``vel_max`` and ``acc_max`` of 0 disable the respective limit.
    If ``const`` is set, :meth:`update` leaves the component untouched.
    """

    def __init__(
        self,
        pos: float = 0.0,
        limit_min: float = 0.0,
        limit_max: float = 0.0,
        mass: Mass | float = 1.0,
    ):
        self.mass = Mass.of(mass)
        self.pos = pos
        self.limit_min = limit_min
        self.limit_max = limit_max
        self.vel_max = 0.0
        self.acc_max = 0.0
        self.vel = 0.0
        self.acc = Accel.ZERO        # actual acceleration

        self.applied = Force.ZERO     # applied force
        self.s_friction = Force.ZERO  # static friction threshold
        self.k_friction = Force.ZERO  # kinetic friction
        self.f_net = Force.ZERO       # net force
        self.net_acc = Accel.ZERO     # net driving acceleration

        self.friction_dir = 1.0
        self.const = False

        # Steel on steel, dry surface
        self.coeff_static = 0.8
        self.coeff_kinetic = 0.7

    def set_limits(self, limit_min: float, limit_max: float) -> None:
        self.limit_min = limit_min
        self.limit_max = limit_max

    def reset(self) -> None:
        """Reset all dynamic variables: pos, vel, acc, f_net, net_acc."""
        self.pos = 0.0
        self.vel = 0.0
        self.acc = Accel.ZERO
        self.f_net = Force.ZERO
        self.net_acc = Accel.ZERO

    def update(self, new_acc: Accel | float, dt: float) -> None:
        """Update pos and vel using velocity Verlet integration."""
        if self.const:
            return

        acc = float(new_acc)
        if self.acc_max != 0.0:
            acc = min(max(acc, -self.acc_max), self.acc_max)

        old_vel = self.vel
        vel = integrate_velocity(old_vel, acc, dt)
        if self.vel_max != 0.0:
            vel = min(max(vel, -self.vel_max), self.vel_max)

        # Friction can slow a body down to rest but never push it backwards
        if (
            old_vel * vel < 0.0
            and self.k_friction > 0.0
            and abs(self.applied) <= self.s_friction
        ):
            vel = 0.0

        self.pos = self.pos + (old_vel + vel) * dt * 0.5
        self.vel = vel
        self.acc = Accel(acc)

    def apply_force(self, applied: Force, g: Accel) -> None:
        """Linear friction model: the body is always treated as sliding.

        Kinetic friction opposes the velocity, or the applied force while at
        rest.  At rest it is never larger than the applied force itself.
        """
        self.applied = applied
        self.s_friction = self.mass * g * self.coeff_static
        self.k_friction = self.mass * g * self.coeff_kinetic

        if is_at_rest(self.vel):
            self.friction_dir = sign(applied)
            friction = min(self.k_friction, abs(applied))
        else:
            self.friction_dir = sign(self.vel)
            friction = self.k_friction

        self.f_net = applied - friction * self.friction_dir
        self.net_acc = self.f_net / self.mass

    def apply_force_nonlinear(
        self, applied: Force, g: Accel, T: Force | float, Ts: Force | float
    ) -> None:
        """Stiction-aware friction model.

        *T* is the kinetic friction force and *Ts* the static friction
        threshold, both computed by the owning model with *g* already
        folded in.
        """
        self.applied = applied
        self.k_friction = Force.of(T)
        self.s_friction = Force.of(Ts)

        result = resolve_friction(applied, self.vel, self.k_friction, self.s_friction)
        if result.direction != 0.0:
            self.friction_dir = result.direction
        self.f_net = result.net
        self.net_acc = self.f_net / self.mass

    def set_forces(self, applied: Force, net: Force, friction: Force, static: Force) -> None:
        """Store forces resolved by the owner instead of by this component."""
        self.applied = applied
        self.s_friction = static
        self.k_friction = abs(friction)
        if friction:
            self.friction_dir = -sign(friction)
        self.f_net = net
        self.net_acc = net / self.mass

    def clamp_force_by_pos_limits(self, force: Force) -> Force:
        """Prevent applying force when against the frame."""
        if self.pos <= self.limit_min and force < 0.0:
            return Force.ZERO
        if self.pos >= self.limit_max and force > 0.0:
            return Force.ZERO
        return force

    def __repr__(self):
        return (
            f"Component(pos={self.pos:.4f}, vel={self.vel:.4f}, "
            f"acc={self.acc.value:.4f}, f_net={self.f_net.value:.3f})"
        )
