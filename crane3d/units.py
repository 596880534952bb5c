# crane3d/units.py

"""Dimensional scalar types.

Force, Mass and Accel each wrap a single float.  Only dimensionally
consistent arithmetic is defined:

    Mass * Accel  -> Force
    Accel * Mass  -> Force
    Force / Mass  -> Accel

Same-type addition/subtraction, negation, comparison and scaling by a plain
number are allowed.  Anything else (e.g. ``Force + Mass``) raises TypeError.
"""

from __future__ import annotations

from numbers import Real
from typing import TypeVar, Union

U = TypeVar("U", bound="Unit")


class Unit:
    """Base class of a dimensional scalar. Not used directly."""

    __slots__ = ("value",)

    def __init__(self, value: float = 0.0):
        object.__setattr__(self, "value", float(value))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def of(cls: type[U], x: Union[U, float]) -> U:
        """Coerce a plain number (or an instance of this type) into this type."""
        if isinstance(x, cls):
            return x
        if isinstance(x, Unit):
            raise TypeError(f"cannot convert {type(x).__name__} to {cls.__name__}")
        return cls(x)

    # --- same-type arithmetic -------------------------------------------

    def __add__(self, other):
        if type(other) is type(self):
            return type(self)(self.value + other.value)
        return NotImplemented

    def __sub__(self, other):
        if type(other) is type(self):
            return type(self)(self.value - other.value)
        return NotImplemented

    def __neg__(self):
        return type(self)(-self.value)

    def __pos__(self):
        return self

    def __abs__(self):
        return type(self)(abs(self.value))

    # --- scaling by a dimensionless number -------------------------------

    def __mul__(self, other):
        if isinstance(other, Real) and not isinstance(other, bool):
            return type(self)(self.value * other)
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, Real) and not isinstance(other, bool):
            return type(self)(other * self.value)
        return NotImplemented

    def __truediv__(self, other):
        if type(other) is type(self):
            # ratio of two like quantities is dimensionless
            return self.value / other.value
        if isinstance(other, Real) and not isinstance(other, bool):
            return type(self)(self.value / other)
        return NotImplemented

    # --- comparison -------------------------------------------------------

    def _cmp_value(self, other):
        if type(other) is type(self):
            return other.value
        if isinstance(other, Real) and not isinstance(other, bool):
            return float(other)
        return None

    def __eq__(self, other):
        v = self._cmp_value(other)
        if v is None:
            return NotImplemented
        return self.value == v

    def __lt__(self, other):
        v = self._cmp_value(other)
        if v is None:
            return NotImplemented
        return self.value < v

    def __le__(self, other):
        v = self._cmp_value(other)
        if v is None:
            return NotImplemented
        return self.value <= v

    def __gt__(self, other):
        v = self._cmp_value(other)
        if v is None:
            return NotImplemented
        return self.value > v

    def __ge__(self, other):
        v = self._cmp_value(other)
        if v is None:
            return NotImplemented
        return self.value >= v

    def __hash__(self):
        return hash(self.value)

    def __float__(self):
        return self.value

    def __bool__(self):
        return self.value != 0.0

    def __repr__(self):
        return f"{type(self).__name__}({self.value!r})"


class Force(Unit):
    """Force in Newtons."""

    __slots__ = ()

    def __truediv__(self, other):
        # a = F/m
        if isinstance(other, Mass):
            return Accel(self.value / other.value)
        return super().__truediv__(other)


class Mass(Unit):
    """Mass in kilograms."""

    __slots__ = ()

    def __mul__(self, other):
        # F = ma
        if isinstance(other, Accel):
            return Force(self.value * other.value)
        return super().__mul__(other)


class Accel(Unit):
    """Acceleration in m/s²."""

    __slots__ = ()

    def __mul__(self, other):
        # F = am
        if isinstance(other, Mass):
            return Force(self.value * other.value)
        return super().__mul__(other)


Force.ZERO = Force(0.0)
Mass.ZERO = Mass(0.0)
Accel.ZERO = Accel(0.0)


def newtons(x: float) -> Force:
    return Force(x)


def kilograms(x: float) -> Mass:
    return Mass(x)


def meters_per_s2(x: float) -> Accel:
    return Accel(x)


def sign(x: Union[Unit, float]) -> float:
    """Return 1.0, -1.0 or 0.0 according to the sign of *x*."""
    v = x.value if isinstance(x, Unit) else x
    return 1.0 if v > 0 else (-1.0 if v < 0 else 0.0)
