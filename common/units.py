"""
Unit Registry and Angle Conversion for the Globe Projection Engine.

This module provides a centralized unit system using the `pint` library.
Internally the engine works exclusively in radians; angular units only
matter at the input/output boundary (e.g. `geo_coordinates(..., unit=...)`
or `GeoCoordinate.from_unit`). Conversions at that boundary go through the
registry so that degrees, radians, arc minutes or any other pint angle unit
are handled uniformly.

Example Usage
-------------
>>> from common.units import Q_, to_radians, AngleUnit
>>> to_radians(Q_(90, 'degree'))
1.5707963267948966
>>> to_radians(180.0, AngleUnit.DEGREE)
3.141592653589793
"""

from enum import Enum
from typing import Union
import warnings

import pint
from pint import UnitRegistry as PintUnitRegistry

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity


class AngleUnit(Enum):
    """Angular unit tag used at the input/output boundary."""

    RADIAN = "radian"
    DEGREE = "degree"

    @property
    def pint_unit(self) -> pint.Unit:
        """The matching pint unit."""
        return ureg.Unit(self.value)


AngleLike = Union[float, pint.Quantity]


def ensure_angle(value: AngleLike, default_unit: AngleUnit) -> pint.Quantity:
    """Ensure a value is an angular pint Quantity.

    Parameters
    ----------
    value : float or pint.Quantity
        The value to convert.
    default_unit : AngleUnit
        The unit to apply if value is a bare number.

    Returns
    -------
    pint.Quantity
        The value with angular units.

    Raises
    ------
    ValueError
        If a quantity with non-angular dimensionality is passed.

    Warnings
    --------
    Issues a warning if a bare number is provided without units.
    """
    if isinstance(value, pint.Quantity):
        if value.dimensionality != ureg.radian.dimensionality:
            raise ValueError(
                f"Expected an angle, got a quantity in {value.units}"
            )
        return value
    warnings.warn(
        f"Bare number {value} provided without units. "
        f"Assuming {default_unit.value}. Consider using explicit units.",
        UserWarning,
        stacklevel=2
    )
    return Q_(value, default_unit.pint_unit)


def to_radians(value: AngleLike, unit: AngleUnit = AngleUnit.RADIAN) -> float:
    """Convert an angle to radians.

    Parameters
    ----------
    value : float or pint.Quantity
        The angle. Quantities carry their own unit and ignore `unit`.
    unit : AngleUnit
        Unit of a bare float value.

    Returns
    -------
    float
        The angle in radians.
    """
    if isinstance(value, pint.Quantity):
        return float(value.to(ureg.radian).magnitude)
    if unit is AngleUnit.RADIAN:
        return float(value)
    return float(Q_(value, unit.pint_unit).to(ureg.radian).magnitude)


def from_radians(value: float, unit: AngleUnit) -> float:
    """Convert an angle in radians into `unit`.

    Parameters
    ----------
    value : float
        Angle in radians.
    unit : AngleUnit
        Target unit.

    Returns
    -------
    float
        The angle expressed in `unit`.
    """
    if unit is AngleUnit.RADIAN:
        return float(value)
    return float(Q_(value, ureg.radian).to(unit.pint_unit).magnitude)

