"""Unit conversion utilities for SETT Pro.

Provides a lightweight unit conversion system built on top of pint, used
to read configuration values written with units (``"10 MPa"``,
``"27 degC"``, ``"40 cm^3"``) and to present results.
"""

from __future__ import annotations

from functools import lru_cache

import pint

# Module-level unit registry (singleton)
_ureg = pint.UnitRegistry(autoconvert_offset_to_baseunit=True)


def get_unit_registry() -> pint.UnitRegistry:
    """Return the shared pint UnitRegistry instance."""
    return _ureg


Q_ = _ureg.Quantity


# --- Configuration values ---


def to_si(value: float | int | str, unit: str) -> float:
    """Convert a configuration value to the magnitude in *unit*.

    Bare numbers are taken to already be in *unit*. Strings are parsed by
    pint and must carry a dimension compatible with *unit*; a unitless
    numeric string is treated like a bare number.

    Args:
        value: Number, or string such as ``"10 MPa"`` or ``"27 degC"``.
        unit: Target unit string (e.g. ``"Pa"``, ``"K"``, ``"m^3"``).

    Returns:
        Magnitude in the target unit.

    Raises:
        ValueError: If the string cannot be parsed or has the wrong dimension.
    """
    if isinstance(value, bool):
        raise ValueError(f"Expected a quantity in {unit}, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        pass
    try:
        quantity = _parse(value.strip())
    except (pint.errors.PintError, AttributeError, TypeError, ValueError) as exc:
        raise ValueError(f"Cannot parse quantity {value!r}: {exc}") from exc
    if not isinstance(quantity, pint.Quantity):
        return float(quantity)
    if quantity.dimensionless and not _ureg.Quantity(1, unit).dimensionless:
        return float(quantity.magnitude)
    try:
        return float(quantity.to(unit).magnitude)
    except pint.errors.DimensionalityError as exc:
        raise ValueError(f"Quantity {value!r} is not convertible to {unit}") from exc


def _parse(text: str) -> pint.Quantity | float:
    # "27 degC" must be built as a Quantity; parse_expression would treat it as
    # a multiplication of an offset unit, which pint rejects
    parts = text.split(maxsplit=1)
    if len(parts) == 2:
        try:
            return Q_(float(parts[0]), parts[1])
        except ValueError:
            pass
    return _ureg.parse_expression(text)


# --- Display conversion ---


@lru_cache(maxsize=256)
def convert(value: float, from_unit: str, to_unit: str) -> float:
    """General-purpose unit conversion.

    Args:
        value: Numeric value in *from_unit*.
        from_unit: Source unit string.
        to_unit: Target unit string.

    Returns:
        Converted numeric value.
    """
    return Q_(value, from_unit).to(to_unit).magnitude
