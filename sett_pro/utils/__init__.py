"""Utility modules for SETT Pro."""

from sett_pro.utils.constants import DEG_TO_RAD, P_ATM, TWO_PI
from sett_pro.utils.units import convert, get_unit_registry, to_si

__all__ = ["DEG_TO_RAD", "P_ATM", "TWO_PI", "convert", "get_unit_registry", "to_si"]
