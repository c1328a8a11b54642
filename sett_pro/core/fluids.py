"""Working-fluid property models for SETT Pro.

Every model returns a :class:`FluidProperties` bundle at a given
temperature [K] and pressure [Pa]: density, specific internal energy,
specific enthalpy, isobaric specific heat and the four partial derivatives
the state equations need.

Two models are provided:
- IdealGas: polynomial cp ideal gas (hydrogen, helium)
- CoolPropFluid: real-gas properties from CoolProp's AbstractState
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import CoolProp.CoolProp as CP

logger = logging.getLogger(__name__)


class FluidPropertyError(Exception):
    """Raised when a fluid property calculation fails."""


@dataclass(frozen=True)
class FluidProperties:
    """Thermophysical properties at one (temperature, pressure) state."""

    dens: float  # kg/m³
    inte: float  # J/kg
    enth: float  # J/kg
    cp: float  # J/(kg·K)
    dd_dP_T: float  # (kg/m³)/Pa
    dd_dT_P: float  # (kg/m³)/K
    du_dP_T: float  # (J/kg)/Pa
    du_dT_P: float  # (J/kg)/K


class WorkingFluid(ABC):
    """Property provider for the engine working fluid.

    Implementations must behave as pure functions of (temperature, pressure).
    """

    name: str = ""
    model: str = ""

    @abstractmethod
    def properties(self, temp: float, pres: float) -> FluidProperties:
        """Return the full property bundle at *temp* [K] and *pres* [Pa]."""
        ...

    def dens(self, temp: float, pres: float) -> float:
        return self.properties(temp, pres).dens

    def enth(self, temp: float, pres: float) -> float:
        return self.properties(temp, pres).enth

    def cp(self, temp: float, pres: float) -> float:
        return self.properties(temp, pres).cp

    def summary(self) -> dict[str, Any]:
        return {"name": self.name, "model": self.model}

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.name}')"


# --- Ideal gas ---


@dataclass(frozen=True)
class _GasData:
    R: float  # J/(kg·K), specific gas constant
    ref_temp: float  # K, temperature at which h = u = 0
    cp_coefs: tuple[float, ...]  # cp(T) = sum(c_i * T**i)


_IDEAL_GASES: dict[str, _GasData] = {
    "hydrogen": _GasData(
        R=4124.2,
        ref_temp=250.0,
        cp_coefs=(
            12471.4839,
            13.3194432,
            -0.0347782806,
            0.0000431784838,
            -2.42883335e-08,
            5.14289838e-12,
        ),
    ),
    "helium": _GasData(
        R=2077.23,
        ref_temp=250.0,
        cp_coefs=(5193.17,),
    ),
}


class IdealGas(WorkingFluid):
    """Ideal gas with a temperature-dependent specific heat.

    Enthalpy is the integral of cp from the reference temperature, and
    internal energy is ``h - R (T - T_ref)`` so both vanish at ``T_ref``.

    Args:
        name: Gas name (``"hydrogen"`` or ``"helium"``, case-insensitive).
    """

    model = "ideal_gas"

    def __init__(self, name: str = "hydrogen"):
        key = name.lower()
        if key not in _IDEAL_GASES:
            raise FluidPropertyError(
                f"Unknown ideal gas '{name}'. Available: {list(_IDEAL_GASES)}"
            )
        self.name = key
        self._data = _IDEAL_GASES[key]
        # enthalpy antiderivative coefficients: h(T) = sum(c_i / (i+1) * T**(i+1))
        self._enth_coefs = tuple(c / (i + 1) for i, c in enumerate(self._data.cp_coefs))
        self._ref_enth = self._enth_poly(self._data.ref_temp)

    @property
    def R(self) -> float:
        return self._data.R

    @property
    def ref_temp(self) -> float:
        return self._data.ref_temp

    def _cp(self, temp: float) -> float:
        result = 0.0
        for c in reversed(self._data.cp_coefs):
            result = result * temp + c
        return result

    def _enth_poly(self, temp: float) -> float:
        result = 0.0
        for c in reversed(self._enth_coefs):
            result = result * temp + c
        return result * temp

    def properties(self, temp: float, pres: float) -> FluidProperties:
        if not (temp > 0.0 and pres > 0.0):
            raise FluidPropertyError(
                f"Invalid state for {self.name}: T = {temp} K, P = {pres} Pa"
            )
        R = self._data.R
        cp = self._cp(temp)
        enth = self._enth_poly(temp) - self._ref_enth
        return FluidProperties(
            dens=pres / (R * temp),
            inte=enth - R * (temp - self._data.ref_temp),
            enth=enth,
            cp=cp,
            dd_dP_T=1.0 / (R * temp),
            dd_dT_P=-pres / (R * temp**2),
            du_dP_T=0.0,
            du_dT_P=cp - R,
        )

    def summary(self) -> dict[str, Any]:
        return {**super().summary(), "R": self.R, "ref_temp": self.ref_temp}


def list_ideal_gases() -> list[str]:
    """Return the names of the built-in ideal gases."""
    return list(_IDEAL_GASES)


# --- Real gas (CoolProp) ---


class CoolPropFluid(WorkingFluid):
    """Real-gas properties from CoolProp.

    Wraps CoolProp's low-level AbstractState, which is much faster than
    repeated PropsSI calls and exposes the partial derivatives directly.

    Args:
        name: CoolProp fluid name (e.g. "Hydrogen", "Helium").
        backend: CoolProp backend string. ``"HEOS"`` for built-in,
                 ``"REFPROP"`` if RefProp is installed.
    """

    model = "coolprop"

    def __init__(self, name: str = "Hydrogen", backend: str = "HEOS"):
        self.name = name
        self.backend = backend
        try:
            self._state = CP.AbstractState(backend, name)
        except Exception as exc:
            raise FluidPropertyError(
                f"Cannot create fluid '{name}' with backend '{backend}': {exc}"
            ) from exc

    def properties(self, temp: float, pres: float) -> FluidProperties:
        s = self._state
        try:
            s.update(CP.PT_INPUTS, pres, temp)
            return FluidProperties(
                dens=s.rhomass(),
                inte=s.umass(),
                enth=s.hmass(),
                cp=s.cpmass(),
                dd_dP_T=s.first_partial_deriv(CP.iDmass, CP.iP, CP.iT),
                dd_dT_P=s.first_partial_deriv(CP.iDmass, CP.iT, CP.iP),
                du_dP_T=s.first_partial_deriv(CP.iUmass, CP.iP, CP.iT),
                du_dT_P=s.first_partial_deriv(CP.iUmass, CP.iT, CP.iP),
            )
        except Exception as exc:
            raise FluidPropertyError(
                f"State update failed for {self.name} at T = {temp} K, P = {pres} Pa: {exc}"
            ) from exc

    def summary(self) -> dict[str, Any]:
        return {**super().summary(), "backend": self.backend}

    def __repr__(self) -> str:
        return f"CoolPropFluid('{self.name}', backend='{self.backend}')"


# --- Factory ---


def get_fluid(model: str, **params: Any) -> WorkingFluid:
    """Create a working fluid from a model name and parameters.

    Args:
        model: ``"ideal_gas"`` or ``"coolprop"``.
        **params: Keyword arguments for the model constructor.

    Returns:
        WorkingFluid instance.

    Raises:
        FluidPropertyError: If the model is unknown or cannot be created.
    """
    models: dict[str, type[WorkingFluid]] = {
        "ideal_gas": IdealGas,
        "coolprop": CoolPropFluid,
    }
    try:
        cls = models[model.lower()]
    except KeyError:
        raise FluidPropertyError(
            f"Unknown fluid model '{model}'. Available: {list(models)}"
        ) from None
    try:
        return cls(**params)
    except TypeError as exc:
        raise FluidPropertyError(f"Invalid parameters for fluid model '{model}': {exc}") from exc
