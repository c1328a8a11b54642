"""Base classes for engine components.

Defines the capability contracts the engine loop queries each outer round:
volumes, approach temperatures, hydraulic resistances and parasitic powers
as functions of a small averaged state snapshot.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(frozen=True)
class ParasiticPower:
    """Parasitic losses attributed to a component."""

    thermal: float = 0.0  # W
    mechanical: float = 0.0  # W
    electrical: float = 0.0  # W


@dataclass(frozen=True)
class HeatExchangerState:
    """Cycle-averaged state of a heat exchanger.

    ``ext_temp`` is the sink temperature for the cold heat exchanger and
    the source temperature for the hot one.
    """

    temp: float  # K
    pres: float  # Pa
    dens: float  # kg/m³
    cp: float  # J/(kg·K)
    m_dot: float  # kg/s, average flow magnitude
    Q_dot: float  # W, average heat flow
    ext_temp: float  # K


@dataclass(frozen=True)
class RegeneratorState:
    """Cycle-averaged state of the regenerator and its neighbours."""

    temp: float  # K, mean matrix temperature
    pres: float  # Pa
    dens: float  # kg/m³
    cp: float  # J/(kg·K)
    m_dot: float  # kg/s
    Q_dot: float  # W, net heat deposited in the matrix
    temp_chx: float  # K
    temp_hhx: float  # K


@dataclass(frozen=True)
class WorkingSpacesState:
    """Conditions the working-space model may depend on."""

    pres: float  # Pa, cycle-average pressure
    temp_chx: float  # K
    temp_hhx: float  # K


@dataclass(frozen=True)
class Volumes:
    """Working-space volumes and their rates of change at one instant."""

    V_c: float  # m³
    V_e: float  # m³
    dVc_dt: float  # m³/s
    dVe_dt: float  # m³/s


VolumeFunction = Callable[[float], Volumes]


@dataclass(frozen=True)
class ThermalResistance:
    """Gas-to-wall thermal resistance of each working space [K/W]."""

    comp: float = math.inf
    exp: float = math.inf


@dataclass(frozen=True)
class WorkingSpaceParasitics:
    """Parasitic losses of the compression and expansion spaces."""

    comp: ParasiticPower = field(default_factory=ParasiticPower)
    exp: ParasiticPower = field(default_factory=ParasiticPower)


class EngineComponent(ABC):
    """Common base for every engine component model."""

    name: str = ""
    component_type: str = ""
    model: str = ""

    def params(self) -> dict[str, Any]:
        """Model parameters, for reports and serialised results."""
        return {}

    def summary(self) -> dict[str, Any]:
        """Return a summary dictionary of the component."""
        return {
            "name": self.name,
            "type": self.component_type,
            "model": self.model,
            **self.params(),
        }


class HeatExchanger(EngineComponent):
    """Cold or hot heat exchanger between the gas and an external reservoir."""

    component_type = "heat_exchanger"

    @abstractmethod
    def volume(self) -> float:
        """Gas volume [m³]."""
        ...

    @abstractmethod
    def initial_approach(self) -> float:
        """Approach temperature [K] used before any cycle has been solved."""
        ...

    @abstractmethod
    def approach(self, state: HeatExchangerState) -> float:
        """Gas-to-reservoir approach temperature [K]."""
        ...

    @abstractmethod
    def hydraulic_resistance(self, state: HeatExchangerState) -> float:
        """Hydraulic resistance [1/(m·s)], pressure drop = R · m_dot / rho."""
        ...

    @abstractmethod
    def parasitics(self, state: HeatExchangerState) -> ParasiticPower:
        ...


class Regenerator(EngineComponent):
    """Regenerator between the cold and hot heat exchangers."""

    component_type = "regenerator"

    @abstractmethod
    def volume(self) -> float:
        ...

    @abstractmethod
    def initial_approach(self) -> float:
        ...

    @abstractmethod
    def approach(self, state: RegeneratorState) -> float:
        """Approach temperature [K] at the tighter of the two ends."""
        ...

    @abstractmethod
    def hydraulic_resistance(self, state: RegeneratorState) -> float:
        ...

    @abstractmethod
    def parasitics(self, state: RegeneratorState) -> ParasiticPower:
        ...


class WorkingSpaces(EngineComponent):
    """Compression and expansion spaces with their drive mechanism."""

    component_type = "working_spaces"

    @abstractmethod
    def frequency(self, state: WorkingSpacesState) -> float:
        """Engine frequency [Hz]."""
        ...

    @abstractmethod
    def volumes(self, state: WorkingSpacesState) -> VolumeFunction:
        """Return a callable giving the volumes at a time within the cycle."""
        ...

    def thermal_resistance(self, state: WorkingSpacesState) -> ThermalResistance:
        return ThermalResistance()

    def parasitics(self, state: WorkingSpacesState) -> WorkingSpaceParasitics:
        return WorkingSpaceParasitics()


@dataclass(frozen=True)
class Components:
    """The four component models making up one engine."""

    chx: HeatExchanger
    hhx: HeatExchanger
    regen: Regenerator
    ws: WorkingSpaces

    def summary(self) -> dict[str, dict[str, Any]]:
        return {
            "chx": self.chx.summary(),
            "hhx": self.hhx.summary(),
            "regen": self.regen.summary(),
            "ws": self.ws.summary(),
        }
