"""Regenerator models for SETT Pro."""

from __future__ import annotations

from typing import Any

from sett_pro.components.base import ParasiticPower, Regenerator, RegeneratorState


class FixedApproachRegenerator(Regenerator):
    """Regenerator with a constant approach temperature.

    Args:
        vol: Gas volume [m³].
        approach: Approach temperature [K].
        R_hyd: Hydraulic resistance [1/(m·s)].
        Q_parasitic: Heat leaking through the regenerator to the sink [W].
        name: Component name.
    """

    model = "fixed_approach"

    def __init__(
        self,
        vol: float = 1e-4,
        approach: float = 10.0,
        R_hyd: float = 0.0,
        Q_parasitic: float = 0.0,
        name: str = "regenerator",
    ):
        if vol < 0:
            raise ValueError(f"Regenerator volume must be non-negative, got {vol}")
        if approach < 0:
            raise ValueError(f"Approach temperature must be non-negative, got {approach}")
        self.name = name
        self.vol = vol
        self.DT = approach
        self.R_hyd = R_hyd
        self.Q_parasitic = Q_parasitic

    def volume(self) -> float:
        return self.vol

    def initial_approach(self) -> float:
        return self.DT

    def approach(self, state: RegeneratorState) -> float:
        return self.DT

    def hydraulic_resistance(self, state: RegeneratorState) -> float:
        return self.R_hyd

    def parasitics(self, state: RegeneratorState) -> ParasiticPower:
        return ParasiticPower(thermal=self.Q_parasitic)

    def params(self) -> dict[str, Any]:
        return {
            "vol": self.vol,
            "DT": self.DT,
            "R_hyd": self.R_hyd,
            "Q_parasitic": self.Q_parasitic,
        }


class FixedConductanceRegenerator(Regenerator):
    """Balanced counter-flow regenerator with a constant conductance UA.

    For balanced flow the effectiveness is ``ε = NTU / (1 + NTU)`` and the
    approach at each end is ``(1 - ε) · (T_hhx - T_chx)``.

    Args:
        vol: Gas volume [m³].
        UA: Overall conductance between gas and matrix [W/K].
        R_hyd: Hydraulic resistance [1/(m·s)].
        Q_parasitic: Heat leaking through the regenerator to the sink [W].
        name: Component name.
    """

    model = "fixed_conductance"
    INITIAL_APPROACH = 10.0  # K

    def __init__(
        self,
        vol: float = 1e-4,
        UA: float = 1000.0,
        R_hyd: float = 0.0,
        Q_parasitic: float = 0.0,
        name: str = "regenerator",
    ):
        if vol < 0:
            raise ValueError(f"Regenerator volume must be non-negative, got {vol}")
        if UA <= 0:
            raise ValueError(f"Conductance must be positive, got {UA}")
        self.name = name
        self.vol = vol
        self.UA = UA
        self.R_hyd = R_hyd
        self.Q_parasitic = Q_parasitic

    def volume(self) -> float:
        return self.vol

    def initial_approach(self) -> float:
        return self.INITIAL_APPROACH

    def approach(self, state: RegeneratorState) -> float:
        C = state.m_dot * state.cp
        if C <= 0:
            return 0.0
        ntu = self.UA / C
        return (state.temp_hhx - state.temp_chx) / (1.0 + ntu)

    def hydraulic_resistance(self, state: RegeneratorState) -> float:
        return self.R_hyd

    def parasitics(self, state: RegeneratorState) -> ParasiticPower:
        return ParasiticPower(thermal=self.Q_parasitic)

    def params(self) -> dict[str, Any]:
        return {
            "vol": self.vol,
            "UA": self.UA,
            "R_hyd": self.R_hyd,
            "Q_parasitic": self.Q_parasitic,
        }
