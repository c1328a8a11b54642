"""Heat exchanger models for SETT Pro.

Both models serve as either the cold (sink-side) or hot (source-side) heat
exchanger; the engine loop applies the approach with the appropriate sign.
"""

from __future__ import annotations

import math
from typing import Any

from sett_pro.components.base import HeatExchanger, HeatExchangerState, ParasiticPower


class FixedApproach(HeatExchanger):
    """Heat exchanger with a constant gas-to-reservoir temperature difference.

    Args:
        vol: Gas volume [m³].
        approach: Approach temperature [K].
        R_hyd: Hydraulic resistance [1/(m·s)].
        parasitics: Constant parasitic losses.
        name: Component name.
    """

    model = "fixed_approach"

    def __init__(
        self,
        vol: float,
        approach: float,
        R_hyd: float = 0.0,
        parasitics: ParasiticPower | None = None,
        name: str = "heat_exchanger",
    ):
        if vol < 0:
            raise ValueError(f"Heat exchanger volume must be non-negative, got {vol}")
        if approach < 0:
            raise ValueError(f"Approach temperature must be non-negative, got {approach}")
        self.name = name
        self.vol = vol
        self.DT = approach
        self.R_hyd = R_hyd
        self._parasitics = parasitics or ParasiticPower()

    def volume(self) -> float:
        return self.vol

    def initial_approach(self) -> float:
        return self.DT

    def approach(self, state: HeatExchangerState) -> float:
        return self.DT

    def hydraulic_resistance(self, state: HeatExchangerState) -> float:
        return self.R_hyd

    def parasitics(self, state: HeatExchangerState) -> ParasiticPower:
        return self._parasitics

    def params(self) -> dict[str, Any]:
        return {"vol": self.vol, "DT": self.DT, "R_hyd": self.R_hyd}


class FixedConductance(HeatExchanger):
    """Heat exchanger with a constant overall conductance UA.

    The reservoir side is isothermal, so the effectiveness-NTU relation
    reduces to::

        C = m_dot · cp,   NTU = UA / C,   ε = 1 - exp(-NTU)
        approach = (Q / C) · (1/ε - 1)

    Args:
        vol: Gas volume [m³].
        UA: Overall conductance [W/K].
        R_hyd: Hydraulic resistance [1/(m·s)].
        parasitics: Constant parasitic losses.
        name: Component name.
    """

    model = "fixed_conductance"
    INITIAL_APPROACH = 10.0  # K

    def __init__(
        self,
        vol: float,
        UA: float,
        R_hyd: float = 0.0,
        parasitics: ParasiticPower | None = None,
        name: str = "heat_exchanger",
    ):
        if vol < 0:
            raise ValueError(f"Heat exchanger volume must be non-negative, got {vol}")
        if UA <= 0:
            raise ValueError(f"Conductance must be positive, got {UA}")
        self.name = name
        self.vol = vol
        self.UA = UA
        self.R_hyd = R_hyd
        self._parasitics = parasitics or ParasiticPower()

    def volume(self) -> float:
        return self.vol

    def initial_approach(self) -> float:
        return self.INITIAL_APPROACH

    def effectiveness(self, state: HeatExchangerState) -> float:
        """Effectiveness of the gas stream against an isothermal reservoir."""
        C = state.m_dot * state.cp
        if C <= 0:
            return 1.0
        return 1.0 - math.exp(-self.UA / C)

    def approach(self, state: HeatExchangerState) -> float:
        C = state.m_dot * state.cp
        if C <= 0:
            # no flow: the gas settles at the reservoir temperature
            return 0.0
        eff = self.effectiveness(state)
        return abs(state.Q_dot) / C * (1.0 / eff - 1.0)

    def hydraulic_resistance(self, state: HeatExchangerState) -> float:
        return self.R_hyd

    def parasitics(self, state: HeatExchangerState) -> ParasiticPower:
        return self._parasitics

    def params(self) -> dict[str, Any]:
        return {"vol": self.vol, "UA": self.UA, "R_hyd": self.R_hyd}
