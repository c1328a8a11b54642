"""Working-space drive models for SETT Pro."""

from __future__ import annotations

import math
from typing import Any

from sett_pro.components.base import (
    ParasiticPower,
    ThermalResistance,
    Volumes,
    VolumeFunction,
    WorkingSpaceParasitics,
    WorkingSpaces,
    WorkingSpacesState,
)
from sett_pro.utils.constants import DEG_TO_RAD, TWO_PI


class SinusoidalDrive(WorkingSpaces):
    """Compression and expansion volumes varying sinusoidally in time.

    With ``θ = 2π f t`` and expansion-space phase lead ``φ``::

        V_c = V_clr_c + V_sw_c / 2 · (1 + cos θ)
        V_e = V_clr_e + V_sw_e / 2 · (1 + cos(θ + φ))

    Args:
        frequency: Engine frequency [Hz].
        phase_angle: Expansion-space phase lead [deg].
        V_swept_c: Compression-space swept volume [m³].
        V_clearance_c: Compression-space clearance volume [m³].
        V_swept_e: Expansion-space swept volume [m³].
        V_clearance_e: Expansion-space clearance volume [m³].
        R_c: Compression-space thermal resistance [K/W] (inf = adiabatic).
        R_e: Expansion-space thermal resistance [K/W] (inf = adiabatic).
        W_parasitic_c: Compression-space mechanical parasitic power [W].
        W_parasitic_e: Expansion-space mechanical parasitic power [W].
        Q_parasitic_e: Expansion-space parasitic heat loss [W].
        name: Component name.
    """

    model = "sinusoidal_drive"

    def __init__(
        self,
        frequency: float = 66.6667,
        phase_angle: float = 90.0,
        V_swept_c: float = 1.128e-4,
        V_clearance_c: float = 4.68e-5,
        V_swept_e: float = 1.128e-4,
        V_clearance_e: float = 1.68e-5,
        R_c: float = math.inf,
        R_e: float = math.inf,
        W_parasitic_c: float = 0.0,
        W_parasitic_e: float = 0.0,
        Q_parasitic_e: float = 0.0,
        name: str = "working_spaces",
    ):
        if frequency <= 0:
            raise ValueError(f"Frequency must be positive, got {frequency}")
        if min(V_swept_c, V_clearance_c, V_swept_e, V_clearance_e) < 0:
            raise ValueError("Swept and clearance volumes must be non-negative")
        if R_c <= 0 or R_e <= 0:
            raise ValueError("Thermal resistances must be positive")
        self.name = name
        self.freq = frequency
        self.phase_angle = phase_angle
        self.V_swept_c = V_swept_c
        self.V_clearance_c = V_clearance_c
        self.V_swept_e = V_swept_e
        self.V_clearance_e = V_clearance_e
        self.R_c = R_c
        self.R_e = R_e
        self.W_parasitic_c = W_parasitic_c
        self.W_parasitic_e = W_parasitic_e
        self.Q_parasitic_e = Q_parasitic_e

    def frequency(self, state: WorkingSpacesState) -> float:
        return self.freq

    def volumes(self, state: WorkingSpacesState) -> VolumeFunction:
        omega = TWO_PI * self.freq
        phase = self.phase_angle * DEG_TO_RAD
        half_sw_c = 0.5 * self.V_swept_c
        half_sw_e = 0.5 * self.V_swept_e
        clr_c = self.V_clearance_c
        clr_e = self.V_clearance_e

        def volumes_at(time: float) -> Volumes:
            theta = omega * time
            return Volumes(
                V_c=clr_c + half_sw_c * (1.0 + math.cos(theta)),
                V_e=clr_e + half_sw_e * (1.0 + math.cos(theta + phase)),
                dVc_dt=-half_sw_c * math.sin(theta) * omega,
                dVe_dt=-half_sw_e * math.sin(theta + phase) * omega,
            )

        return volumes_at

    def thermal_resistance(self, state: WorkingSpacesState) -> ThermalResistance:
        return ThermalResistance(comp=self.R_c, exp=self.R_e)

    def parasitics(self, state: WorkingSpacesState) -> WorkingSpaceParasitics:
        return WorkingSpaceParasitics(
            comp=ParasiticPower(mechanical=self.W_parasitic_c),
            exp=ParasiticPower(thermal=self.Q_parasitic_e, mechanical=self.W_parasitic_e),
        )

    def params(self) -> dict[str, Any]:
        return {
            "frequency": self.freq,
            "phase_angle": self.phase_angle,
            "V_swept_c": self.V_swept_c,
            "V_clearance_c": self.V_clearance_c,
            "V_swept_e": self.V_swept_e,
            "V_clearance_e": self.V_clearance_e,
            "R_c": self.R_c,
            "R_e": self.R_e,
        }
