"""Engine component models for SETT Pro.

- base: capability contracts and averaged state snapshots
- heat_exchanger: fixed-approach and fixed-conductance heat exchangers
- regenerator: fixed-approach and fixed-conductance regenerators
- working_spaces: sinusoidal drive
"""

from sett_pro.components.base import (
    Components,
    HeatExchanger,
    HeatExchangerState,
    ParasiticPower,
    Regenerator,
    RegeneratorState,
    ThermalResistance,
    Volumes,
    WorkingSpaceParasitics,
    WorkingSpaces,
    WorkingSpacesState,
)
from sett_pro.components.heat_exchanger import FixedApproach, FixedConductance
from sett_pro.components.regenerator import (
    FixedApproachRegenerator,
    FixedConductanceRegenerator,
)
from sett_pro.components.working_spaces import SinusoidalDrive

__all__ = [
    "Components",
    "FixedApproach",
    "FixedApproachRegenerator",
    "FixedConductance",
    "FixedConductanceRegenerator",
    "HeatExchanger",
    "HeatExchangerState",
    "ParasiticPower",
    "Regenerator",
    "RegeneratorState",
    "SinusoidalDrive",
    "ThermalResistance",
    "Volumes",
    "WorkingSpaceParasitics",
    "WorkingSpaces",
    "WorkingSpacesState",
]
