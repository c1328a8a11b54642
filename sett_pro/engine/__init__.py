"""Engine-level solver for SETT Pro.

- state: engine temperatures and cycle averages for the outer loop
- run: the concrete cycle and the thermal-balance loop
- performance: powers, heats, torque and efficiency
- results: serialisable run results
"""

from sett_pro.engine.performance import Performance
from sett_pro.engine.results import RunResults
from sett_pro.engine.run import Engine, Run, SweepPoint, run_engine, sweep_source_temperatures
from sett_pro.engine.state import EngineState

__all__ = [
    "Engine",
    "EngineState",
    "Performance",
    "Run",
    "RunResults",
    "SweepPoint",
    "run_engine",
    "sweep_source_temperatures",
]
