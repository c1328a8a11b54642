"""Run results for reporting and persistence."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np

from sett_pro.core.settings import RunInputs
from sett_pro.engine.performance import Performance
from sett_pro.engine.run import Engine


@dataclass
class RunResults:
    """Scalar summaries and time series of a converged run.

    Time series are kept apart from the scalar summary so they can be
    written to HDF5 while the summary goes to JSON.
    """

    inputs: dict[str, float]
    fluid: dict[str, Any]
    components: dict[str, dict[str, Any]]
    iterations: int
    temperatures: dict[str, float]
    pressure: dict[str, float]
    mass_flows: dict[str, float]
    heat_flows: dict[str, float]
    regen_imbalance: float
    performance: dict[str, Any]
    time_series: dict[str, np.ndarray] = field(default_factory=dict, repr=False)

    @classmethod
    def from_engine(cls, engine: Engine, inputs: RunInputs) -> RunResults:
        state = engine.state
        performance = Performance.from_engine(engine)
        return cls(
            inputs=asdict(inputs),
            fluid=state.fluid.summary(),
            components=engine.components.summary(),
            iterations=engine.iterations,
            temperatures=state.temp.as_dict(),
            pressure=asdict(state.pres),
            mass_flows=asdict(state.mass_flow),
            heat_flows=asdict(state.heat_flow),
            regen_imbalance=state.regen_imbalance,
            performance=performance.to_dict(),
            time_series=engine.trajectory.to_arrays(),
        )

    def summary(self) -> dict[str, Any]:
        """Everything except the time series."""
        data = asdict(self)
        data.pop("time_series")
        return data

    def to_dict(self) -> dict[str, Any]:
        data = self.summary()
        data["time_series"] = {k: v.tolist() for k, v in self.time_series.items()}
        return data
