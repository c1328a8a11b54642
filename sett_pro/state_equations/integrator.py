"""Integration of the state equations over one engine cycle.

Uses scipy's Dormand-Prince RK45 stepper with dense output resampled onto
uniformly spaced report times.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from scipy.integrate import solve_ivp

from sett_pro.core.settings import ConvergenceTolerance, OdeTolerance
from sett_pro.errors import IntegrationFailure
from sett_pro.state_equations.flow_direction import FlowDirection, FlowDirectionResolver
from sett_pro.state_equations.types import Conditions, Trajectory, Values

if TYPE_CHECKING:
    from sett_pro.state_equations.cycle import Cycle

logger = logging.getLogger(__name__)


class _Derivatives:
    """ODE right-hand side ``d/dt [P, T_c, T_e]`` for one integration.

    The last resolved flow direction is kept as a seed for the next
    evaluation. It never affects the result, only how many solves the
    resolver needs.
    """

    def __init__(self, cycle: Cycle, resolver: FlowDirectionResolver):
        self.cycle = cycle
        self.resolver = resolver
        self.flow_dir = FlowDirection()
        self.evaluations = 0

    def __call__(self, t: float, y: np.ndarray) -> np.ndarray:
        inputs = self.cycle.calculate_inputs(t, Conditions.from_array(y))
        resolution = self.resolver.resolve(inputs, self.flow_dir)
        self.flow_dir = resolution.flow_dir
        self.evaluations += 1
        return resolution.solution.derivatives()


@dataclass(frozen=True)
class Point:
    """Integrated conditions at one report time."""

    time: float
    conditions: Conditions


class Integration:
    """Result of integrating one cycle from a set of initial conditions.

    Use :meth:`run` to create one; :meth:`into_trajectory` materialises the
    full Solution at every report time.
    """

    def __init__(self, cycle: Cycle, points: list[Point]):
        if len(points) < 2:
            raise ValueError("An integration needs at least two points")
        self.cycle = cycle
        self.points = points

    @classmethod
    def run(
        cls,
        cycle: Cycle,
        initial_conditions: Conditions,
        num_points: int,
        ode_tol: OdeTolerance,
    ) -> Integration:
        """Integrate one full cycle period.

        Args:
            cycle: Engine cycle providing inputs, period and decomposition.
            initial_conditions: Conditions at ``t = 0``.
            num_points: Number of uniformly spaced report times, both
                endpoints included.
            ode_tol: Integrator error tolerances.

        Returns:
            Integration holding the conditions at each report time.

        Raises:
            ValueError: If ``num_points < 2`` or the period is not positive.
            IntegrationFailure: If the stepper cannot reach the period.
            FlowDirectionDivergence: From a derivative evaluation.
            NumericalFailure: From a derivative evaluation.
        """
        if num_points < 2:
            raise ValueError(f"num_points must be at least 2, got {num_points}")
        period = cycle.period()
        if not period > 0:
            raise ValueError(f"Cycle period must be positive, got {period}")

        rhs = _Derivatives(cycle, FlowDirectionResolver(cycle.decomposition))
        t_eval = np.linspace(0.0, period, num_points)

        result = solve_ivp(
            rhs,
            (0.0, period),
            initial_conditions.to_array(),
            method="RK45",
            t_eval=t_eval,
            rtol=ode_tol.rel,
            atol=ode_tol.abs,
        )

        if result.status != 0:
            raise IntegrationFailure(f"Cycle integration failed: {result.message}")
        if result.t.size != num_points or not np.isclose(result.t[-1], period):
            raise IntegrationFailure(
                f"Integration stopped at t = {result.t[-1] if result.t.size else 0.0:.6g} s "
                f"before the period {period:.6g} s"
            )

        logger.debug("Integrated cycle with %d derivative evaluations", rhs.evaluations)
        points = [
            Point(time=float(t), conditions=Conditions.from_array(result.y[:, i]))
            for i, t in enumerate(result.t)
        ]
        return cls(cycle, points)

    # --- Accessors ---

    @property
    def initial_conditions(self) -> Conditions:
        return self.points[0].conditions

    @property
    def final_conditions(self) -> Conditions:
        return self.points[-1].conditions

    @property
    def final_time(self) -> float:
        return self.points[-1].time

    def is_converged(self, conv_tol: ConvergenceTolerance) -> bool:
        """True if both working-space temperatures close over the cycle."""
        first, last = self.initial_conditions, self.final_conditions
        return conv_tol.is_converged(first.T_c, last.T_c) and conv_tol.is_converged(
            first.T_e, last.T_e
        )

    def into_trajectory(self) -> Trajectory:
        """Re-solve the state equations at every report time.

        Each sample is resolved from the previous sample's flow direction,
        starting from unknown, so directions and Solutions in the output
        are always mutually consistent.
        """
        resolver = FlowDirectionResolver(self.cycle.decomposition)
        flow_dir = FlowDirection()
        values = []
        for point in self.points:
            inputs = self.cycle.calculate_inputs(point.time, point.conditions)
            resolution = resolver.resolve(inputs, flow_dir)
            flow_dir = resolution.flow_dir
            values.append(Values(point.time, point.conditions, resolution.solution))
        return Trajectory(values)
