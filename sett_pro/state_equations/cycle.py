"""Cycle interface and the inner steady-state loop.

A :class:`Cycle` supplies volume inputs as a function of time and
conditions. :meth:`Cycle.find_steady_state` searches for initial conditions
that the cycle reproduces after one period, by plain successive
substitution on the working-space temperatures.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from sett_pro.core.settings import ConvergenceTolerance, OdeTolerance
from sett_pro.errors import SteadyStateNotConverged
from sett_pro.state_equations.decomposition import LUDecomposition, MatrixDecomposition
from sett_pro.state_equations.integrator import Integration
from sett_pro.state_equations.types import Conditions, Inputs, Trajectory

logger = logging.getLogger(__name__)

PROBE_POINTS = 2


@dataclass(frozen=True)
class SteadyStateInputs:
    """Inputs to the steady-state search."""

    pres_zero: float  # Pa, pressure at t = 0, reset every round
    temp_comp_hint: float  # K
    temp_exp_hint: float  # K
    num_points: int = 30
    ode_tol: OdeTolerance = field(default_factory=OdeTolerance)
    conv_tol: ConvergenceTolerance = field(default_factory=ConvergenceTolerance)
    max_iters: int = 20


class Cycle(ABC):
    """An engine cycle the state equations can be integrated over."""

    decomposition: MatrixDecomposition = LUDecomposition()

    @abstractmethod
    def calculate_inputs(self, time: float, conditions: Conditions) -> Inputs:
        """Volume inputs at a time within the cycle."""
        ...

    @abstractmethod
    def period(self) -> float:
        """Cycle period [s]."""
        ...

    @abstractmethod
    def pres_zero(self) -> float:
        """Pressure at ``t = 0`` [Pa]."""
        ...

    def integrate(
        self,
        initial_conditions: Conditions,
        num_points: int,
        ode_tol: OdeTolerance,
    ) -> Integration:
        """Integrate one period from the given initial conditions."""
        return Integration.run(self, initial_conditions, num_points, ode_tol)

    def find_steady_state(self, inputs: SteadyStateInputs) -> Trajectory:
        """Find the cyclic steady state by successive substitution.

        Each round integrates a cheap two-point probe. Once the end-of-cycle
        working-space temperatures match the start within ``conv_tol``, the
        cycle is integrated again at full resolution. Pressure is reset to
        ``pres_zero`` every round and is not part of the convergence check.

        Args:
            inputs: Hints, resolution, tolerances and iteration cap.

        Returns:
            Full-resolution Trajectory of the converged cycle.

        Raises:
            SteadyStateNotConverged: If ``max_iters`` rounds do not converge.
            IntegrationFailure: If any integration fails.
            FlowDirectionDivergence: From a derivative evaluation.
            NumericalFailure: From a derivative evaluation.
        """
        ic = Conditions(P=inputs.pres_zero, T_c=inputs.temp_comp_hint, T_e=inputs.temp_exp_hint)

        for iteration in range(1, inputs.max_iters + 1):
            probe = self.integrate(ic, PROBE_POINTS, inputs.ode_tol)
            end = probe.final_conditions
            logger.debug(
                "Steady-state round %d: T_c %.4f -> %.4f K, T_e %.4f -> %.4f K",
                iteration,
                ic.T_c,
                end.T_c,
                ic.T_e,
                end.T_e,
            )

            if probe.is_converged(inputs.conv_tol):
                logger.debug("Cyclic steady state found after %d rounds", iteration)
                full = self.integrate(ic, inputs.num_points, inputs.ode_tol)
                return full.into_trajectory()

            ic = Conditions(P=inputs.pres_zero, T_c=end.T_c, T_e=end.T_e)

        logger.warning("Cyclic steady state not found in %d rounds", inputs.max_iters)
        raise SteadyStateNotConverged(
            f"Working-space temperatures did not close within {inputs.max_iters} cycles "
            f"(last T_c = {ic.T_c:.4f} K, T_e = {ic.T_e:.4f} K)"
        )
