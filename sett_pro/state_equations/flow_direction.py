"""Flow-direction resolution for the state equations.

The enthalpy carried across each interface depends on the sign of the mass
flow there, which is itself an unknown of the linear system. The resolver
iterates solves until the assumed and solved directions agree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from sett_pro.errors import FlowDirectionDivergence
from sett_pro.state_equations.decomposition import LUDecomposition, MatrixDecomposition
from sett_pro.state_equations.types import Inputs, Solution

if TYPE_CHECKING:
    from sett_pro.state_equations.system import StateEquationSystem

logger = logging.getLogger(__name__)

ALLOWED_FLOW_UPDATES = 3


class Direction(Enum):
    """Direction of mass flow across one interface."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    UNKNOWN = "unknown"

    @classmethod
    def from_value(cls, m_dot: float) -> Direction:
        """Direction implied by a mass-flow rate; zero counts as positive."""
        return cls.POSITIVE if m_dot >= 0.0 else cls.NEGATIVE

    def select(self, positive: float, negative: float) -> float:
        """Pick the upstream value for this direction.

        Args:
            positive: Value upstream of a positive flow.
            negative: Value upstream of a negative flow.

        Returns:
            The matching value, or their mean if the direction is unknown.
        """
        if self is Direction.POSITIVE:
            return positive
        if self is Direction.NEGATIVE:
            return negative
        return 0.5 * (positive + negative)


@dataclass(frozen=True)
class FlowDirection:
    """Flow direction at the four inter-volume interfaces."""

    ck: Direction = Direction.UNKNOWN  # compression space -> cold HX
    kr: Direction = Direction.UNKNOWN  # cold HX -> regenerator
    rl: Direction = Direction.UNKNOWN  # regenerator -> hot HX
    le: Direction = Direction.UNKNOWN  # hot HX -> expansion space

    @classmethod
    def from_solution(cls, solution: Solution) -> FlowDirection:
        return cls(
            ck=Direction.from_value(solution.m_dot_ck),
            kr=Direction.from_value(solution.m_dot_kr),
            rl=Direction.from_value(solution.m_dot_rl),
            le=Direction.from_value(solution.m_dot_le),
        )

    @property
    def is_resolved(self) -> bool:
        return Direction.UNKNOWN not in (self.ck, self.kr, self.rl, self.le)


@dataclass(frozen=True)
class Resolution:
    """A Solution together with the flow directions it is consistent with."""

    solution: Solution
    flow_dir: FlowDirection
    rounds: int  # number of linear solves used


class FlowDirectionResolver:
    """Iterate state-equation solves until flow directions are consistent.

    Args:
        decomposition: Linear-solve strategy (LU if omitted).
        max_updates: Number of direction adjustments allowed before the
            resolution is declared divergent.
    """

    def __init__(
        self,
        decomposition: MatrixDecomposition | None = None,
        max_updates: int = ALLOWED_FLOW_UPDATES,
    ):
        if max_updates < 0:
            raise ValueError(f"max_updates must be non-negative, got {max_updates}")
        self.decomposition = decomposition or LUDecomposition()
        self.max_updates = max_updates

    def resolve(
        self,
        inputs: Inputs | StateEquationSystem,
        hint: FlowDirection | None = None,
    ) -> Resolution:
        """Solve the state equations with self-consistent flow directions.

        Args:
            inputs: Volume inputs, or an already assembled system.
            hint: Starting hypothesis (all unknown if omitted).

        Returns:
            Resolution with the consistent Solution and directions.

        Raises:
            FlowDirectionDivergence: If directions keep changing after
                ``max_updates`` adjustments.
            NumericalFailure: If a linear solve fails.
        """
        from sett_pro.state_equations.system import StateEquationSystem

        system = inputs if isinstance(inputs, StateEquationSystem) else StateEquationSystem(inputs)
        flow_dir = hint or FlowDirection()

        for rounds in range(1, self.max_updates + 2):
            solution = system.solve(flow_dir, self.decomposition)
            actual = FlowDirection.from_solution(solution)
            if actual == flow_dir:
                return Resolution(solution=solution, flow_dir=actual, rounds=rounds)
            flow_dir = actual

        logger.debug("Flow direction resolution diverged at %s", flow_dir)
        raise FlowDirectionDivergence(
            f"Flow directions did not settle after {self.max_updates} adjustments "
            f"(last hypothesis {flow_dir})"
        )


def solve(
    inputs: Inputs,
    hint: FlowDirection | None = None,
    decomposition: MatrixDecomposition | None = None,
) -> Solution:
    """Convenience wrapper returning only the resolved Solution."""
    return FlowDirectionResolver(decomposition).resolve(inputs, hint).solution
