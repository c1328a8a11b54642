"""Tests for flow-direction resolution."""

import dataclasses

import pytest

from sett_pro.errors import FlowDirectionDivergence
from sett_pro.state_equations import (
    Direction,
    FlowDirection,
    FlowDirectionResolver,
    Solution,
    StateEquationSystem,
    solve,
)
from sett_pro.state_equations.flow_direction import ALLOWED_FLOW_UPDATES


def _opposite(flow_dir: FlowDirection) -> FlowDirection:
    flip = {Direction.POSITIVE: Direction.NEGATIVE, Direction.NEGATIVE: Direction.POSITIVE}
    return FlowDirection(
        ck=flip[flow_dir.ck],
        kr=flip[flow_dir.kr],
        rl=flip[flow_dir.rl],
        le=flip[flow_dir.le],
    )


class _FlippingSystem(StateEquationSystem):
    """A system whose solved directions always contradict the hypothesis."""

    def __init__(self):
        self.calls = 0

    def solve(self, flow_dir, decomposition=None):
        self.calls += 1
        m = -1.0 if flow_dir.ck is Direction.POSITIVE else 1.0
        return Solution(m, m, m, m, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)


class TestDirection:
    def test_from_value(self):
        assert Direction.from_value(1e-3) is Direction.POSITIVE
        assert Direction.from_value(-1e-3) is Direction.NEGATIVE

    def test_zero_flow_is_positive(self):
        assert Direction.from_value(0.0) is Direction.POSITIVE
        assert Direction.from_value(-0.0) is Direction.POSITIVE

    def test_select(self):
        assert Direction.POSITIVE.select(1.0, 3.0) == 1.0
        assert Direction.NEGATIVE.select(1.0, 3.0) == 3.0
        assert Direction.UNKNOWN.select(1.0, 3.0) == 2.0

    def test_default_unresolved(self):
        flow_dir = FlowDirection()
        assert not flow_dir.is_resolved
        assert flow_dir.ck is Direction.UNKNOWN

    def test_from_solution(self):
        sol = Solution(1.0, -1.0, 0.0, -2.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
        flow_dir = FlowDirection.from_solution(sol)
        assert flow_dir == FlowDirection(
            ck=Direction.POSITIVE,
            kr=Direction.NEGATIVE,
            rl=Direction.POSITIVE,
            le=Direction.NEGATIVE,
        )
        assert flow_dir.is_resolved


class TestResolver:
    def test_resolves_from_unknown(self, reference_inputs):
        resolution = FlowDirectionResolver().resolve(reference_inputs)
        assert resolution.flow_dir.is_resolved
        assert resolution.flow_dir == FlowDirection.from_solution(resolution.solution)
        assert 2 <= resolution.rounds <= ALLOWED_FLOW_UPDATES + 1

    def test_idempotent_with_consistent_hint(self, reference_inputs):
        """Seeding with a consistent direction needs a single solve."""
        resolver = FlowDirectionResolver()
        first = resolver.resolve(reference_inputs)
        second = resolver.resolve(reference_inputs, first.flow_dir)
        assert second.rounds == 1
        assert second.flow_dir == first.flow_dir
        assert second.solution == first.solution

    def test_adversarial_hint(self, reference_inputs):
        """An opposite hint either settles consistently or reports divergence."""
        resolver = FlowDirectionResolver()
        reference = resolver.resolve(reference_inputs)
        try:
            resolution = resolver.resolve(reference_inputs, _opposite(reference.flow_dir))
        except FlowDirectionDivergence:
            return
        assert resolution.flow_dir == FlowDirection.from_solution(resolution.solution)

    def test_accepts_assembled_system(self, reference_inputs):
        system = StateEquationSystem(reference_inputs)
        from_system = FlowDirectionResolver().resolve(system)
        from_inputs = FlowDirectionResolver().resolve(reference_inputs)
        assert from_system.solution == from_inputs.solution

    def test_divergence(self):
        system = _FlippingSystem()
        with pytest.raises(FlowDirectionDivergence):
            FlowDirectionResolver().resolve(system)
        assert system.calls == ALLOWED_FLOW_UPDATES + 1

    def test_divergence_after_max_updates(self):
        system = _FlippingSystem()
        with pytest.raises(FlowDirectionDivergence):
            FlowDirectionResolver(max_updates=0).resolve(system)
        assert system.calls == 1

    def test_negative_max_updates(self):
        with pytest.raises(ValueError):
            FlowDirectionResolver(max_updates=-1)

    def test_solve_wrapper(self, reference_inputs):
        sol = solve(reference_inputs)
        assert sol == FlowDirectionResolver().resolve(reference_inputs).solution

    def test_reversed_motion_reverses_flow(self, reference_inputs):
        """Reversing both pistons reverses the flow at the cold end."""
        forward = solve(reference_inputs)
        backward_inputs = dataclasses.replace(
            reference_inputs,
            comp=dataclasses.replace(reference_inputs.comp, dV_dt=0.08),
            exp=dataclasses.replace(reference_inputs.exp, dV_dt=-0.06),
        )
        backward = solve(backward_inputs)
        assert forward.m_dot_ck > 0
        assert backward.m_dot_ck < 0
