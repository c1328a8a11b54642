"""State equations and the cycle solver for SETT Pro.

- types: Conditions, volume inputs, Solution and Trajectory values
- decomposition: interchangeable linear-solve strategies
- system: the 10x10 mass/energy balance system
- flow_direction: fixed-point resolution of interface flow directions
- integrator: RK45 integration over one cycle
- cycle: Cycle interface and the steady-state loop
"""

from sett_pro.state_equations.cycle import Cycle, SteadyStateInputs
from sett_pro.state_equations.decomposition import (
    CholeskyDecomposition,
    LUDecomposition,
    MatrixDecomposition,
    QRDecomposition,
    SVDDecomposition,
    get_decomposition,
)
from sett_pro.state_equations.flow_direction import (
    Direction,
    FlowDirection,
    FlowDirectionResolver,
    solve,
)
from sett_pro.state_equations.integrator import Integration
from sett_pro.state_equations.system import StateEquationSystem
from sett_pro.state_equations.types import (
    Conditions,
    HeatExchangerInputs,
    Inputs,
    RegeneratorInputs,
    Solution,
    Trajectory,
    Values,
    WorkingSpaceInputs,
)

__all__ = [
    "CholeskyDecomposition",
    "Conditions",
    "Cycle",
    "Direction",
    "FlowDirection",
    "FlowDirectionResolver",
    "HeatExchangerInputs",
    "Inputs",
    "Integration",
    "LUDecomposition",
    "MatrixDecomposition",
    "QRDecomposition",
    "RegeneratorInputs",
    "SVDDecomposition",
    "Solution",
    "StateEquationSystem",
    "SteadyStateInputs",
    "Trajectory",
    "Values",
    "WorkingSpaceInputs",
    "get_decomposition",
    "solve",
]
