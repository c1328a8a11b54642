"""Mass and energy balance equations for the five engine control volumes.

Each control volume (compression space, cold heat exchanger, regenerator,
hot heat exchanger, expansion space) contributes one mass-balance row and
one energy-balance row. The ten unknowns are ordered::

    [m_dot_ck, m_dot_kr, m_dot_rl, m_dot_le,
     Q_dot_k, Q_dot_r, Q_dot_l,
     dTc_dt, dTe_dt, dP_dt]

Energy rows are divided by a representative enthalpy to keep the matrix
well conditioned.
"""

from __future__ import annotations

import math

import numpy as np

from sett_pro.errors import NumericalFailure
from sett_pro.state_equations.decomposition import LUDecomposition, MatrixDecomposition
from sett_pro.state_equations.flow_direction import FlowDirection
from sett_pro.state_equations.types import Inputs, Solution

SIZE = 10

# Column indices
M_CK, M_KR, M_RL, M_LE, Q_K, Q_R, Q_L, DTC, DTE, DP = range(SIZE)


class StateEquationSystem:
    """Linear system ``A x = b`` for one set of volume inputs.

    The matrix skeleton is assembled once; only the interface enthalpy
    entries change with the flow-direction hypothesis.

    Args:
        inputs: Volume inputs at one (time, conditions) pair.

    Raises:
        NumericalFailure: If the enthalpy normalisation is zero or not finite.
    """

    def __init__(self, inputs: Inputs):
        enth_norm = inputs.enth_norm
        if enth_norm == 0.0 or not math.isfinite(enth_norm):
            raise NumericalFailure(f"Invalid enthalpy normalisation: {enth_norm}")

        self.inputs = inputs
        pres = inputs.pres
        comp, chx, regen, hhx, exp = (
            inputs.comp,
            inputs.chx,
            inputs.regen,
            inputs.hhx,
            inputs.exp,
        )

        a = np.zeros((SIZE, SIZE))
        b = np.zeros(SIZE)

        # Compression space
        a[0, M_CK] = 1.0
        a[0, DTC] = comp.vol * comp.dd_dT_P
        a[0, DP] = comp.vol * comp.dd_dP_T
        b[0] = -comp.dens * comp.dV_dt

        a[1, DTC] = comp.vol * (comp.dens * comp.du_dT_P + comp.inte * comp.dd_dT_P) / enth_norm
        a[1, DP] = comp.vol * (comp.dens * comp.du_dP_T + comp.inte * comp.dd_dP_T) / enth_norm
        b[1] = (-(pres + comp.dens * comp.inte) * comp.dV_dt - comp.Q_dot) / enth_norm

        # Cold heat exchanger
        a[2, M_CK] = -1.0
        a[2, M_KR] = 1.0
        a[2, DP] = chx.vol * chx.dd_dP_T

        a[3, Q_K] = 1.0 / enth_norm
        a[3, DP] = chx.vol * (chx.dens * chx.du_dP_T + chx.inte * chx.dd_dP_T) / enth_norm

        # Regenerator
        a[4, M_KR] = -1.0
        a[4, M_RL] = 1.0
        a[4, DP] = regen.vol * regen.dd_dP_T

        a[5, Q_R] = 1.0 / enth_norm
        a[5, DP] = (
            regen.vol * (regen.dens * regen.du_dP_T + regen.inte * regen.dd_dP_T) / enth_norm
        )

        # Hot heat exchanger
        a[6, M_RL] = -1.0
        a[6, M_LE] = 1.0
        a[6, DP] = hhx.vol * hhx.dd_dP_T

        a[7, Q_L] = -1.0 / enth_norm
        a[7, DP] = hhx.vol * (hhx.dens * hhx.du_dP_T + hhx.inte * hhx.dd_dP_T) / enth_norm

        # Expansion space
        a[8, M_LE] = -1.0
        a[8, DTE] = exp.vol * exp.dd_dT_P
        a[8, DP] = exp.vol * exp.dd_dP_T
        b[8] = -exp.dens * exp.dV_dt

        a[9, DTE] = exp.vol * (exp.dens * exp.du_dT_P + exp.inte * exp.dd_dT_P) / enth_norm
        a[9, DP] = exp.vol * (exp.dens * exp.du_dP_T + exp.inte * exp.dd_dP_T) / enth_norm
        b[9] = (-(pres + exp.dens * exp.inte) * exp.dV_dt - exp.Q_dot) / enth_norm

        self._a = a
        self._b = b
        self._h_comp = comp.enth / enth_norm
        self._h_chx = chx.enth / enth_norm
        self._h_regen_cold = regen.enth_cold / enth_norm
        self._h_regen_hot = regen.enth_hot / enth_norm
        self._h_hhx = hhx.enth / enth_norm
        self._h_exp = exp.enth / enth_norm

    @property
    def b(self) -> np.ndarray:
        return self._b.copy()

    def matrix(self, flow_dir: FlowDirection) -> np.ndarray:
        """Return the coefficient matrix for a flow-direction hypothesis.

        The enthalpy carried across each interface is that of the upstream
        volume; an unknown direction uses the mean of both candidates.
        """
        h_ck = flow_dir.ck.select(self._h_comp, self._h_chx)
        h_kr = flow_dir.kr.select(self._h_chx, self._h_regen_cold)
        h_rl = flow_dir.rl.select(self._h_regen_hot, self._h_hhx)
        h_le = flow_dir.le.select(self._h_hhx, self._h_exp)

        a = self._a.copy()
        a[1, M_CK] = h_ck
        a[3, M_CK] = -h_ck

        a[3, M_KR] = h_kr
        a[5, M_KR] = -h_kr

        a[5, M_RL] = h_rl
        a[7, M_RL] = -h_rl

        a[7, M_LE] = h_le
        a[9, M_LE] = -h_le
        return a

    def solve(
        self,
        flow_dir: FlowDirection,
        decomposition: MatrixDecomposition | None = None,
    ) -> Solution:
        """Solve the system under one flow-direction hypothesis.

        Args:
            flow_dir: Assumed direction at each interface.
            decomposition: Linear-solve strategy (LU if omitted).

        Returns:
            Solution of the mass and energy balances.

        Raises:
            NumericalFailure: If the linear solve fails.
        """
        decomposition = decomposition or LUDecomposition()
        x = decomposition.solve(self.matrix(flow_dir), self._b)
        return Solution.from_vector(x)
