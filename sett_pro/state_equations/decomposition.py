"""Interchangeable linear-solve strategies for the state equations.

Each strategy solves a square system ``A x = b`` and raises
:class:`~sett_pro.errors.SingularMatrix` or
:class:`~sett_pro.errors.NumericalFailure` instead of returning a
non-finite result. Failures are never retried here.
"""

from __future__ import annotations

import logging
import warnings
from abc import ABC, abstractmethod

import numpy as np
import scipy.linalg as la

from sett_pro.errors import NumericalFailure, SingularMatrix

logger = logging.getLogger(__name__)


class MatrixDecomposition(ABC):
    """Abstract linear-solve strategy."""

    name: str = ""

    def solve(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """Solve ``a @ x = b``.

        Args:
            a: Square coefficient matrix.
            b: Right-hand side vector.

        Returns:
            Solution vector ``x``.

        Raises:
            SingularMatrix: If the matrix is singular for this strategy.
            NumericalFailure: If inputs or the solution are not finite.
        """
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float)
        if a.ndim != 2 or a.shape[0] != a.shape[1] or b.shape != (a.shape[0],):
            raise ValueError(f"Incompatible system shapes {a.shape} and {b.shape}")
        if not (np.all(np.isfinite(a)) and np.all(np.isfinite(b))):
            raise NumericalFailure(f"{self.name}: system contains non-finite entries")

        try:
            x = self._solve(a, b)
        except (la.LinAlgError, ValueError) as exc:
            raise NumericalFailure(f"{self.name}: {exc}") from exc

        if not np.all(np.isfinite(x)):
            raise NumericalFailure(f"{self.name}: solution is not finite")
        return x

    @abstractmethod
    def _solve(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class LUDecomposition(MatrixDecomposition):
    """LU factorisation with partial pivoting (the default)."""

    name = "lu"

    def _solve(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        # lu_factor only warns on an exactly zero pivot
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", la.LinAlgWarning)
            lu, piv = la.lu_factor(a, check_finite=False)
        if np.any(np.diag(lu) == 0.0):
            raise SingularMatrix(f"{self.name}: zero pivot in LU factorisation")
        return la.lu_solve((lu, piv), b, check_finite=False)


class QRDecomposition(MatrixDecomposition):
    """Householder QR factorisation."""

    name = "qr"

    def _solve(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        q, r = la.qr(a, check_finite=False)
        if np.any(np.diag(r) == 0.0):
            raise SingularMatrix(f"{self.name}: R factor has a zero diagonal entry")
        return la.solve_triangular(r, q.T @ b, check_finite=False)


class CholeskyDecomposition(MatrixDecomposition):
    """Cholesky factorisation, valid only for symmetric positive-definite systems.

    Only the lower triangle of the matrix is read.
    """

    name = "cholesky"

    def _solve(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        try:
            factor = la.cho_factor(a, lower=True, check_finite=False)
        except la.LinAlgError as exc:
            raise SingularMatrix(f"{self.name}: matrix is not positive definite") from exc
        return la.cho_solve(factor, b, check_finite=False)


class SVDDecomposition(MatrixDecomposition):
    """Singular value decomposition with small singular values truncated.

    Columns are scaled to unit norm before the decomposition, since the
    pressure-derivative column of the state equations is many orders of
    magnitude smaller than the rest. Singular values of the scaled matrix
    at or below ``eps`` are treated as zero, giving the minimum-norm
    least-squares solution for rank-deficient systems. A matrix with no
    singular value above ``eps`` is reported as singular.

    Args:
        eps: Truncation threshold for singular values.
    """

    name = "svd"

    def __init__(self, eps: float = 1e-12):
        if eps < 0:
            raise ValueError(f"eps must be non-negative, got {eps}")
        self.eps = eps

    def _solve(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        norms = np.linalg.norm(a, axis=0)
        scale = np.ones_like(norms)
        nonzero = norms > 0.0
        scale[nonzero] = 1.0 / norms[nonzero]

        u, s, vt = la.svd(a * scale, check_finite=False)
        keep = s > self.eps
        if not np.any(keep):
            raise SingularMatrix(f"{self.name}: all singular values below {self.eps}")
        if not np.all(keep):
            logger.debug("SVD truncated %d of %d singular values", np.sum(~keep), s.size)
        s_inv = np.zeros_like(s)
        s_inv[keep] = 1.0 / s[keep]
        return scale * (vt.T @ (s_inv * (u.T @ b)))

    def __repr__(self) -> str:
        return f"SVDDecomposition(eps={self.eps})"


# --- Registry ---

_DECOMPOSITIONS: dict[str, type[MatrixDecomposition]] = {
    "lu": LUDecomposition,
    "qr": QRDecomposition,
    "cholesky": CholeskyDecomposition,
    "svd": SVDDecomposition,
}


def list_decompositions() -> list[str]:
    """Return the names of all available decompositions."""
    return list(_DECOMPOSITIONS)


def get_decomposition(name: str) -> MatrixDecomposition:
    """Create a decomposition strategy by name.

    Args:
        name: One of ``lu``, ``qr``, ``cholesky`` or ``svd`` (case-insensitive).

    Raises:
        KeyError: If the name is unknown.
    """
    try:
        return _DECOMPOSITIONS[name.lower()]()
    except KeyError:
        raise KeyError(
            f"Unknown matrix decomposition '{name}'. Available: {list_decompositions()}"
        ) from None
