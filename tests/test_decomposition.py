"""Tests for the linear-solve strategies."""

import numpy as np
import pytest

from sett_pro.errors import NumericalFailure, SingularMatrix
from sett_pro.state_equations.decomposition import (
    CholeskyDecomposition,
    LUDecomposition,
    QRDecomposition,
    SVDDecomposition,
    get_decomposition,
    list_decompositions,
)


def _spd_system():
    a = np.array([[4.0, 1.0, 0.0], [1.0, 3.0, 1.0], [0.0, 1.0, 2.0]])
    x = np.array([1.0, -2.0, 0.5])
    return a, a @ x, x


class TestGeneralSolve:
    @pytest.mark.parametrize("name", ["lu", "qr", "cholesky", "svd"])
    def test_spd_system(self, name):
        a, b, x = _spd_system()
        result = get_decomposition(name).solve(a, b)
        np.testing.assert_allclose(result, x, rtol=1e-12, atol=1e-12)

    @pytest.mark.parametrize("name", ["lu", "qr", "svd"])
    def test_nonsymmetric_system(self, name):
        a = np.array([[0.0, 2.0, 1.0], [1.0, 0.0, 0.0], [3.0, 1.0, 5.0]])
        x = np.array([2.0, 1.0, -1.0])
        result = get_decomposition(name).solve(a, a @ x)
        np.testing.assert_allclose(result, x, rtol=1e-12, atol=1e-12)

    def test_badly_scaled_columns(self):
        """Column scaling of many orders of magnitude does not hurt accuracy."""
        a = np.array([[1.0, 2e-10, 0.0], [0.5, 1e-10, 1.0], [0.0, 3e-10, 2.0]])
        x = np.array([0.3, 4e9, -1.0])
        b = a @ x
        for name in ("lu", "qr", "svd"):
            result = get_decomposition(name).solve(a, b)
            np.testing.assert_allclose(result, x, rtol=1e-9)


class TestFailures:
    def test_lu_zero_pivot(self):
        a = np.array([[1.0, 2.0], [2.0, 4.0]])
        with pytest.raises(SingularMatrix):
            LUDecomposition().solve(a, np.array([1.0, 1.0]))

    def test_qr_zero_column(self):
        a = np.array([[1.0, 0.0], [2.0, 0.0]])
        with pytest.raises(SingularMatrix):
            QRDecomposition().solve(a, np.array([1.0, 1.0]))

    def test_cholesky_not_positive_definite(self):
        a = np.array([[1.0, 2.0], [2.0, 1.0]])
        with pytest.raises(SingularMatrix):
            CholeskyDecomposition().solve(a, np.array([1.0, 1.0]))

    def test_svd_all_truncated(self):
        with pytest.raises(SingularMatrix):
            SVDDecomposition().solve(np.zeros((3, 3)), np.ones(3))

    def test_svd_minimum_norm(self):
        """A rank-deficient system yields the minimum-norm solution."""
        a = np.array([[1.0, 0.0], [0.0, 0.0]])
        result = SVDDecomposition().solve(a, np.array([2.0, 0.0]))
        assert result == pytest.approx([2.0, 0.0])

    def test_singular_is_numerical_failure(self):
        assert issubclass(SingularMatrix, NumericalFailure)

    def test_non_finite_input(self):
        a = np.eye(2)
        with pytest.raises(NumericalFailure):
            LUDecomposition().solve(a, np.array([np.nan, 1.0]))

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            LUDecomposition().solve(np.eye(3), np.ones(2))


class TestRegistry:
    def test_names(self):
        assert list_decompositions() == ["lu", "qr", "cholesky", "svd"]

    def test_case_insensitive(self):
        assert isinstance(get_decomposition("QR"), QRDecomposition)

    def test_unknown(self):
        with pytest.raises(KeyError, match="Unknown"):
            get_decomposition("gauss")

    def test_svd_negative_eps(self):
        with pytest.raises(ValueError):
            SVDDecomposition(eps=-1.0)
