"""Tests for the Gauss-Jordan inverse and matrix helpers."""
import numpy as np
import pytest

from analytics.linear_algebra import invert, matmul, matvec, transpose
from errors import SingularMatrixError


class TestInvert:

    def test_known_inverse(self):
        inv = invert([[4, 7], [2, 6]])
        assert np.allclose(inv, [[0.6, -0.7], [-0.2, 0.4]])

    def test_identity(self):
        assert np.allclose(invert(np.eye(3)), np.eye(3))

    def test_requires_row_swap(self):
        # Zero in the first pivot position; partial pivoting must swap rows
        assert np.allclose(invert([[0, 1], [1, 0]]), [[0, 1], [1, 0]])

    def test_product_with_original_is_identity(self):
        a = np.array([[4.0, 1.2, 0.8], [1.2, 0.5, 0.3], [0.8, 0.3, 0.9]])
        assert np.allclose(a @ invert(a), np.eye(3))

    def test_singular_raises(self):
        with pytest.raises(SingularMatrixError) as exc:
            invert([[1, 2], [2, 4]])
        assert exc.value.column == 1

    def test_pivot_below_threshold_is_singular(self):
        with pytest.raises(SingularMatrixError):
            invert([[1e-11]])

    def test_pivot_above_threshold_inverts(self):
        assert invert([[1e-9]])[0, 0] == pytest.approx(1e9)

    def test_non_square_raises_value_error(self):
        with pytest.raises(ValueError):
            invert([[1, 2, 3], [4, 5, 6]])

    def test_empty_raises_value_error(self):
        with pytest.raises(ValueError):
            invert(np.zeros((0, 0)))

    def test_input_not_modified(self):
        a = np.array([[2.0, 1.0], [1.0, 3.0]])
        before = a.copy()
        invert(a)
        assert np.array_equal(a, before)


class TestHelpers:

    def test_transpose(self):
        assert transpose([[1, 2, 3], [4, 5, 6]]).tolist() == [[1, 4], [2, 5], [3, 6]]

    def test_matmul(self):
        assert matmul([[1, 2], [3, 4]], [[5], [6]]).tolist() == [[17], [39]]

    def test_matmul_shape_mismatch(self):
        with pytest.raises(ValueError):
            matmul([[1, 2]], [[1, 2]])

    def test_matvec(self):
        assert matvec([[1, 2], [3, 4]], [1, 1]).tolist() == [3, 7]

    def test_matvec_length_mismatch(self):
        with pytest.raises(ValueError):
            matvec([[1, 2]], [1, 2, 3])


class TestErrors:

    def test_hierarchy_and_reasons(self):
        from errors import DegenerateInputError, ImpactAnalysisError, InsufficientDataError

        for cls, reason in ((InsufficientDataError, "insufficient_weekly_data"),
                            (DegenerateInputError, "degenerate_input"),
                            (SingularMatrixError, "singular_matrix")):
            assert issubclass(cls, ImpactAnalysisError)
            assert cls.reason == reason

    def test_singular_default_message(self):
        err = SingularMatrixError()
        assert str(err) == "Matrix is singular"
        assert err.column is None
