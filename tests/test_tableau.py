"""Tests for the RKF45 Butcher tableau."""

import pytest

from fehlberg.integrators import TABLEAU, B
from fehlberg.integrators._tableau import A, B_HIGH, B_LOW, C


class TestTableau:
    def test_shape(self):
        assert len(TABLEAU) == 8
        assert all(len(row) == 7 for row in TABLEAU)

    def test_immutable(self):
        with pytest.raises(TypeError):
            TABLEAU[1][1] = 0.0  # type: ignore[index]

    @pytest.mark.parametrize(
        "row,col,expected",
        [
            (2, 1, 1.0 / 4.0),
            (3, 3, 9.0 / 32.0),
            (4, 4, 7296.0 / 2197.0),
            (5, 3, -8.0),
            (6, 6, -11.0 / 40.0),
            (7, 7, 2.0 / 55.0),
            (8, 5, 2197.0 / 4104.0),
        ],
    )
    def test_lookup(self, row, col, expected):
        assert B(row, col) == expected

    @pytest.mark.parametrize("row,col", [(0, 1), (9, 1), (1, 0), (1, 8)])
    def test_lookup_out_of_range(self, row, col):
        with pytest.raises(IndexError):
            B(row, col)

    def test_row_sums_match_nodes(self):
        """sum_j a_ij = c_i for every stage."""
        for c_i, a_i in zip(C[1:], A):
            assert sum(a_i) == pytest.approx(c_i, abs=1e-14)

    def test_weights_sum_to_one(self):
        assert sum(B_HIGH) == pytest.approx(1.0, abs=1e-14)
        assert sum(B_LOW) == pytest.approx(1.0, abs=1e-14)

    def test_views(self):
        assert C == (0.0, 0.25, 0.375, 12.0 / 13.0, 1.0, 0.5)
        assert [len(a_i) for a_i in A] == [1, 2, 3, 4, 5]
        assert B_HIGH[5] == 2.0 / 55.0
        assert B_LOW[5] == 0.0

    @pytest.mark.parametrize("weights,order", [(B_HIGH, 5), (B_LOW, 4)])
    def test_quadrature_order(self, weights, order):
        """sum_i b_i c_i^k = 1/(k+1) for k < order."""
        for k in range(order):
            assert sum(b * c**k for b, c in zip(weights, C)) == pytest.approx(
                1.0 / (k + 1), abs=1e-14
            )
