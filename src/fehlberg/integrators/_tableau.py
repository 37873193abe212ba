"""Butcher tableau of the Runge-Kutta-Fehlberg 4(5) pair.

The table is laid out as::

    time | coupling coefficients
    -----+----------------------
         | 5th-order weights
         | 4th-order weights

Row 1 is the (all zero) first stage, rows 2-6 hold the node ``c_i`` in
column 1 followed by the ``i - 1`` coupling coefficients, row 7 holds the
5th-order weights and row 8 the 4th-order weights (both starting at
column 2, column 1 unused).

Coefficients:

- Nodes (c): [0, 1/4, 3/8, 12/13, 1, 1/2]
- 5th-order weights (b_high): [16/135, 0, 6656/12825, 28561/56430, -9/50, 2/55]
- 4th-order weights (b_low): [25/216, 0, 1408/2565, 2197/4104, -1/5, 0]
"""

from __future__ import annotations

TABLEAU = (
    (0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0),
    (1.0 / 4.0, 1.0 / 4.0, 0.0, 0.0, 0.0, 0.0, 0.0),
    (3.0 / 8.0, 3.0 / 32.0, 9.0 / 32.0, 0.0, 0.0, 0.0, 0.0),
    (12.0 / 13.0, 1932.0 / 2197.0, -7200.0 / 2197.0, 7296.0 / 2197.0, 0.0, 0.0, 0.0),
    (1.0, 439.0 / 216.0, -8.0, 3680.0 / 513.0, -845.0 / 4104.0, 0.0, 0.0),
    (1.0 / 2.0, -8.0 / 27.0, 2.0, -3544.0 / 2565.0, 1859.0 / 4104.0, -11.0 / 40.0, 0.0),
    (0.0, 16.0 / 135.0, 0.0, 6656.0 / 12825.0, 28561.0 / 56430.0, -9.0 / 50.0, 2.0 / 55.0),
    (0.0, 25.0 / 216.0, 0.0, 1408.0 / 2565.0, 2197.0 / 4104.0, -1.0 / 5.0, 0.0),
)

N_STAGES = 6


def B(row: int, col: int) -> float:
    """Return the tableau coefficient at 1-indexed ``(row, col)``.

    Args:
        row: Row index in ``1..8``.
        col: Column index in ``1..7``.

    Returns:
        float: The coefficient.

    Raises:
        IndexError: If ``row`` or ``col`` is out of range.
    """
    if not 1 <= row <= len(TABLEAU):
        raise IndexError(f"Tableau row {row} out of range 1..{len(TABLEAU)}")
    if not 1 <= col <= len(TABLEAU[0]):
        raise IndexError(f"Tableau column {col} out of range 1..{len(TABLEAU[0])}")
    return TABLEAU[row - 1][col - 1]


# Views used by the stepper, all read from TABLEAU.
# Nodes
C = tuple(B(i, 1) for i in range(1, N_STAGES + 1))

# Coupling coefficients (lower-triangular rows, stage 2 onwards)
A = tuple(tuple(B(i, j) for j in range(2, i + 1)) for i in range(2, N_STAGES + 1))

# 5th-order weights (primary solution)
B_HIGH = tuple(B(7, j) for j in range(2, N_STAGES + 2))

# 4th-order weights (error estimation)
B_LOW = tuple(B(8, j) for j in range(2, N_STAGES + 2))
