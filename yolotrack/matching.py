"""Box overlap costs and linear assignment between tracks and detections."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .lapjv import solve_dense

_F32 = np.float32
LONG_MAX = float(2**63 - 1)


def ious(atlbrs: Sequence[Sequence[float]],
         btlbrs: Sequence[Sequence[float]]) -> list[list[float]]:
    """Pairwise intersection over union of (left, top, right, bottom) boxes.

    Returns an empty list when either side is empty.
    """
    if len(atlbrs) * len(btlbrs) == 0:
        return []
    a = np.asarray(atlbrs, dtype=_F32).reshape(-1, 4)
    b = np.asarray(btlbrs, dtype=_F32).reshape(-1, 4)
    one = _F32(1)

    area_a = (a[:, 2] - a[:, 0] + one) * (a[:, 3] - a[:, 1] + one)
    area_b = (b[:, 2] - b[:, 0] + one) * (b[:, 3] - b[:, 1] + one)
    iw = (np.minimum(a[:, None, 2], b[None, :, 2])
          - np.maximum(a[:, None, 0], b[None, :, 0]) + one)
    ih = (np.minimum(a[:, None, 3], b[None, :, 3])
          - np.maximum(a[:, None, 1], b[None, :, 1]) + one)
    inter = iw * ih
    union = area_a[:, None] + area_b[None, :] - inter
    overlap = (iw > 0) & (ih > 0)
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.where(overlap, inter / union, _F32(0)).astype(_F32)
    return result.tolist()


def iou_distance(atracks, btracks) -> list[list[float]]:
    """Cost matrix ``1 - IoU`` between the ``tlbr`` boxes of two track lists."""
    overlaps = ious([t.tlbr for t in atracks], [t.tlbr for t in btracks])
    if not overlaps:
        return []
    return (_F32(1) - np.asarray(overlaps, dtype=_F32)).tolist()


def lapjv(cost: Sequence[Sequence[float]], extend_cost: bool = False,
          cost_limit: float = LONG_MAX,
          return_cost: bool = True) -> tuple[float, list[int], list[int]]:
    """Solve a linear assignment problem.

    Returns ``(total_cost, rowsol, colsol)``; ``rowsol[i]`` is the column
    given to row ``i`` and ``colsol[j]`` the row given to column ``j``, or -1
    where nothing was assigned. Non-square matrices need ``extend_cost``;
    with a ``cost_limit`` pairs dearer than the limit stay unassigned.
    """
    matrix = np.asarray(cost, dtype=_F32)
    if matrix.ndim != 2 or matrix.shape[0] == 0 or matrix.shape[1] == 0:
        raise ValueError("cost must be a non-empty two-dimensional matrix")
    n_rows, n_cols = matrix.shape
    limited = cost_limit < LONG_MAX
    if n_rows != n_cols and not extend_cost:
        raise ValueError("a non-square cost matrix needs extend_cost=True")

    n = n_rows
    if extend_cost or limited:
        n = n_rows + n_cols
        if limited:
            fill = _F32(cost_limit / 2.0)
        else:
            fill = _F32(max(_F32(-1), matrix.max())) + _F32(1)
        extended = np.full((n, n), fill, dtype=_F32)
        extended[n_rows:, n_cols:] = 0
        extended[:n_rows, :n_cols] = matrix
        matrix = extended

    square = matrix.astype(np.float64).tolist()
    x, y = solve_dense(square)

    if n != n_rows:
        rowsol = [j if j < n_cols else -1 for j in x[:n_rows]]
        colsol = [i if i < n_rows else -1 for i in y[:n_cols]]
    else:
        rowsol, colsol = x, y

    opt = 0.0
    if return_cost:
        opt = sum(square[i][j] for i, j in enumerate(rowsol) if j != -1)
    return opt, rowsol, colsol


def linear_assignment(cost_matrix: Sequence[Sequence[float]], n_rows: int, n_cols: int,
                      thresh: float) -> tuple[list[tuple[int, int]], list[int], list[int]]:
    """Match rows to columns, leaving pairs dearer than ``thresh`` unmatched.

    Returns ``(matches, unmatched_rows, unmatched_cols)``. An empty matrix
    leaves all ``n_rows`` rows and ``n_cols`` columns unmatched.
    """
    if len(cost_matrix) == 0:
        return [], list(range(n_rows)), list(range(n_cols))

    _, rowsol, colsol = lapjv(cost_matrix, True, thresh)
    matches = [(i, j) for i, j in enumerate(rowsol) if j >= 0]
    unmatched_a = [i for i, j in enumerate(rowsol) if j < 0]
    unmatched_b = [j for j, i in enumerate(colsol) if i < 0]
    return matches, unmatched_a, unmatched_b