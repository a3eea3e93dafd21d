"""Jonker-Volgenant solver for dense, square linear assignment problems."""

from __future__ import annotations

from typing import Sequence

LARGE = 1000000.0


def _column_reduction(cost: list[list[float]], x: list[int], y: list[int],
                      v: list[float]) -> list[int]:
    """Column reduction and reduction transfer; returns the free rows."""
    n = len(cost)
    for i, row in enumerate(cost):
        for j, c in enumerate(row):
            if c < v[j]:
                v[j] = c
                y[j] = i

    unique = [True] * n
    for j in reversed(range(n)):
        i = y[j]
        if x[i] < 0:
            x[i] = j
        else:
            unique[i] = False
            y[j] = -1

    free_rows: list[int] = []
    for i, row in enumerate(cost):
        if x[i] < 0:
            free_rows.append(i)
        elif unique[i]:
            j = x[i]
            lowest = LARGE
            for j2, c in enumerate(row):
                if j2 == j:
                    continue
                reduced = c - v[j2]
                if reduced < lowest:
                    lowest = reduced
            v[j] -= lowest
    return free_rows


def _augmenting_row_reduction(cost: list[list[float]], free_rows: list[int],
                              x: list[int], y: list[int], v: list[float]) -> list[int]:
    """Augmenting row reduction; returns the rows still free afterwards."""
    n = len(cost)
    rows = list(free_rows)
    n_free_rows = len(rows)
    current = 0
    new_free_rows = 0
    rr_cnt = 0
    while current < n_free_rows:
        rr_cnt += 1
        free_i = rows[current]
        current += 1
        row = cost[free_i]

        j1 = 0
        v1 = row[0] - v[0]
        j2 = -1
        v2 = LARGE
        for j in range(1, n):
            c = row[j] - v[j]
            if c < v2:
                if c >= v1:
                    v2 = c
                    j2 = j
                else:
                    v2 = v1
                    v1 = c
                    j2 = j1
                    j1 = j

        i0 = y[j1]
        v1_new = v[j1] - (v2 - v1)
        v1_lowers = v1_new < v[j1]
        if rr_cnt < current * n:
            if v1_lowers:
                v[j1] = v1_new
            elif i0 >= 0 and j2 >= 0:
                j1 = j2
                i0 = y[j2]
            if i0 >= 0:
                if v1_lowers:
                    current -= 1
                    rows[current] = i0
                else:
                    rows[new_free_rows] = i0
                    new_free_rows += 1
        elif i0 >= 0:
            rows[new_free_rows] = i0
            new_free_rows += 1
        x[free_i] = j1
        y[j1] = free_i
    return rows[:new_free_rows]


def _find(lo: int, d: list[float], cols: list[int]) -> int:
    """Move the columns with minimal ``d`` to the front of the SCAN list."""
    hi = lo + 1
    mind = d[cols[lo]]
    for k in range(lo + 1, len(cols)):
        j = cols[k]
        if d[j] <= mind:
            if d[j] < mind:
                hi = lo
                mind = d[j]
            cols[k] = cols[hi]
            cols[hi] = j
            hi += 1
    return hi


def _scan(cost: list[list[float]], lo: int, hi: int, d: list[float], cols: list[int],
          pred: list[int], y: list[int], v: list[float]) -> tuple[int, int, int]:
    """Relax the TODO columns through the SCAN columns.

    Returns ``(final_j, lo, hi)``; when a free column is reached the bounds
    are handed back unchanged.
    """
    n = len(cols)
    start_lo, start_hi = lo, hi
    while lo != hi:
        j = cols[lo]
        lo += 1
        i = y[j]
        mind = d[j]
        row = cost[i]
        h = row[j] - v[j] - mind
        for k in range(hi, n):
            j = cols[k]
            cred_ij = row[j] - v[j] - h
            if cred_ij < d[j]:
                d[j] = cred_ij
                pred[j] = i
                if cred_ij == mind:
                    if y[j] < 0:
                        return j, start_lo, start_hi
                    cols[k] = cols[hi]
                    cols[hi] = j
                    hi += 1
    return -1, lo, hi


def _find_path(cost: list[list[float]], start_i: int, y: list[int], v: list[float],
               pred: list[int]) -> int:
    """One shortest-path search; returns the closest free column."""
    n = len(cost)
    lo = hi = 0
    final_j = -1
    n_ready = 0
    cols = list(range(n))
    pred[:] = [start_i] * n
    d = [c - vj for c, vj in zip(cost[start_i], v)]

    while final_j == -1:
        if lo == hi:
            n_ready = lo
            hi = _find(lo, d, cols)
            for j in cols[lo:hi]:
                if y[j] < 0:
                    final_j = j
        if final_j == -1:
            final_j, lo, hi = _scan(cost, lo, hi, d, cols, pred, y, v)

    mind = d[cols[lo]]
    for j in cols[:n_ready]:
        v[j] += d[j] - mind
    return final_j


def _augment(cost: list[list[float]], free_rows: list[int], x: list[int], y: list[int],
             v: list[float]) -> None:
    pred = [0] * len(cost)
    for free_i in free_rows:
        i = -1
        j = _find_path(cost, free_i, y, v, pred)
        while i != free_i:
            i = pred[j]
            y[j] = i
            j, x[i] = x[i], j


def solve_dense(cost: Sequence[Sequence[float]]) -> tuple[list[int], list[int]]:
    """Solve a square assignment problem of minimal total cost.

    Returns ``(x, y)`` where ``x[row]`` is the column given to each row and
    ``y[col]`` the row given to each column.
    """
    matrix = [[float(c) for c in row] for row in cost]
    n = len(matrix)
    if any(len(row) != n for row in matrix):
        raise ValueError("cost matrix must be square")
    if n == 0:
        return [], []

    x = [-1] * n
    y = [0] * n
    v = [LARGE] * n
    free_rows = _column_reduction(matrix, x, y, v)
    passes = 0
    while free_rows and passes < 2:
        free_rows = _augmenting_row_reduction(matrix, free_rows, x, y, v)
        passes += 1
    if free_rows:
        _augment(matrix, free_rows, x, y, v)
    return x, y