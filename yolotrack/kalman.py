"""Constant-velocity Kalman filter over (x, y, aspect ratio, height) boxes."""

from __future__ import annotations

from typing import Sequence

import numpy as np

CHI2INV95 = (
    0.0,
    3.8415,
    5.9915,
    7.8147,
    9.4877,
    11.070,
    12.592,
    14.067,
    15.507,
    16.919,
)

_F32 = np.float32


def _vector(values, size: int) -> np.ndarray:
    array = np.asarray(values, dtype=_F32).reshape(-1)
    if array.size != size:
        raise ValueError(f"expected {size} values, got {array.size}")
    return array


def _matrix(values, size: int) -> np.ndarray:
    array = np.asarray(values, dtype=_F32)
    if array.shape != (size, size):
        raise ValueError(f"expected a {size}x{size} matrix, got shape {array.shape}")
    return array


class KalmanFilter:
    """Kalman filter with an 8-dimensional state: box centre, aspect, height and velocities."""

    chi2inv95 = CHI2INV95

    def __init__(self):
        ndim = 4
        dt = 1.0
        self._motion_mat = np.eye(2 * ndim, dtype=_F32)
        for i in range(ndim):
            self._motion_mat[i, ndim + i] = dt
        self._update_mat = np.eye(ndim, 2 * ndim, dtype=_F32)
        self._std_weight_position = _F32(1.0 / 20)
        self._std_weight_velocity = _F32(1.0 / 160)

    def initiate(self, measurement: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
        """Create a track state from an unassociated (x, y, a, h) measurement."""
        box = _vector(measurement, 4)
        mean = np.concatenate([box, np.zeros(4, dtype=_F32)])
        h = box[3]
        pos = _F32(2) * self._std_weight_position * h
        vel = _F32(10) * self._std_weight_velocity * h
        std = np.array([pos, pos, 1e-2, pos, vel, vel, 1e-5, vel], dtype=_F32)
        covariance = np.diag(np.square(std)).astype(_F32)
        return mean, covariance

    def predict(self, mean, covariance) -> tuple[np.ndarray, np.ndarray]:
        """Advance a state by one time step; returns the new mean and covariance."""
        mean = _vector(mean, 8)
        covariance = _matrix(covariance, 8)
        h = mean[3]
        pos = self._std_weight_position * h
        vel = self._std_weight_velocity * h
        std = np.array([pos, pos, 1e-2, pos, vel, vel, 1e-5, vel], dtype=_F32)
        motion_cov = np.diag(np.square(std)).astype(_F32)
        new_mean = self._motion_mat @ mean
        new_cov = self._motion_mat @ covariance @ self._motion_mat.T + motion_cov
        return new_mean.astype(_F32), new_cov.astype(_F32)

    def project(self, mean, covariance) -> tuple[np.ndarray, np.ndarray]:
        """Project a state into measurement space."""
        mean = _vector(mean, 8)
        covariance = _matrix(covariance, 8)
        h = mean[3]
        pos = self._std_weight_position * h
        std = np.array([pos, pos, 1e-1, pos], dtype=_F32)
        projected_mean = self._update_mat @ mean
        projected_cov = (self._update_mat @ covariance @ self._update_mat.T
                         + np.diag(np.square(std)))
        return projected_mean.astype(_F32), projected_cov.astype(_F32)

    def update(self, mean, covariance, measurement) -> tuple[np.ndarray, np.ndarray]:
        """Correct a state with an associated (x, y, a, h) measurement."""
        mean = _vector(mean, 8)
        covariance = _matrix(covariance, 8)
        box = _vector(measurement, 4)
        projected_mean, projected_cov = self.project(mean, covariance)

        b = (covariance @ self._update_mat.T).T
        kalman_gain = np.linalg.solve(projected_cov, b).T.astype(_F32)
        innovation = box - projected_mean
        new_mean = mean + innovation @ kalman_gain.T
        new_cov = covariance - kalman_gain @ projected_cov @ kalman_gain.T
        return new_mean.astype(_F32), new_cov.astype(_F32)

    def gating_distance(self, mean, covariance, measurements,
                        only_position=False) -> np.ndarray:
        """Squared distance between a state and each of ``measurements``."""
        if only_position:
            raise ValueError("gating on position only is not supported")
        projected_mean, projected_cov = self.project(mean, covariance)
        boxes = np.asarray(measurements, dtype=_F32).reshape(-1, 4)
        diff = boxes - projected_mean
        factor = np.linalg.cholesky(projected_cov).astype(_F32)
        # Solves z @ L = diff for z, row by row.
        z = np.linalg.solve(factor.T, diff.T).astype(_F32)
        return np.sum(z * z, axis=0).astype(_F32)