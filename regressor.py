"""Batch linear regression trained one gradient step at a time.
`step()` runs a forward pass over the stored batch, then one full-batch
gradient-descent update on the mean-squared error. Features are stored flat,
feature-major / sample-minor: X[j * m + i] is feature j of sample i."""
from __future__ import annotations

from typing import NamedTuple, Sequence, Tuple

import numpy as np


class RegressorError(ValueError):
    """A command was rejected; the regressor state is unchanged."""


class ShapeError(RegressorError):
    def __init__(self, what: str, expected: int, actual: int, detail: str = ""):
        self.what = what
        self.expected = int(expected)
        self.actual = int(actual)
        extra = f" ({detail})" if detail else ""
        super().__init__(
            f"expected {self.expected} values for {what}{extra}, got {self.actual}"
        )


class LearningRateError(RegressorError):
    pass


class StepResult(NamedTuple):
    predictions: np.ndarray
    weights: np.ndarray
    bias: float
    loss: float


def _positive_int(name: str, value) -> int:
    try:
        integral = not isinstance(value, (bool, np.bool_)) and int(value) == value
    except (OverflowError, TypeError, ValueError):
        integral = False
    if not integral:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    value = int(value)
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


class BatchLinearRegressor:
    def __init__(self, nx: int = 1, m: int = 1, alpha: float = 0.01):
        self._nx = _positive_int("nx", nx)
        self._m = _positive_int("m", m)
        alpha = float(alpha)
        if not alpha > 0:
            raise ValueError(f"alpha must be positive, got {alpha}")
        self.alpha = alpha

        # Buffers are allocated once; every write below is a slice assignment.
        self._x = np.zeros(self._nx * self._m, dtype=np.float64)
        self._y = np.zeros(self._m, dtype=np.float64)
        self._w = np.zeros(self._nx, dtype=np.float64)
        self.b = 0.0

        self.features_set = False
        self.targets_set = False

    # ----------------- shape & accessors -----------------
    @property
    def nx(self) -> int:
        return self._nx

    @property
    def m(self) -> int:
        return self._m

    @property
    def X(self) -> np.ndarray:
        return self._x.copy()

    @property
    def y(self) -> np.ndarray:
        return self._y.copy()

    @property
    def weights(self) -> np.ndarray:
        return self._w.copy()

    @property
    def bias(self) -> float:
        return float(self.b)

    def features_matrix(self) -> np.ndarray:
        """Copy of X as a (nx, m) matrix: row j holds feature j of every sample."""
        return self._x.reshape(self._nx, self._m).copy()

    # ----------------- command surface -----------------
    def set_features(self, values: Sequence[float]) -> None:
        arr = self._as_vector(values)
        if arr.size != self._x.size:
            raise ShapeError("X", self._x.size, arr.size, f"nx={self._nx}, m={self._m}")
        self._x[:] = arr
        self.features_set = True

    def set_targets(self, values: Sequence[float]) -> None:
        arr = self._as_vector(values)
        if arr.size != self._m:
            raise ShapeError("Y", self._m, arr.size, f"m={self._m}")
        self._y[:] = arr
        self.targets_set = True

    def set_weights(self, values: Sequence[float]) -> None:
        arr = self._as_vector(values)
        if arr.size != self._nx:
            raise ShapeError("weights", self._nx, arr.size, f"nx={self._nx}")
        self._w[:] = arr

    def set_bias(self, value: float) -> None:
        self.b = float(value)

    def set_learning_rate(self, value: float) -> None:
        value = float(value)
        # `not value > 0` also rejects nan
        if not value > 0:
            raise LearningRateError("learning rate must be positive")
        self.alpha = value

    def reset(self) -> None:
        self._w[:] = 0.0
        self.b = 0.0

    # ----------------- training -----------------
    def forward(self) -> np.ndarray:
        X = self._x.reshape(self._nx, self._m)
        return self._w @ X + self.b

    def loss(self, predictions: Sequence[float]) -> float:
        err = self._check_predictions(predictions) - self._y
        return float(np.mean(err * err))

    def backward(self, predictions: Sequence[float]) -> Tuple[np.ndarray, float]:
        """Apply one gradient-descent update from `predictions`; returns (dw, db)."""
        err = self._check_predictions(predictions) - self._y
        X = self._x.reshape(self._nx, self._m)

        # Gradients of the mean-squared error
        dw = (X @ err) / self._m
        db = float(err.sum()) / self._m

        self._w -= self.alpha * dw
        self.b -= self.alpha * db
        return dw, db

    def step(self) -> StepResult:
        predictions = self.forward()
        loss = self.loss(predictions)
        self.backward(predictions)
        return StepResult(predictions, self.weights, self.bias, loss)

    # ----------------- helpers -----------------
    @staticmethod
    def _as_vector(values) -> np.ndarray:
        return np.asarray(values, dtype=np.float64).ravel()

    def _check_predictions(self, predictions) -> np.ndarray:
        p = self._as_vector(predictions)
        if p.size != self._m:
            raise ShapeError("predictions", self._m, p.size, f"m={self._m}")
        return p
