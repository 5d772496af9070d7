"""linreg node: a BatchLinearRegressor wired to inbound commands and outlets.

Usage from a host loop:
    node = LinRegNode(nx=2, m=3, alpha=0.1)
    node.predictions.connect(print)
    node.send("x 1 2 3 4 5 6")
    node.send("y 3 5 7")
    node.send("bang")   # predictions -> bias -> weights

Rejected commands never raise: the node logs a diagnostic on the "linreg"
logger, leaves its state as it was and returns False. With
report_params=False a trigger only emits predictions (the update still runs).
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from commands import (
    Bang, Command, CommandParseError, GetBias, GetWeights, Reset, SetBias,
    SetFeatures, SetLearningRate, SetTargets, SetWeights, parse_message,
)
from outlets import FLOAT, LIST, Outlet
from regressor import BatchLinearRegressor, RegressorError

log = logging.getLogger("linreg")

DEFAULT_NX = 1
DEFAULT_M = 1
DEFAULT_ALPHA = 0.01

# commands that must not run while a trigger is in progress
_NOT_REENTRANT = (Bang, SetFeatures, SetTargets)


def _truncate(name: str, atom) -> int:
    # host atoms are floats; sizes drop the fractional part
    try:
        return int(float(atom))
    except (OverflowError, ValueError):
        raise ValueError(f"{name} must be an integer, got {atom!r}") from None


class LinRegNode:
    def __init__(
        self,
        nx: int = DEFAULT_NX,
        m: int = DEFAULT_M,
        alpha: float = DEFAULT_ALPHA,
        *,
        report_params: bool = True,
        keep_history: bool = False,
    ) -> None:
        self._model: Optional[BatchLinearRegressor] = BatchLinearRegressor(nx, m, alpha)
        self.report_params = bool(report_params)

        self.predictions = Outlet("predictions", LIST, keep_history)
        self.weights_out = Outlet("weights", LIST, keep_history)
        self.bias_out = Outlet("bias", FLOAT, keep_history)

        self.triggers = 0
        self.rejected = 0
        self.last_loss: Optional[float] = None
        self._in_trigger = False

        self._handlers = {
            SetFeatures: lambda c: self.model.set_features(c.values),
            SetTargets: lambda c: self.model.set_targets(c.values),
            SetWeights: lambda c: self.model.set_weights(c.values),
            SetBias: lambda c: self.model.set_bias(c.value),
            SetLearningRate: lambda c: self.model.set_learning_rate(c.value),
            Reset: lambda c: self.model.reset(),
            GetWeights: lambda c: self.weights_out.emit(self.model.weights),
            GetBias: lambda c: self.bias_out.emit(self.model.bias),
            Bang: lambda c: self._trigger(),
        }

    @classmethod
    def from_args(cls, *atoms, **kwargs) -> "LinRegNode":
        """Create from host creation arguments: [nx [m [alpha]]].

        nx and m are truncated to integers; missing values take the defaults.
        """
        if len(atoms) > 3:
            raise ValueError(f"expected at most 3 creation arguments, got {len(atoms)}")
        nx = _truncate("nx", atoms[0]) if len(atoms) >= 1 else DEFAULT_NX
        m = _truncate("m", atoms[1]) if len(atoms) >= 2 else DEFAULT_M
        alpha = float(atoms[2]) if len(atoms) >= 3 else DEFAULT_ALPHA
        return cls(nx, m, alpha, **kwargs)

    # ----------------- lifecycle -----------------
    @property
    def model(self) -> BatchLinearRegressor:
        if self._model is None:
            raise RuntimeError("linreg node is closed")
        return self._model

    @property
    def closed(self) -> bool:
        return self._model is None

    def close(self) -> None:
        if self._model is None:
            return
        self._model = None
        for outlet in (self.predictions, self.weights_out, self.bias_out):
            outlet.disconnect()

    def __enter__(self) -> "LinRegNode":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ----------------- inbound -----------------
    def send(self, message: str) -> bool:
        """Parse and dispatch one text message."""
        if self.closed:
            raise RuntimeError("linreg node is closed")
        try:
            command = parse_message(message)
        except CommandParseError as e:
            return self._reject(e)
        return self.dispatch(command)

    def dispatch(self, command: Command) -> bool:
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"not a linreg command: {command!r}")
        if self._in_trigger and isinstance(command, _NOT_REENTRANT):
            return self._reject(f"'{type(command).__name__}' ignored while a trigger is running")
        try:
            handler(command)
        except (RegressorError, CommandParseError) as e:
            return self._reject(e)
        return True

    # shorthands for the message forms
    def bang(self) -> bool:
        return self.dispatch(Bang())

    def set_features(self, values: Sequence[float]) -> bool:
        return self._build_and_dispatch(SetFeatures, values)

    def set_targets(self, values: Sequence[float]) -> bool:
        return self._build_and_dispatch(SetTargets, values)

    def set_weights(self, values: Sequence[float]) -> bool:
        return self._build_and_dispatch(SetWeights, values)

    def set_bias(self, value: float) -> bool:
        return self._build_and_dispatch(SetBias, value)

    def set_learning_rate(self, value: float) -> bool:
        return self._build_and_dispatch(SetLearningRate, value)

    def reset(self) -> bool:
        return self.dispatch(Reset())

    def get_weights(self) -> bool:
        return self.dispatch(GetWeights())

    def get_bias(self) -> bool:
        return self.dispatch(GetBias())

    # ----------------- helpers -----------------
    def _trigger(self) -> None:
        model = self.model
        self._in_trigger = True
        try:
            predictions = model.forward()
            self.last_loss = model.loss(predictions)
            self.predictions.emit(predictions)
            model.backward(predictions)
            self.triggers += 1
            log.debug("linreg: trigger %d loss=%.6g", self.triggers, self.last_loss)
            if self.report_params:
                self.bias_out.emit(model.bias)
                self.weights_out.emit(model.weights)
        finally:
            self._in_trigger = False

    def _build_and_dispatch(self, factory, payload) -> bool:
        if self.closed:
            raise RuntimeError("linreg node is closed")
        try:
            command = factory(payload)
        except CommandParseError as e:
            return self._reject(e)
        return self.dispatch(command)

    def _reject(self, reason) -> bool:
        self.rejected += 1
        log.error("linreg: %s", reason)
        return False

    def __repr__(self) -> str:
        if self.closed:
            return "LinRegNode(closed)"
        return (f"LinRegNode(nx={self.model.nx}, m={self.model.m}, "
                f"alpha={self.model.alpha}, report_params={self.report_params})")
