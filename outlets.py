"""Typed output ports for a linreg node.

An Outlet fans each emitted value out to the callables connected to it, in
connection order. List outlets emit tuples of float, scalar outlets a float.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Tuple, Union

import numpy as np

OutletValue = Union[float, Tuple[float, ...]]
OutletCallback = Callable[[OutletValue], None]

LIST = "list"
FLOAT = "float"


class Outlet:
    def __init__(self, name: str, kind: str = LIST, keep_history: bool = False):
        if kind not in (LIST, FLOAT):
            raise ValueError(f"Unknown outlet kind: {kind}")
        self.name = name
        self.kind = kind
        self._callbacks: List[OutletCallback] = []
        self.history: Optional[List[OutletValue]] = [] if keep_history else None

    def connect(self, callback: OutletCallback) -> None:
        self._callbacks.append(callback)

    def disconnect(self, callback: Optional[OutletCallback] = None) -> None:
        """Drop one callback, or all of them when called without one."""
        if callback is None:
            self._callbacks.clear()
        else:
            self._callbacks.remove(callback)

    @property
    def connections(self) -> int:
        return len(self._callbacks)

    def emit(self, value) -> OutletValue:
        if self.kind == LIST:
            out: OutletValue = tuple(float(v) for v in np.asarray(value, dtype=np.float64).ravel())
        else:
            out = float(value)
        if self.history is not None:
            self.history.append(out)
        for cb in list(self._callbacks):
            cb(out)
        return out

    def __repr__(self) -> str:
        return f"Outlet({self.name!r}, kind={self.kind!r}, connections={self.connections})"
