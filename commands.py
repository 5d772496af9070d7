"""Commands understood by a linreg node.

Every inbound message maps to exactly one of the frozen dataclasses below.
The host speaks in whitespace-separated text messages ("x 1 2 3 4",
"alpha 0.05", "bang"); `parse_message` turns those into typed commands.
Payloads are converted to floats when a command is built (CommandParseError
on bad atoms); vector lengths are checked against the node only when applied.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, Sequence, Tuple, Type, Union


class CommandParseError(ValueError):
    pass


def _to_float(selector: str, atom) -> float:
    if isinstance(atom, bool):
        raise CommandParseError(f"{selector}: bad argument {atom!r}")
    try:
        return float(atom)
    except (TypeError, ValueError):
        raise CommandParseError(f"{selector}: bad argument {atom!r}") from None


@dataclass(frozen=True)
class _VectorCommand:
    values: Tuple[float, ...]
    selector: ClassVar[str] = ""

    def __post_init__(self):
        if isinstance(self.values, (str, bytes)):
            raise CommandParseError(f"{self.selector}: expected a sequence of numbers, got {self.values!r}")
        try:
            atoms = tuple(self.values)
        except TypeError:
            raise CommandParseError(f"{self.selector}: expected a sequence of numbers, got {self.values!r}") from None
        # frozen: bypass __setattr__ to store the converted payload
        object.__setattr__(self, "values", tuple(_to_float(self.selector, a) for a in atoms))


@dataclass(frozen=True)
class _ScalarCommand:
    value: float = 0.0
    selector: ClassVar[str] = ""

    def __post_init__(self):
        object.__setattr__(self, "value", _to_float(self.selector, self.value))


@dataclass(frozen=True)
class SetFeatures(_VectorCommand):
    selector: ClassVar[str] = "x"


@dataclass(frozen=True)
class SetTargets(_VectorCommand):
    selector: ClassVar[str] = "y"


@dataclass(frozen=True)
class SetWeights(_VectorCommand):
    selector: ClassVar[str] = "weights"


@dataclass(frozen=True)
class SetBias(_ScalarCommand):
    selector: ClassVar[str] = "bias"


@dataclass(frozen=True)
class SetLearningRate(_ScalarCommand):
    selector: ClassVar[str] = "alpha"


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class GetWeights:
    pass


@dataclass(frozen=True)
class GetBias:
    pass


@dataclass(frozen=True)
class Bang:
    pass


Command = Union[
    SetFeatures, SetTargets, SetWeights, SetBias, SetLearningRate,
    Reset, GetWeights, GetBias, Bang,
]

# selector -> command class, grouped by payload kind
VECTOR_COMMANDS: Dict[str, Type] = {"x": SetFeatures, "y": SetTargets, "weights": SetWeights}
SCALAR_COMMANDS: Dict[str, Type] = {"bias": SetBias, "alpha": SetLearningRate}
BARE_COMMANDS: Dict[str, Type] = {
    "reset": Reset, "get_weights": GetWeights, "get_bias": GetBias, "bang": Bang,
}


def build_command(selector: str, args: Sequence = ()) -> Command:
    """Build a typed command from a selector and its (text or numeric) atoms."""
    selector = str(selector).strip()
    args = list(args)

    if selector in VECTOR_COMMANDS:
        return VECTOR_COMMANDS[selector](args)

    if selector in SCALAR_COMMANDS:
        # a missing scalar argument reads as 0, extra ones are an error
        if len(args) > 1:
            raise CommandParseError(f"{selector}: expected 1 argument, got {len(args)}")
        return SCALAR_COMMANDS[selector](*args)

    if selector in BARE_COMMANDS:
        if args:
            raise CommandParseError(f"{selector}: takes no arguments, got {len(args)}")
        return BARE_COMMANDS[selector]()

    raise CommandParseError(f"no method for '{selector}'")


def parse_message(message: str) -> Command:
    """Parse one text message such as "weights 0.5 -1" into a command.

    A trailing ';' is accepted and ignored.
    """
    atoms = message.strip().rstrip(";").split()
    if not atoms:
        raise CommandParseError("empty message")
    return build_command(atoms[0], atoms[1:])
