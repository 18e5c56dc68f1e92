"""
Named constants available to the search.

Default constants are computed by mpmath at the precision active when they
are requested. User constants come from a flat `name = value` file.

RULE: constant names are unique across the registry, default or not.
A redefinition leaves the search ambiguous and is a fatal error.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional

import mpmath
import sympy

from dimensioned import DimensionedValue, parse_value
from errors import DuplicateConstantName

CONSTANTS_FILENAME = "constants.conf"


@dataclass(frozen=True)
class Constant:
    """A registered constant. Immutable once registered."""
    value: DimensionedValue
    name: str
    is_default: bool = False


@dataclass(frozen=True)
class DefaultConstant:
    """A built-in constant in both numeric and exact symbolic form."""
    # mpmath value, rounded at the caller's precision
    compute: Callable[[], mpmath.mpf]
    # sympy form, for recomputation along an independent path
    symbolic: Callable[[], sympy.Expr]


FINE_STRUCTURE = "0.0072973525693"

DEFAULT_CONSTANTS: Dict[str, DefaultConstant] = {
    "pi":             DefaultConstant(lambda: +mpmath.pi, lambda: sympy.pi),
    "e":              DefaultConstant(lambda: +mpmath.e, lambda: sympy.E),
    "euler":          DefaultConstant(lambda: +mpmath.euler, lambda: sympy.EulerGamma),
    "ln2":            DefaultConstant(lambda: +mpmath.ln2, lambda: sympy.log(2)),
    "catalan":        DefaultConstant(lambda: +mpmath.catalan, lambda: sympy.Catalan),
    "phi":            DefaultConstant(lambda: (1 + mpmath.sqrt(5)) / 2, lambda: sympy.GoldenRatio),
    "fine-structure": DefaultConstant(
        lambda: mpmath.mpf(FINE_STRUCTURE), lambda: sympy.Rational(FINE_STRUCTURE)
    ),
}


def default_constant(name: str) -> Constant:
    """Compute a default constant at the current mpmath precision."""
    if name not in DEFAULT_CONSTANTS:
        raise KeyError(f"Unknown default constant: {name}")
    return Constant(DimensionedValue(DEFAULT_CONSTANTS[name].compute()), name, is_default=True)


def default_constants() -> List[Constant]:
    return [default_constant(name) for name in DEFAULT_CONSTANTS]


class ConstantRegistry:
    """Ordered collection of constants with unique names."""

    def __init__(self, constants: Iterable[Constant] = ()):
        self._constants: List[Constant] = []
        self._by_name: Dict[str, Constant] = {}
        for constant in constants:
            self.register(constant)

    def register(self, constant: Constant) -> None:
        if constant.name in self._by_name:
            previous = self._by_name[constant.name]
            raise DuplicateConstantName(
                constant.name,
                f"constant redefined: {constant.name} = {constant.value} "
                f"over {previous.name} = {previous.value}",
            )
        self._constants.append(constant)
        self._by_name[constant.name] = constant

    def get(self, name: str) -> Optional[Constant]:
        return self._by_name.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Constant]:
        return iter(self._constants)

    def __len__(self) -> int:
        return len(self._constants)

    def __getitem__(self, index: int) -> Constant:
        return self._constants[index]

    def names(self) -> List[str]:
        return [c.name for c in self._constants]


def load_constants(path: Path = Path(CONSTANTS_FILENAME), warn=print) -> ConstantRegistry:
    """
    Read a constant-definition file into a registry.

    Each non-empty line, with all whitespace removed, is either a default
    constant name ("pi") or a definition ("g = 9.81 m/s^2"). Malformed
    lines are reported through `warn` and skipped. A missing file selects
    every default constant.

    Raises:
        DuplicateConstantName: a name is defined twice, or a definition
            reuses a default constant's name.
    """
    path = Path(path)
    if not path.exists():
        return ConstantRegistry(default_constants())

    registry = ConstantRegistry()
    lineno = 0
    for raw in path.read_text().splitlines():
        if not raw.strip():
            continue
        lineno += 1
        line = "".join(raw.split())
        tokens = line.split("=")

        if len(tokens) == 1:
            name = tokens[0]
            if name in DEFAULT_CONSTANTS:
                registry.register(default_constant(name))
                continue
            known = ", ".join(f'"{n}"' for n in DEFAULT_CONSTANTS)
            warn(
                f"warning: {path.name} entry #{lineno} had 1 token; expecting a default "
                f'constant name, but "{name}" is not one of {{{known}}}. specifying a '
                f'value might look like "{name} = 1.0 s" ... skipping'
            )
            continue

        if len(tokens) > 2:
            warn(f"warning: {path.name} entry #{lineno} had {len(tokens)} tokens ... using first two")

        name, value = tokens[0], tokens[1]
        if not name or not value:
            warn(f"warning: {path.name} entry #{lineno} had empty name or value ... skipping")
            continue
        if name in DEFAULT_CONSTANTS:
            raise DuplicateConstantName(
                name,
                f"{path.name} entry #{lineno} redefined default constant: {name} = {value}",
            )

        registry.register(Constant(parse_value(value), name))

    return registry
