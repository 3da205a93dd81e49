"""Route templates: compile ``/users/{id}`` style patterns and match paths.

A template is an ordered tuple of parts, each a ``Literal`` run of text or
a ``Variable`` name. Matching is greedy, left to right, and never
backtracks::

    template = compile_pattern("/hello/{name}/2")
    template.match("/hello/heyoo2/2")   # {"name": "heyoo2"}
    template.match("/different")        # None

Known quirks, kept deliberately:

- A variable captures everything up to the *first* occurrence of the
  following literal, so ``/{a}-{b}`` against ``/x-y-z`` yields
  ``{"a": "x", "b": "y-z"}``.
- Two variables with no literal between them share one captured value;
  the second name is dropped (``/{a}{b}`` against ``/xy`` yields
  ``{"a": "xy"}``).
- A trailing variable with nothing left to capture is dropped rather than
  mapped to ``""`` (``/files/{rest}`` against ``/files/`` yields ``{}``).
"""

from __future__ import annotations

from dataclasses import dataclass

from wren.errors import CloseUnopened, DoubleOpen, UnterminatedVariable

OPEN = "{"
CLOSE = "}"


@dataclass(frozen=True, slots=True)
class Literal:
    """Text that must appear verbatim in the path."""

    text: str


@dataclass(frozen=True, slots=True)
class Variable:
    """A named capture."""

    name: str


type PatternPart = Literal | Variable


def compile_pattern(pattern: str) -> RouteTemplate:
    """Compile *pattern* into a ``RouteTemplate``.

    Raises:
        CloseUnopened: a ``}`` with no open variable.
        DoubleOpen: a ``{`` inside an open variable.
        UnterminatedVariable: the pattern ends inside a variable.
    """
    parts: list[PatternPart] = []
    run: list[str] = []
    in_variable = False

    for ch in pattern:
        if in_variable:
            if ch == CLOSE:
                parts.append(Variable("".join(run)))
                run = []
                in_variable = False
            elif ch == OPEN:
                raise DoubleOpen()
            else:
                run.append(ch)
        elif ch == OPEN:
            if run:
                parts.append(Literal("".join(run)))
                run = []
            in_variable = True
        elif ch == CLOSE:
            raise CloseUnopened()
        else:
            run.append(ch)

    if in_variable:
        raise UnterminatedVariable("".join(run))
    if run:
        parts.append(Literal("".join(run)))

    return RouteTemplate(pattern=pattern, parts=tuple(parts))


@dataclass(frozen=True, slots=True)
class RouteTemplate:
    """A compiled route pattern. Built once at registration, never mutated."""

    pattern: str
    parts: tuple[PatternPart, ...]

    @property
    def variables(self) -> tuple[str, ...]:
        """Variable names in template order."""
        return tuple(p.name for p in self.parts if isinstance(p, Variable))

    def match(self, path: str) -> dict[str, str] | None:
        """Match a decoded *path* against this template.

        Returns the captured variables (an empty dict for a match without
        variables) or ``None`` when the path does not match.
        """
        names: list[str] = []
        values: list[str] = []
        remainder = path

        for part in self.parts:
            if isinstance(part, Variable):
                names.append(part.name)
                continue

            index = remainder.find(part.text)
            if index < 0:
                return None

            before = remainder[:index]
            if len(names) > len(values):
                # A variable is waiting: it takes everything up to the literal
                values.append(before)
            elif before:
                # Text no variable can claim; counted so the arity check fails
                values.append(before)
            remainder = remainder[index + len(part.text) :]

        if remainder:
            values.append(remainder)

        # Trailing variables that captured nothing are dropped
        if len(names) > len(values):
            names = names[: len(values)]

        if len(names) != len(values):
            return None

        return dict(zip(names, values, strict=True))

    def __str__(self) -> str:
        return self.pattern
