r"""
Argotree flag specifications and parsed arguments.

Overview
- Specs
  • Flag: presence-only switch, e.g. -v or --verbose.
  • Option: value-bearing switch whose value is the token right after it, e.g. -o out.txt.
  Both are immutable templates shared by every invocation; binding a value never
  touches the spec, it produces a new Occurrence instead.

- Parsed arguments
  • Literal(value): a positional word (anything that is not a recognized flag).
  • Occurrence(flag, value=None): one appearance of a flag in a given invocation.

Surface syntax
- A one-character name is written with a single dash ("-x") and may be clustered
  with other one-character flags ("-xvf").
- A longer name is written with a double dash ("--name") and is never clustered.

Equality
- Specs compare and hash by name only, so Flag("o") == Option("o"). This allows
  cheap comparison-only specs: `Flag("all") in occurrences(arguments)`.

Quick example:
    >>> from argotree.flags import Flag, Option
    >>> verbose = Flag("v", next=lambda previous: {"f"})
    >>> output = Option("output", ("a.txt", "b.txt"))
    >>> str(verbose), str(output)
    ('-v', '--output')
"""
import enum
import functools
import operator
import re
from collections import namedtuple
from collections.abc import Iterable

from .utils import *


class FlagKind(enum.Enum):
    """
    kind tag of a flag specification.

    - SIMPLE: presence-only (Flag).
    - OPTION: binds the following token as its value (Option).
    """
    SIMPLE = "simple"
    OPTION = "option"


class FlagType(type):
    """
    Metaclass for flag specifications.

    Responsibilities
    - derive __typename__ from the class name for messages ("flag", "option").
    - expose every name in __introspectable__ as a read-only property (see mirror()).
    - provide stable __repr__/__rich_repr__ built from __displayable__.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, name, /):
    """
    Internal: validate a flag name (without dashes).

    Rules
    - must be a string, non-empty, without whitespace;
    - must not start with a dash (the dashes are derived from the length).
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    elif not name:
        raise ValueError(f"{cls.__typename__} name cannot be empty")
    elif not re.fullmatch(r"[^\s-]\S*", name):
        raise ValueError(f"{cls.__typename__} name {name!r} cannot start with a dash or contain whitespace")
    return name


def _sanitize_next(cls, name, next, /):
    """
    Internal: validate the cluster-continuation provider.

    Only one-character flags can be clustered, so a provider on a longer name is
    a construction error rather than something silently ignored.
    """
    if next is Unset:
        return Unset
    if not callable(next):
        raise TypeError(f"{cls.__typename__} 'next' must be callable")
    if len(name) > 1:
        raise ValueError(f"{cls.__typename__} {name!r} cannot be clustered, so it cannot have a 'next' provider")
    return next


class Flag(metaclass=FlagType):
    """
    Presence-only flag specification.

    Parameters
    - name: str (positional-only)
      the flag name without dashes; its length decides the surface form.
    - next: Callable[[Sequence[Flag]], Iterable[str]] (keyword-only)
      one-character flags only. Receives the flags already typed in the current
      cluster and returns the characters that may follow inside that cluster.
      Must be a pure function of its input.
    """

    __introspectable__ = ("name",)

    kind = FlagKind.SIMPLE

    def __new__(cls, name, /, *, next=Unset):
        self = super().__new__(cls)
        self._name = _sanitize_name(cls, name)
        self._next = _sanitize_next(cls, name, next)
        return self

    @property
    def surface(self):
        """
        the flag as typed on the command line: '-x' for one character, '--name' otherwise.
        """
        return ("--" if len(self._name) > 1 else "-") + self._name

    @property
    def clusterable(self):
        return len(self._name) == 1

    def suggested_next(self, previous=(), /):
        """
        characters that may follow this flag inside a cluster.

        parameters
        - previous: Iterable[Flag]
          every flag consumed so far in the cluster (this one included).

        returns
        - frozenset[str] of single characters; empty when no provider was given.
        """
        if self._next is Unset:
            return frozenset()
        return frozenset(character for character in self._next(tuple(previous)) if len(character) == 1)

    def __str__(self):
        return self.surface

    def __eq__(self, other):
        if isinstance(other, Flag):
            return self._name == other._name
        return NotImplemented

    def __hash__(self):
        return hash(self._name)


class Option(Flag):
    """
    Value-bearing flag specification.

    The value is never given inline: it is the token right after '--name' (or after
    a lone '-x'). A trailing option with nothing after it still parses, with no value.

    Parameters
    - name: str (positional-only)
      the option name without dashes.
    - suggestions: Iterable[str] | Callable[[], Iterable[str]]
      values offered by completion while the option waits for its value.
    - next: see Flag.
    """

    __displayable__ = ("name", "suggestions")

    kind = FlagKind.OPTION

    def __new__(cls, name, /, suggestions=(), *, next=Unset):
        self = super().__new__(cls, name, next=next)
        if callable(suggestions):
            self._suggestions = suggestions
        elif isinstance(suggestions, Iterable) and not isinstance(suggestions, str):
            suggestions = tuple(suggestions)
            if not all(isinstance(suggestion, str) for suggestion in suggestions):
                raise TypeError(f"{cls.__typename__} 'suggestions' must only contain strings")
            self._suggestions = suggestions
        else:
            raise TypeError(f"{cls.__typename__} 'suggestions' must be an iterable of strings or a callable")
        return self

    @property
    def suggestions(self):
        return self._suggestions

    def suggested_options(self):
        """
        ordered values suggested while this option waits for its value.
        """
        if callable(self._suggestions):
            return tuple(self._suggestions())
        return self._suggestions


class Literal(namedtuple("Literal", ("value",))):
    """
    a positional word, kept exactly as typed.
    """
    __slots__ = ()

    def __str__(self):
        return self.value


class Occurrence(namedtuple("Occurrence", ("flag", "value"), defaults=(None,))):
    """
    one appearance of a flag in an invocation.

    `value` is only set for an Option whose following token was consumed; it is
    None for flags and for options left without a value.
    """
    __slots__ = ()

    @property
    def name(self):
        return self.flag.name

    @property
    def kind(self):
        return self.flag.kind

    def __str__(self):
        return self.flag.surface if self.value is None else f"{self.flag.surface} {self.value}"


def literals(arguments, /):
    """
    only the positional words of a parsed argument sequence, in order.
    """
    return tuple(argument.value for argument in arguments if isinstance(argument, Literal))


def occurrences(arguments, /):
    """
    only the flag occurrences of a parsed argument sequence, in order.
    """
    return tuple(argument for argument in arguments if isinstance(argument, Occurrence))


__all__ = (
    # Types
    "FlagKind",
    "Flag",
    "Option",
    "Literal",
    "Occurrence",

    # Helpers
    "literals",
    "occurrences",
)

# Not part of the public API.
del FlagType
