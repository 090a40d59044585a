"""
Argotree faults (user-facing notices) and rendering.

Scope
- FaultCode: stable numeric identifiers for user-facing notices.
- CommandWarning: message + options, rendered with rich.
- StandaloneExecutionWarning: a grouping-only command was run without a subcommand.
- trigger(): surface a fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Nothing in the parsing core is an error: unknown flags become literals and
unknown path segments end the tree descent. The only notice the core defines is
standalone execution of a grouping-only command, and it never raises.

Host hooks read from __main__
- __prog__: program name shown in the header (defaults to the root command name).
- __styles__: overrides for entries of STYLES.
- __codes__: FaultCode → label used instead of the number.
- __docs__: FaultCode → description returned by getdoc().
"""
import inspect
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)

STYLES = MappingProxyType({
    "prog": "bold #E6E6F0",
    "code": "bold #FFB400",
    "title": "bold #FFC2E0",
    "message": "#D6D6DE",
    "arrow": "dim #B8EFAF",
    "hint": "italic #B8EFAF",
})


def _palette(colorful):
    if not colorful:
        return defaultdict(str)
    return defaultdict(str, STYLES | getattr(__import__("__main__"), "__styles__", {}))


class FaultCode(IntEnum):
    """
    canonical fault codes.

    121xx: execution notices
    """
    STANDALONE_EXECUTION = 12141

    def normalize(self):
        """
        the host label for this code (__codes__ in __main__), else the number.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandWarning(ABC, Warning):
    """
    Base notice type.

    Options understood by the renderer
    - code: FaultCode (STANDALONE_EXECUTION when absent), title: str, hint: str | None
    - tool: the root command, used for the header when __prog__ is absent
    - shell, fancy, colorful: bool
    Any other option (command, identity, docs, ...) is carried for fallbacks.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message else ""

    def __rich__(self):
        palette = _palette(self.options.get("colorful", False))
        tool = self.options.get("tool")
        prog = getattr(__import__("__main__"), "__prog__", getattr(tool, "name", "argotree"))

        header = Text.assemble(
            "[ ",
            (str(prog), palette["prog"]),
            " — ",
            (self.options.get("code", FaultCode.STANDALONE_EXECUTION).normalize(), palette["code"]),
            " | ",
            (self.options.get("title", "notice").title(), palette["title"]),
            " ]",
        )
        lines = [Text(str(self), palette["message"])]
        if hint := self.options.get("hint"):
            lines.append(Text.assemble((" → ", palette["arrow"]), (hint, palette["hint"])))

        if self.options.get("fancy", False):
            return Panel(Group(*lines), title=header, title_align="left", width=console.width - 4)
        return Group(header, *lines)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class StandaloneExecutionWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    the options are merged into a copy of the fault (__replace__) which is then
    triggered: printed on stderr in shell mode, emitted with warnings.warn otherwise.
    """
    if not callable(getattr(fault, "__trigger__", None)) or not callable(getattr(fault, "__replace__", None)):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    the host description for a fault code (__docs__ in __main__), or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "CommandWarning",
    "StandaloneExecutionWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
