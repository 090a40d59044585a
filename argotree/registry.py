"""
Argotree registration: the one-time startup call a host makes to route its
command input into a command tree.

A host hands over the root command plus the glue that turns its own "sender"
object into the opaque identity the tree works with. The returned Registration
exposes the two boundary operations:

- execute(source, prompt): dispatch and report grouping-only nodes run standalone;
- complete(source, prompt): suggestions for the in-progress token.

Prompts are either pre-split token lists or shell-like strings (split with shlex).

Configuration (per registration)
- shell: print notices on stderr (rich) instead of emitting Python warnings.
- fancy: render notices inside a panel.
- colorful: style notices (see __styles__ in __main__ for overrides).
"""
import logging
import shlex
from collections.abc import Iterable

from .commands import Command, dispatch
from .completion import complete
from .faults import StandaloneExecutionWarning, FaultCode, trigger, getdoc
from .utils import *

logger = logging.getLogger(__name__)

_registrations = {}


def _tokenize(prompt, *, completing=False):
    """
    Internal: normalize a prompt into a list of tokens.

    - str: split with shlex; when completing, a whitespace left outside any word
      (not escaped, not quoted) starts a new empty in-progress token, and an
      unterminated quote falls back to plain whitespace splitting.
    - Iterable[str]: used as-is, every item must be a string.
    """
    if isinstance(prompt, str):
        try:
            tokens = shlex.split(prompt)
        except ValueError:
            if not completing:
                raise
            # an open quote keeps the last word in progress
            return prompt.split() or [""]
        if completing and len(shlex.split(prompt + "_")) > len(tokens):
            tokens.append("")
        return tokens
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("prompt must be a string or an iterable of strings")
        return tokens
    raise TypeError("prompt must be a string or an iterable of strings")


class Registration:
    """
    A root command bound to a host.

    Parameters
    - root: Command
    - resolve: Callable[[source], identity] | Unset
      maps the host's sender object to the identity passed to the tree; the
      sender itself is used when omitted.
    - shell, fancy, colorful: bool
      notice rendering options (see module docstring).
    """

    def __init__(self, root, /, resolve=Unset, *, shell=False, fancy=False, colorful=False):
        if not isinstance(root, Command):
            raise TypeError("registration root must be a command")
        if resolve is not Unset and not callable(resolve):
            raise TypeError("registration 'resolve' must be callable")
        self._root = root
        self._resolve = resolve
        self._fallback = Unset
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)

    @property
    def root(self):
        return self._root

    @property
    def name(self):
        return self._root.name

    def identify(self, source, /):
        """
        the identity for a host sender.
        """
        return source if self._resolve is Unset else self._resolve(source)

    def fallback(self, fallback, /):
        """
        Register a one-time handler receiving notices instead of the default rendering.

        Returns the same callable, enabling decorator-style usage: @registration.fallback
        """
        if not callable(fallback):
            raise TypeError("registration fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError("registration fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    def trigger(self, fault, /, **options):
        defaults = {"tool": self._root, "shell": self.shell, "fancy": self.fancy, "colorful": self.colorful}
        fault = fault.__replace__(**defaults | options)
        if self._fallback:
            self._fallback(fault)
        else:
            trigger(fault)

    def execute(self, source, prompt, /):
        """
        Dispatch a prompt on behalf of `source`.

        A grouping-only command reached without a subcommand surfaces a
        StandaloneExecutionWarning; it is a notice, not an exception.

        Returns
        - Outcome from dispatch().
        """
        identity = self.identify(source)
        outcome = dispatch(self._root, _tokenize(prompt), identity)
        if not outcome.executed:
            route = outcome.command.route
            self.trigger(StandaloneExecutionWarning(
                "%r cannot run without a subcommand" % route,
                title="missing subcommand",
                code=FaultCode.STANDALONE_EXECUTION,
                hint="add one of: %s" % (", ".join(child.name for child in outcome.command.children) or "(none)"),
                command=outcome.command,
                identity=identity,
                docs=getdoc(FaultCode.STANDALONE_EXECUTION),
            ))
        return outcome

    def complete(self, source, prompt, /):
        """
        Suggestions for the in-progress token of a prompt typed by `source`.
        """
        return complete(self._root, _tokenize(prompt, completing=True), self.identify(source))

    def __repr__(self):
        return f"registration(name={self.name!r}, shell={self.shell!r}, fancy={self.fancy!r}, colorful={self.colorful!r})"


def register(root, /, *args, **kwargs):
    """
    Bind a root command to the host, once per root name.

    Parameters
    - root: Command
    - *args, **kwargs: forwarded to Registration (resolve, shell, fancy, colorful).

    Raises
    - ValueError: when a root with the same name is already registered.
    """
    registration = Registration(root, *args, **kwargs)
    if _registrations.setdefault(registration.name, registration) is not registration:
        raise ValueError(f"command {registration.name!r} is already registered")
    logger.info("registered command %r", registration.name)
    return registration


def registered(name, /):
    """
    the registration bound to `name`; KeyError when there is none.
    """
    return _registrations[name]


def unregister(name, /):
    """
    remove and return the registration bound to `name`; KeyError when there is none.
    """
    registration = _registrations.pop(name)
    logger.info("unregistered command %r", name)
    return registration


__all__ = (
    "Registration",
    "register",
    "registered",
    "unregister",
)
