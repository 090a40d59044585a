"""
Argotree command layer: build command trees and dispatch raw tokens through them.

What this module provides
- Command: abstract tree node with a name, aliases, ordered children and four
  identity-parameterized hooks:
  • allowed_flags(identity)                   → flags recognized at this node
  • tab_complete(identity, arguments, typed)  → contextual completions
  • suggest_flags(identity, arguments)        → flags offered by completion
  • execute(identity, arguments)              → False when the node only groups children
- Mixins for the common shapes: Flagless, Parameterless, ParentOnly.
- CallbackCommand / command(...): build a node from a plain function.
- Group / group(...): a grouping-only node.
- unused_flags(...): the default flag-suggestion policy, called explicitly.
- dispatch(command, tokens, identity): walk the tree and execute.

Core ideas
- The identity ("who is running this") is opaque: it is passed through to the
  hooks unexamined.
- The tree is built once (children attach to their parent at construction) and is
  read-only afterwards; dispatch never creates or mutates nodes.
- Each level of descent consumes exactly one path token.

Quick start
    from argotree import command, group, Flag, Option, dispatch

    root = group("backup")

    @root.command(aliases=("ls",), flags=(Flag("a"), Option("format", ("json", "text"))))
    def list(identity, arguments):
        ...

    dispatch(root, ["ls", "-a", "--format", "json"], None)
"""
import inspect
import logging
import re
from abc import ABCMeta, abstractmethod
from collections import namedtuple

from .flags import Occurrence
from .parsing import parse_flags
from .utils import *

logger = logging.getLogger(__name__)


class CommandType(ABCMeta):
    """
    Metaclass for command nodes.

    Responsibilities
    - derive __typename__ from the class name for messages.
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
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join('%s=%r' % pair for pair in self.__rich_repr__())})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_word(cls, word, what, /):
    """
    Internal: validate a name or alias (one path token, so no whitespace).
    """
    if not isinstance(word, str):
        raise TypeError(f"{cls.__typename__} {what} must be a string")
    elif not word:
        raise ValueError(f"{cls.__typename__} {what} cannot be empty")
    elif re.search(r"\s", word):
        raise ValueError(f"{cls.__typename__} {what} {word!r} cannot contain whitespace")
    return word


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing unique names and aliases.

    Names and aliases share one namespace among siblings, so a path token always
    resolves to at most one child.
    """
    if parent is Unset:
        return
    for word in (self.name, *self.aliases):
        if word in parent._routes:
            typeof = "subcommand" if parent.parent else "command"
            raise ValueError(f"{type(self).__typename__} {typeof} name {word!r} is already in use under {parent.route!r}")
    for word in (self.name, *self.aliases):
        parent._routes[word] = self
    parent._children.append(self)


class Command(metaclass=CommandType):
    """
    Abstract command node.

    Parameters
    - name: str (positional-only)
      the token that selects this node under its parent.
    - aliases: Iterable[str]
      alternative tokens; unique among siblings, also versus sibling names.
    - parent: Command | Unset
      parent node; the node attaches itself to it on construction.

    Subclasses implement the four hooks (or pick them up from the mixins below).
    Hooks receive the opaque identity and must not mutate the tree.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "parent",
    )

    __displayable__ = (
        "name",
        "aliases",
        "children",
    )

    def __init__(self, name, /, aliases=(), parent=Unset):
        cls = type(self)
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")
        if isinstance(aliases, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")

        self._name = _sanitize_word(cls, name, "name")
        self._aliases = []
        for alias in aliases:
            if _sanitize_word(cls, alias, "alias") in (self._name, *self._aliases):
                raise ValueError(f"{cls.__typename__} aliases cannot repeat the name or each other ({alias!r})")
            self._aliases.append(alias)

        self._parent = parent
        self._children = []
        self._routes = {}
        _attach_to_parent(self, parent)

    @property
    def children(self):
        """
        child commands, in attachment order.
        """
        return tuple(self._children)

    @property
    def root(self):
        """
        the topmost command of this tree.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """
        the space-joined names from root to this command (e.g., 'backup list').
        """
        return " ".join(step.name for step in self.path)

    @abstractmethod
    def allowed_flags(self, identity, /):
        """
        flags recognized at this node for the given identity (unique names).
        """

    @abstractmethod
    def suggest_flags(self, identity, arguments, /):
        """
        flags offered by completion, given what was already parsed.
        most nodes return unused_flags(self, identity, arguments).
        """

    @abstractmethod
    def tab_complete(self, identity, arguments, typed, /):
        """
        contextual completions other than child names, flags and option values.
        no need to filter by `typed`; narrowing happens afterwards.
        """

    @abstractmethod
    def execute(self, identity, arguments, /):
        """
        run this command with its parsed arguments.
        returns False if and only if the node cannot run standalone.
        """

    def command(self, source=Unset, /, *args, **kwargs):
        """
        create a CallbackCommand under this command (decorator or direct form).
        """
        return command(source, *args, parent=self, **kwargs)

    def group(self, name, /, aliases=()):
        """
        create a grouping-only child.
        """
        return Group(name, aliases, self)


class Flagless:
    """
    Mixin: the node recognizes no flags and suggests none.
    """

    def allowed_flags(self, identity, /):
        return ()

    def suggest_flags(self, identity, arguments, /):
        return ()


class Parameterless(Flagless):
    """
    Mixin: Flagless, and no contextual completions either.
    """

    def tab_complete(self, identity, arguments, typed, /):
        return ()


class ParentOnly(Parameterless):
    """
    Mixin: the node only groups children and cannot run by itself.
    """

    def execute(self, identity, arguments, /):
        return False


class Group(ParentOnly, Command):
    """
    Concrete grouping-only command.
    """


class CallbackCommand(Command):
    """
    Command backed by a plain function.

    Parameters
    - callback: Callable[[identity, arguments], bool | None] (positional-only)
      returning None counts as having run; returning False marks the node as
      grouping-only for that invocation.
    - name: str | Unset
      defaults to callback.__name__.
    - aliases, parent: see Command.
    - flags: Iterable[Flag] | Callable[[identity], Iterable[Flag]]
      static flags, or a provider evaluated per identity.
    - completer: Callable[[identity, arguments, typed], Iterable[str]] | Unset
      contextual completions.
    - repeatable: bool
      when True, flags already used stay in the suggestions.
    """

    def __init__(self, callback, /, name=Unset, aliases=(), parent=Unset, *, flags=(), completer=Unset, repeatable=False):
        cls = type(self)
        if not callable(callback):
            raise TypeError(f"{cls.__typename__} callback must be callable")
        if not callable(flags) and isinstance(flags, str):
            raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of flags or a callable")
        if completer is not Unset and not callable(completer):
            raise TypeError(f"{cls.__typename__} 'completer' must be callable")

        self._callback = callback
        self._flags = flags if callable(flags) else tuple(flags)
        self._completer = completer
        self._repeatable = bool(repeatable)
        super().__init__(coalesce(name, getattr(callback, "__name__", None)), aliases, parent)
        self.__doc__ = inspect.getdoc(callback)

    @property
    def callback(self):
        return self._callback

    def allowed_flags(self, identity, /):
        if callable(self._flags):
            return tuple(self._flags(identity))
        return self._flags

    def suggest_flags(self, identity, arguments, /):
        if self._repeatable:
            return self.allowed_flags(identity)
        return unused_flags(self, identity, arguments)

    def tab_complete(self, identity, arguments, typed, /):
        if self._completer is Unset:
            return ()
        return tuple(self._completer(identity, arguments, typed))

    def execute(self, identity, arguments, /):
        result = self._callback(identity, arguments)
        return True if result is None else bool(result)


def unused_flags(command, identity, arguments, /):
    """
    default flag-suggestion policy: allowed flags minus those already used.

    parameters
    - command: Command
    - identity: opaque caller identity
    - arguments: Sequence[Literal | Occurrence] already parsed

    returns
    - tuple[Flag, ...] in allowed order.
    """
    used = {argument.flag for argument in arguments if isinstance(argument, Occurrence)}
    return tuple(flag for flag in command.allowed_flags(identity) if flag not in used)


def lookup(command, token, /):
    """
    the child of `command` named (or aliased) `token`, or None.
    """
    return command._routes.get(token)


class Outcome(namedtuple("Outcome", ("command", "arguments", "executed"))):
    """
    result of dispatch().

    - command: the terminal node that received the arguments.
    - arguments: the parsed arguments handed to it.
    - executed: what execute() returned; False means it cannot run standalone.
    """
    __slots__ = ()


def dispatch(command, tokens, identity=None, /):
    """
    resolve the terminal command for `tokens` and execute it.

    behavior
    - when the first token names a child (name or alias), recurse into it with
      that token removed: exactly one token is consumed per level.
    - otherwise this node is terminal: parse the remaining tokens against
      command.allowed_flags(identity) and call command.execute(identity, arguments).

    returns
    - Outcome(command, arguments, executed). A False `executed` is not a failure
      of dispatch; callers decide how to report it.
    """
    tokens = list(tokens)
    if tokens and (child := lookup(command, tokens[0])) is not None:
        logger.debug("descending from %r into %r", command.name, child.name)
        return dispatch(child, tokens[1:], identity)

    arguments = parse_flags(tokens, command.allowed_flags(identity))
    logger.debug("executing %r with %d argument(s)", command.route, len(arguments))
    executed = bool(command.execute(identity, arguments))
    return Outcome(command, arguments, executed)


def command(source=Unset, /, *args, **kwargs):
    """
    Create a CallbackCommand or return a decorator to build it later.

    Invocation modes
    - Direct:    cmd = command(func, "name", parent=root, flags=(...))
    - Decorator: @command("name", aliases=("n",))  /  @command
                 def func(identity, arguments): ...

    A string first argument is treated as the name in decorator mode.
    """
    if isinstance(source, str):
        args = (source, *args)
        source = Unset

    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return CallbackCommand(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def group(name, /, aliases=(), parent=Unset):
    """
    Create a grouping-only command (its execute always returns False).
    """
    return Group(name, aliases, parent)


__all__ = (
    "Command",
    "Flagless",
    "Parameterless",
    "ParentOnly",
    "Group",
    "CallbackCommand",
    "Outcome",
    "unused_flags",
    "lookup",
    "dispatch",
    "command",
    "group",
)

# Not part of the public API.
del CommandType
