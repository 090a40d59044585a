"""
Argotree completion engine.

complete(command, tokens, identity) produces the suggestions for the last,
in-progress token. It walks the tree exactly like dispatch() does and parses the
already-supplied tokens with the same parser, so completion never suggests a
position the dispatcher would not reach.

Candidate groups, in order
1. child names and aliases of the resolved node;
2. contextual completions from node.tab_complete(...);
3. flags from node.suggest_flags(...), as typed ('-x' / '--name');
4. cluster continuations: '-ab' + each character allowed to follow b.

When the in-progress token is the value of a pending option, the candidates are
that option's suggested values only. Candidates are finally narrowed by prefix.
"""
import logging

from .commands import lookup
from .parsing import parse_flags, cluster_flags, pending_option, narrow

logger = logging.getLogger(__name__)


def _continuations(typed, allowed):
    """
    Internal: cluster continuations for the in-progress token.

    When `typed` is a single-dash cluster whose characters are all allowed
    one-character flags, ask the last flag which characters may follow and keep
    those naming allowed one-character flags.
    """
    if not (context := cluster_flags(typed, allowed)):
        return []
    characters = {flag.name for flag in allowed if flag.clusterable}
    following = context[-1].suggested_next(context) & characters
    return ["-" + "".join(flag.name for flag in context) + character for character in sorted(following)]


def complete(command, tokens, identity=None, /):
    """
    suggestions for the in-progress (last) token.

    parameters
    - command: Command
      the node completion starts from (usually the root).
    - tokens: Iterable[str]
      every token typed so far; the last one is in progress (may be empty).
    - identity: opaque caller identity, passed through to the node hooks.

    returns
    - list[str]: candidates starting with the in-progress token, grouped as
      described in the module docstring.
    """
    tokens = list(tokens)
    supplied, typed = tokens[:-1], tokens[-1] if tokens else ""

    if supplied and command.children and (child := lookup(command, supplied[0])) is not None:
        logger.debug("completion descending from %r into %r", command.name, child.name)
        return complete(child, tokens[1:], identity)

    output = [word for child in command.children for word in (child.name, *child.aliases)]

    allowed = tuple(command.allowed_flags(identity))
    arguments = parse_flags(supplied, allowed)

    if (option := pending_option(supplied, allowed)) is not None:
        logger.debug("completing value of %r at %r", option.surface, command.route)
        output = list(option.suggested_options())
    else:
        output.extend(command.tab_complete(identity, arguments, typed))
        output.extend(flag.surface for flag in command.suggest_flags(identity, arguments))
        output.extend(_continuations(typed, allowed))

    return narrow(output, typed)


__all__ = (
    "complete",
)
