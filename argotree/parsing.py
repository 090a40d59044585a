"""
Argotree token parser and suggestion narrowing.

parse_flags(tokens, allowed)
- turns a flat list of raw tokens into an ordered tuple of Literal / Occurrence,
  using only the flags allowed at the current command.
- grammar
  • '--name'   exact match against an allowed long flag; no inline value.
  • '-abc'     cluster of one-character flags; all characters must match, or the
               whole token stays a Literal (all-or-nothing, never split).
  • Option     the token right after '--name' (or after a lone '-x') is its value
               and is never classified on its own.
  • anything else is a Literal, order preserved.
- nothing here is an error: unknown flag syntax is demoted to a Literal and a
  trailing option without value is emitted with value None.

narrow(candidates, typed)
- plain, case-sensitive prefix filter that keeps candidate order.
"""
import logging

from .flags import Literal, Occurrence, FlagKind

logger = logging.getLogger(__name__)


def _index(allowed):
    """
    Internal: map surfaces and cluster characters to their flag.

    returns
    - (surfaces, characters): surfaces maps '--name'/'-x' to the flag, characters
      maps 'x' to every one-character flag.

    raises
    - ValueError when two allowed flags share a name.
    """
    surfaces = {}
    characters = {}
    for flag in allowed:
        if surfaces.setdefault(flag.surface, flag) is not flag:
            raise ValueError(f"allowed flags cannot contain duplicates (found {flag.surface!r} twice)")
        if flag.clusterable:
            characters[flag.name] = flag
    return surfaces, characters


def _cluster(token, characters):
    """
    Internal: resolve a single-dash token into its one-character flags.

    returns
    - tuple[Flag, ...] in cluster order, or None when the token is not a cluster
      or any of its characters is not an allowed one-character flag.
    """
    if not token.startswith("-") or token.startswith("--") or len(token) < 2:
        return None
    flags = []
    for character in token[1:]:
        try:
            flags.append(characters[character])
        except KeyError:
            return None
    return tuple(flags)


def parse_flags(tokens, allowed):
    """
    parse raw tokens against a collection of allowed flags.

    parameters
    - tokens: Iterable[str]
      raw, already whitespace-split tokens (no path segments).
    - allowed: Iterable[Flag]
      flags recognized at this point; names must be unique.

    returns
    - tuple[Literal | Occurrence, ...] with one entry per classified token, in
      input order (an option and its value produce a single Occurrence).
    """
    surfaces, characters = _index(allowed)
    output = []
    pending = None

    for token in tokens:
        if pending is not None:
            output.append(Occurrence(pending, token))
            pending = None
            continue

        if token.startswith("--"):
            try:
                flag = surfaces[token]
            except KeyError:
                output.append(Literal(token))
                continue
            if flag.kind is FlagKind.OPTION:
                pending = flag
            else:
                output.append(Occurrence(flag))
            continue

        if (cluster := _cluster(token, characters)) is None:
            output.append(Literal(token))
        elif len(cluster) == 1 and cluster[0].kind is FlagKind.OPTION:
            pending = cluster[0]
        else:
            # clustered options never consume the next token
            output.extend(Occurrence(flag) for flag in cluster)

    if pending is not None:
        output.append(Occurrence(pending))

    logger.debug("parsed %d token(s) into %r", len(output), output)
    return tuple(output)


def cluster_flags(token, allowed):
    """
    the one-character flags of a fully-matched cluster token, or an empty tuple.

    '-ab' with allowed one-character flags a and b gives (a, b); '-abx' (x not
    allowed), '--all' and plain words give ().
    """
    _, characters = _index(allowed)
    return _cluster(token, characters) or ()


def pending_option(tokens, allowed):
    """
    the option still waiting for its value after `tokens`, or None.

    This mirrors the carried state of parse_flags: the last token must be the
    exact surface of an allowed option ('--name', or '-x' for a lone
    one-character option) and must not itself be the value of a previous option.
    """
    arguments = parse_flags(tokens, allowed)
    if not arguments or not tokens:
        return None
    last = arguments[-1]
    if (
            isinstance(last, Occurrence)
            and last.kind is FlagKind.OPTION
            and last.value is None
            and tokens[-1] == last.flag.surface
    ):
        return last.flag
    return None


def narrow(candidates, typed=None):
    """
    keep only the candidates that start with what was typed.

    parameters
    - candidates: Iterable[str]
    - typed: str | None
      the in-progress token; None keeps every candidate.

    returns
    - list[str] in the original order.
    """
    return [candidate for candidate in candidates if typed is None or candidate.startswith(typed)]


__all__ = (
    "parse_flags",
    "cluster_flags",
    "pending_option",
    "narrow",
)
