"""
BCP47 language negotiation.

Matches a ranked list of wanted language tags against the tags we have
translation tables for, scoring by hyphen-separated subcode prefixes.
"""

import logging
from typing import Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)


def subcodes(tag: str) -> List[str]:
    """Return the subcode chain of a tag, most specific first.

    Example:
        >>> subcodes("en-gb-cockney")
        ['en-gb-cockney', 'en-gb', 'en']
    """
    chain = []
    code = tag
    while code:
        chain.append(code)
        code = "-".join(code.split("-")[:-1])
    return chain


def normalize_tags(tags: Iterable[Optional[str]]) -> List[str]:
    """Lower-case tags and discard blank entries, keeping precedence order."""
    normalized = []
    for tag in tags:
        tag = (tag or "").strip().lower()
        if tag:
            normalized.append(tag)
    return normalized


def _match_score(wanted_subcode: str, available: str) -> int:
    """Score one available tag against one wanted subcode.

    The score is the length of the longest subcode of ``available`` that is
    itself one of the wanted subcode's own truncations; zero when nothing
    matches.
    """
    wanted_chain = set(subcodes(wanted_subcode))
    return max((len(code) for code in subcodes(available) if code in wanted_chain), default=0)


def _shared_segments(wanted: str, available: str) -> int:
    wanted_segments = set(wanted.split("-"))
    return sum(1 for segment in available.split("-") if segment in wanted_segments)


def negotiate(wanted: Sequence[str], available: Iterable[str], default: str = "en") -> str:
    """Return the available tag that best matches the wanted tags.

    Wanted tags are evaluated strictly in the given order of precedence and
    the first one with a nonzero match wins. Within one wanted tag its
    subcodes are tried most specific first. Among available tags with the
    same score, a tag sharing more of the wanted tag's segments wins, and
    then the shorter tag wins (so a base code beats an unrelated regional
    variant).

    Args:
        wanted: Language tags in order of precedence
        available: Tags with registered translation tables
        default: Tag returned when nothing matches

    Returns:
        The chosen available tag (lower-cased), or ``default``
    """
    have = normalize_tags(available)

    for tag in normalize_tags(wanted):
        for wanted_subcode in subcodes(tag):
            ranked = []
            for candidate in have:
                score = _match_score(wanted_subcode, candidate)
                if score:
                    ranked.append((
                        -score,
                        -_shared_segments(tag, candidate),
                        len(candidate),
                        candidate,
                    ))
            if ranked:
                match = min(ranked)[-1]
                logger.debug(f"Negotiated language {match!r} for wanted tag {tag!r}")
                return match

    logger.debug(f"No language match for {list(wanted)!r}; using default {default!r}")
    return default
