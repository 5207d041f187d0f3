from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from hushmap.engine.types import CODEQL_DIRECTIVE, NOQA_DIRECTIVE, Directive

Matcher = Callable[[str], Directive | None]

# Legacy alias every CodeQL-style directive is normalized to.
LGTM = "lgtm"
# Fixed annotation for the bare noqa convention.
NOQA_ANNOTATION = "codeql"

_CODEQL_BRACKETED_RE = re.compile(r"\bcodeql\s*\[[^\]]*\]", re.IGNORECASE)
# Only at the start of the comment or right after a `;`. A `[` after the token
# belongs to the bracketed form and must not match here.
_CODEQL_BARE_RE = re.compile(r"(?:^|(?<=;))\s*codeql\b(?!\s*\[)", re.IGNORECASE)
_LEADING_CODEQL_RE = re.compile(r"^codeql", re.IGNORECASE)
# `noqa: <codes>` is the per-rule form, which is not supported.
_NOQA_RE = re.compile(r"\s*noqa\s*(?:[^:].*)?", re.IGNORECASE)


def match_codeql(text: str) -> Directive | None:
    """
    Match `codeql[...]` anywhere in the text, or a bare `codeql` token.

    The bracket payload is passed through verbatim; only the leading token is
    rewritten to `lgtm`.
    """

    bracketed = _CODEQL_BRACKETED_RE.search(text)
    if bracketed is not None:
        return Directive(annotation=_to_lgtm(bracketed.group(0)), kind=CODEQL_DIRECTIVE)

    bare = _CODEQL_BARE_RE.search(text)
    if bare is not None:
        return Directive(annotation=_to_lgtm(bare.group(0).strip()), kind=CODEQL_DIRECTIVE)

    return None


def match_noqa(text: str) -> Directive | None:
    """Match a bare `noqa` comment (the whole text, not a substring)."""

    if _NOQA_RE.fullmatch(text) is None:
        return None
    return Directive(annotation=NOQA_ANNOTATION, kind=NOQA_DIRECTIVE)


# Precedence order: the first matcher that succeeds wins.
MATCHERS: tuple[Matcher, ...] = (match_codeql, match_noqa)

CONVENTIONS: dict[str, Matcher] = {
    "codeql": match_codeql,
    "noqa": match_noqa,
}


def matchers_for(conventions: Iterable[str]) -> tuple[Matcher, ...]:
    """
    Return the matchers for the named conventions, in precedence order.

    Unknown names raise ValueError; the order of `conventions` is irrelevant.
    """

    wanted = {name.strip().lower() for name in conventions}
    unknown = wanted - set(CONVENTIONS)
    if unknown:
        raise ValueError(f"Unknown suppression convention(s): {', '.join(sorted(unknown))}")
    return tuple(matcher for name, matcher in CONVENTIONS.items() if name in wanted)


def classify(text: str, *, matchers: Iterable[Matcher] = MATCHERS) -> Directive | None:
    for matcher in matchers:
        directive = matcher(text)
        if directive is not None:
            return directive
    return None


def _to_lgtm(token: str) -> str:
    return _LEADING_CODEQL_RE.sub(LGTM, token, count=1)
