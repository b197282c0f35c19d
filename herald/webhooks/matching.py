"""Workspace and branch matching for webhook delivery.

A webhook fires only when both of its predicates accept the event. Patterns
are compiled when the rule is built, so an invalid pattern fails at
configuration time rather than on the first event.
"""

from __future__ import annotations

import dataclasses
import enum
import fnmatch
import re
import typing as typ

from .errors import WebhookConfigError

if typ.TYPE_CHECKING:
    from .models import NotificationEvent


@typ.runtime_checkable
class StringPredicate(typ.Protocol):
    """Decides whether a single string attribute qualifies."""

    def __call__(self, value: str) -> bool:
        """Return True when ``value`` is accepted."""
        ...


class PatternSyntax(enum.StrEnum):
    """Supported pattern languages for match rules."""

    REGEX = "regex"
    GLOB = "glob"
    EXACT = "exact"


@dataclasses.dataclass(frozen=True, slots=True)
class RegexPredicate:
    """Accept values containing a match for a regular expression.

    Matching uses ``re.search``; a pattern is anchored only when it says so
    (``^production$``).
    """

    pattern: re.Pattern[str]

    def __call__(self, value: str) -> bool:
        return self.pattern.search(value) is not None


@dataclasses.dataclass(frozen=True, slots=True)
class GlobPredicate:
    """Accept values matching a case-sensitive shell-style glob."""

    pattern: str

    def __call__(self, value: str) -> bool:
        return fnmatch.fnmatchcase(value, self.pattern)


@dataclasses.dataclass(frozen=True, slots=True)
class ExactPredicate:
    """Accept only values equal to ``expected``."""

    expected: str

    def __call__(self, value: str) -> bool:
        return value == self.expected


def compile_predicate(
    pattern: str,
    syntax: PatternSyntax | str = PatternSyntax.REGEX,
    *,
    field: str = "pattern",
) -> StringPredicate:
    """Compile ``pattern`` into a predicate for the given syntax.

    Raises
    ------
    WebhookConfigError
        If the syntax is unknown or a regular expression fails to compile.

    """
    try:
        kind = PatternSyntax(syntax)
    except ValueError as exc:
        raise WebhookConfigError.unsupported_syntax(str(syntax)) from exc

    if kind is PatternSyntax.GLOB:
        return GlobPredicate(pattern)
    if kind is PatternSyntax.EXACT:
        return ExactPredicate(pattern)
    try:
        return RegexPredicate(re.compile(pattern))
    except re.error as exc:
        raise WebhookConfigError.invalid_pattern(field, pattern, exc) from exc


@dataclasses.dataclass(frozen=True, slots=True)
class MatchRule:
    """Workspace and branch predicates guarding one webhook."""

    workspace: StringPredicate
    branch: StringPredicate

    @classmethod
    def compile(
        cls,
        workspace_pattern: str,
        branch_pattern: str,
        syntax: PatternSyntax | str = PatternSyntax.REGEX,
    ) -> MatchRule:
        """Build a rule from two patterns sharing one syntax."""
        return cls(
            workspace=compile_predicate(
                workspace_pattern, syntax, field="workspace pattern"
            ),
            branch=compile_predicate(branch_pattern, syntax, field="branch pattern"),
        )

    def matches(self, event: NotificationEvent) -> bool:
        """Return True when both the workspace and the base branch qualify."""
        return self.workspace(event.workspace) and self.branch(event.base_branch)


MATCH_ALL = MatchRule.compile(".*", ".*")
