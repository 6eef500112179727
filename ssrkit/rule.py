"""Pattern rules matched against host names, kept in insertion order."""

from __future__ import annotations

import re
from typing import Iterator

__all__ = ["Rule", "RuleError", "RuleSet"]


class RuleError(ValueError):
    """Raised for a bad rule argument or a pattern that does not compile."""


class Rule:
    """A regular-expression rule; the pattern is searched anywhere in a name."""

    def __init__(self, pattern: str | None = None) -> None:
        self.pattern = pattern
        self._compiled: re.Pattern[str] | None = None

    def __repr__(self) -> str:
        return f"Rule({self.pattern!r})"

    def accept_arg(self, arg: str) -> None:
        """Take ``arg`` as the rule's pattern; a rule accepts only one."""
        if self.pattern is not None:
            raise RuleError(f"Unexpected table rule argument: {arg}")
        self.pattern = arg

    def compile(self) -> None:
        """Compile the pattern once; raise RuleError when it is invalid."""
        if self._compiled is not None:
            return
        if self.pattern is None:
            raise RuleError("rule has no pattern")
        try:
            self._compiled = re.compile(self.pattern)
        except re.error as exc:
            offset = exc.pos if exc.pos is not None else 0
            raise RuleError(
                f"regex compilation failed at offset {offset}: {exc.msg}"
            ) from exc

    def matches(self, name: str | bytes | None) -> bool:
        """Tell whether the pattern occurs in ``name``; None counts as empty."""
        self.compile()
        assert self._compiled is not None
        if name is None:
            name = ""
        elif isinstance(name, bytes):
            name = name.decode("latin-1")
        return self._compiled.search(name) is not None


class RuleSet:
    """An ordered collection of rules searched from first to last."""

    def __init__(self) -> None:
        self._rules: list[Rule] = []

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def add(self, rule: Rule) -> None:
        """Append ``rule`` at the end."""
        self._rules.append(rule)

    def lookup(self, name: str | bytes | None) -> Rule | None:
        """Return the first rule matching ``name``, or None."""
        for rule in self._rules:
            if rule.matches(name):
                return rule
        return None

    def remove(self, rule: Rule) -> None:
        """Remove this very rule; raise ValueError when it is not in the set."""
        for position, candidate in enumerate(self._rules):
            if candidate is rule:
                del self._rules[position]
                return
        raise ValueError(f"{rule!r} is not in the rule set")