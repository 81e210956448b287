"""
Override index — per-prefix generator and plugin replacements.

Built once at startup from the configured rules and passed explicitly
to the planner. Lookup is an exact match on the package path relative
to the output root. When two rules list the same prefix, the rule that
appears later in the configuration wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from protobuild.core.models.config import OverrideRule

logger = logging.getLogger(__name__)


class OverrideIndex(Mapping[str, OverrideRule]):
    """Immutable prefix → rule mapping."""

    def __init__(self, entries: Mapping[str, OverrideRule] | None = None):
        self._entries = MappingProxyType(dict(entries or {}))

    @classmethod
    def build(cls, rules: Iterable[OverrideRule]) -> OverrideIndex:
        entries: dict[str, OverrideRule] = {}
        for rule in rules:
            for prefix in rule.prefixes:
                if prefix in entries:
                    logger.debug("Override prefix %s redefined; later rule wins", prefix)
                entries[prefix] = rule
        return cls(entries)

    def lookup(self, relative_path: str) -> OverrideRule | None:
        return self._entries.get(relative_path)

    def apply(
        self,
        relative_path: str,
        generator: str,
        plugins: list[str],
    ) -> tuple[str, list[str]]:
        """Effective (generator, plugins) for a package path."""
        rule = self.lookup(relative_path)
        if rule is None:
            return generator, list(plugins)

        if rule.generator:
            generator = rule.generator
        if rule.plugins is not None:
            plugins = rule.plugins
        return generator, list(plugins)

    def __getitem__(self, key: str) -> OverrideRule:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
