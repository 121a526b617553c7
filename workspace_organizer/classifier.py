"""Rule-based classification of file names into category folders."""
from __future__ import annotations

import logging
import os
from collections import OrderedDict

from .config import DEFAULT_RULES, RuleSet

LOGGER_NAME = "workspace_organizer.classifier"


class ClassificationEngine:
    """Classifies file names using an injected :class:`RuleSet`.

    Classification never touches the filesystem; only the name is inspected.
    """

    def __init__(
        self,
        rules: RuleSet | None = None,
        *,
        logger: logging.Logger | None = None,
        cache_limit: int = 1000,
    ) -> None:
        self.rules = rules or DEFAULT_RULES
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self._extension_cache: OrderedDict[str, str] = OrderedDict()
        self._cache_limit = cache_limit

    def classify(self, file_name: str) -> str:
        """Return the category label for *file_name*."""

        if self.rules.is_dotfile(file_name):
            return self.rules.config_category

        extension = os.path.splitext(file_name)[1].lower()
        if self.is_screenshot(file_name, extension):
            return self.rules.screenshot_category
        return self._classify_by_extension(extension)

    def is_screenshot(self, file_name: str, extension: str) -> bool:
        if extension not in self.rules.screenshot_extensions:
            return False
        return any(pattern.search(file_name) for pattern in self.rules.screenshot_patterns)

    # ------------------------------------------------------------------
    # Helpers
    def _classify_by_extension(self, extension: str) -> str:
        if not extension:
            return self.rules.default_category

        cached = self._extension_cache_get(extension)
        if cached:
            return cached

        for rule in self.rules.categories:
            if rule.matches(extension):
                self._remember_extension(extension, rule.name)
                return rule.name

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("No category for extension: %s", extension)
        return self.rules.default_category

    def _extension_cache_get(self, extension: str) -> str | None:
        if extension in self._extension_cache:
            category = self._extension_cache.pop(extension)
            self._extension_cache[extension] = category
            return category
        return None

    def _remember_extension(self, extension: str, category: str) -> None:
        self._extension_cache[extension] = category
        if len(self._extension_cache) > self._cache_limit:
            self._extension_cache.popitem(last=False)


def classify(file_name: str, rules: RuleSet | None = None) -> str:
    """Convenience wrapper around :meth:`ClassificationEngine.classify`."""

    return ClassificationEngine(rules).classify(file_name)


__all__ = ["ClassificationEngine", "classify"]
