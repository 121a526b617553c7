"""Loading and validation of JSON rules files."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

from .config import DEFAULT_RULES, CategoryRule, RuleSet

CURRENT_RULES_VERSION = "1.0"


@dataclass(slots=True)
class RulesValidationError(Exception):
    """Raised when a rules file cannot be turned into a :class:`RuleSet`."""

    message: str
    path: tuple[str | int, ...] | None = None
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        location = ""
        if self.line is not None:
            location = f" (line {self.line}, column {self.column or 1})"
        pointer = ""
        if self.path:
            pointer = " at $" + ".".join(str(part) for part in self.path)
        return f"{self.message}{pointer}{location}"


def load_rules(path: str | Path) -> Mapping[str, Any]:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def load_rule_set(path: str | Path) -> RuleSet:
    """Read *path* and build a validated :class:`RuleSet`."""

    content = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise RulesValidationError(exc.msg, path=None, line=exc.lineno, column=exc.colno) from exc
    return build_rule_set(data, content)


def validate_rules(path: str | Path) -> Mapping[str, Any]:
    """Validate *path* and return its raw content."""

    load_rule_set(path)
    return load_rules(path)


def build_rule_set(data: Any, content: str = "") -> RuleSet:
    if not isinstance(data, Mapping):
        raise _error("Expected object", content, ())

    version = data.get("version", CURRENT_RULES_VERSION)
    if version != CURRENT_RULES_VERSION:
        raise _error(
            f"Unsupported rules version: {version!r}; expected {CURRENT_RULES_VERSION}",
            content,
            ("version",),
        )

    raw_categories = data.get("categories")
    if not isinstance(raw_categories, list) or not raw_categories:
        raise _error("'categories' must be a non-empty list", content, ("categories",))

    categories: list[CategoryRule] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_categories):
        if not isinstance(raw, Mapping):
            raise _error("Expected object", content, ("categories", index))
        name = _string(raw.get("name"), content, ("categories", index, "name"))
        if name in seen:
            raise _error(f"Duplicate category '{name}'", content, ("categories", index, "name"))
        seen.add(name)
        extensions = _string_list(raw.get("extensions"), content, ("categories", index, "extensions"))
        categories.append(CategoryRule.of(name, extensions))

    overrides: dict[str, Any] = {"categories": tuple(categories)}

    screenshot = data.get("screenshot")
    if screenshot is not None:
        if not isinstance(screenshot, Mapping):
            raise _error("Expected object", content, ("screenshot",))
        if "category" in screenshot:
            overrides["screenshot_category"] = _string(
                screenshot["category"], content, ("screenshot", "category")
            )
        if "extensions" in screenshot:
            overrides["screenshot_extensions"] = CategoryRule.of(
                "", _string_list(screenshot["extensions"], content, ("screenshot", "extensions"))
            ).extensions
        if "patterns" in screenshot:
            patterns = _string_list(screenshot["patterns"], content, ("screenshot", "patterns"))
            overrides["screenshot_patterns"] = tuple(
                _compile(pattern, content, ("screenshot", "patterns")) for pattern in patterns
            )

    for key, attribute in (
        ("dateBucketCategories", "date_bucket_categories"),
        ("skipNames", "skip_names"),
        ("dotfileAllowList", "dotfile_allow_list"),
    ):
        if key in data:
            overrides[attribute] = frozenset(_string_list(data[key], content, (key,)))

    for key, attribute in (("configCategory", "config_category"), ("defaultCategory", "default_category")):
        if key in data:
            overrides[attribute] = _string(data[key], content, (key,))

    return RuleSet(**overrides)


def dump_rule_set(rules: RuleSet = DEFAULT_RULES) -> dict[str, Any]:
    """Serialise *rules* into the JSON rules file layout."""

    return {
        "version": CURRENT_RULES_VERSION,
        "categories": [
            {"name": rule.name, "extensions": sorted(rule.extensions)} for rule in rules.categories
        ],
        "screenshot": {
            "category": rules.screenshot_category,
            "extensions": sorted(rules.screenshot_extensions),
            "patterns": [pattern.pattern for pattern in rules.screenshot_patterns],
        },
        "dateBucketCategories": sorted(rules.date_bucket_categories),
        "skipNames": sorted(rules.skip_names),
        "dotfileAllowList": sorted(rules.dotfile_allow_list),
        "configCategory": rules.config_category,
        "defaultCategory": rules.default_category,
    }


# -- helpers ------------------------------------------------------------

def _string(value: Any, content: str, path: Sequence[str | int]) -> str:
    if not isinstance(value, str) or not value.strip():
        raise _error("Expected non-empty string", content, path)
    if "/" in value or "\\" in value:
        raise _error("Category names cannot contain path separators", content, path)
    return value


def _string_list(value: Any, content: str, path: Sequence[str | int]) -> list[str]:
    if not isinstance(value, list):
        raise _error("Expected array", content, path)
    for index, item in enumerate(value):
        if not isinstance(item, str):
            raise _error("Expected type string", content, tuple(path) + (index,))
    return list(value)


def _compile(pattern: str, content: str, path: Sequence[str | int]) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise _error(f"Invalid pattern {pattern!r}: {exc}", content, path) from exc


def _error(message: str, content: str, path: Sequence[str | int]) -> RulesValidationError:
    line, column = _locate_pointer(content, path)
    if line is None and content:
        line, column = 1, 1
    return RulesValidationError(message, tuple(path) if path else None, line, column)


def _locate_pointer(content: str, path: Sequence[str | int]) -> tuple[int | None, int | None]:
    keys = [part for part in path if isinstance(part, str)]
    if not keys:
        return None, None
    needle = f'"{keys[-1]}"'
    for idx, line in enumerate(content.splitlines(), start=1):
        column = line.find(needle)
        if column != -1:
            return idx, column + 1
    return None, None


__all__ = [
    "CURRENT_RULES_VERSION",
    "RulesValidationError",
    "build_rule_set",
    "dump_rule_set",
    "load_rule_set",
    "load_rules",
    "validate_rules",
]
