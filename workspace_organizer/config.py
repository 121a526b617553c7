"""Configuration and rule tables for the workspace organizer."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Tuple


@dataclass(frozen=True)
class CategoryRule:
    """Maps a category folder name to the extensions sorted into it."""

    name: str
    extensions: frozenset[str]

    @classmethod
    def of(cls, name: str, extensions: Iterable[str]) -> "CategoryRule":
        return cls(name, frozenset(_normalise_extension(ext) for ext in extensions))

    def matches(self, extension: str) -> bool:
        return extension in self.extensions


def _normalise_extension(extension: str) -> str:
    extension = extension.strip().lower()
    if extension and not extension.startswith("."):
        return f".{extension}"
    return extension


DEFAULT_CATEGORIES: Tuple[CategoryRule, ...] = (
    CategoryRule.of("Images", (".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".tiff", ".svg", ".heic", ".ico")),
    CategoryRule.of("Video", (".mp4", ".mov", ".avi", ".mkv", ".webm", ".m4v")),
    CategoryRule.of("Audio", (".mp3", ".wav", ".aac", ".flac", ".ogg", ".m4a")),
    CategoryRule.of("PDFs", (".pdf",)),
    CategoryRule.of("Spreadsheets", (".xls", ".xlsx", ".csv", ".tsv", ".ods")),
    CategoryRule.of("Presentations", (".ppt", ".pptx", ".key", ".odp")),
    CategoryRule.of("Documents", (".doc", ".docx", ".rtf", ".odt")),
    CategoryRule.of("Notes", (".txt", ".md", ".markdown", ".org")),
    CategoryRule.of("Archives", (".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".tgz")),
    CategoryRule.of("Installers", (".dmg", ".pkg", ".msi", ".exe", ".appimage", ".deb", ".rpm")),
    CategoryRule.of(
        "Code",
        (
            ".js", ".ts", ".jsx", ".tsx", ".py", ".rb", ".go", ".rs", ".java", ".kt", ".swift",
            ".c", ".h", ".cpp", ".hpp", ".cs", ".php", ".sh", ".bash", ".zsh", ".ps1", ".sql",
            ".html", ".css", ".scss", ".json", ".yaml", ".yml", ".toml",
        ),
    ),
    CategoryRule.of("Data", (".parquet", ".avro", ".feather", ".db", ".sqlite", ".sqlite3")),
    CategoryRule.of("Design", (".fig", ".sketch", ".xd", ".ai", ".psd")),
    CategoryRule.of("Fonts", (".ttf", ".otf", ".woff", ".woff2")),
)

DEFAULT_SCREENSHOT_PATTERNS: Tuple[str, ...] = (
    r"(?i)screenshot",
    r"(?i)screen\s*shot",
    r"屏幕截图",
    r"屏幕快照",
    r"截屏",
    r"螢幕截圖",
    r"スクリーンショット",
)


@dataclass(frozen=True)
class RuleSet:
    """Immutable classification table injected into every pass.

    ``categories`` are tried in order. Screenshots are detected before the
    generic table so a screenshot PNG never lands in ``Images``.
    """

    categories: Tuple[CategoryRule, ...] = DEFAULT_CATEGORIES
    screenshot_category: str = "Screenshots"
    screenshot_extensions: frozenset[str] = frozenset({".png", ".jpg", ".jpeg", ".heic", ".webp"})
    screenshot_patterns: Tuple[re.Pattern[str], ...] = field(
        default_factory=lambda: tuple(re.compile(pattern) for pattern in DEFAULT_SCREENSHOT_PATTERNS)
    )
    date_bucket_categories: frozenset[str] = frozenset({"Screenshots", "Images", "Video", "Audio"})
    skip_names: frozenset[str] = frozenset({"node_modules", ".git", ".DS_Store"})
    dotfile_allow_list: frozenset[str] = frozenset({".env"})
    config_category: str = "Config"
    default_category: str = "Other"

    @property
    def category_names(self) -> frozenset[str]:
        """Every label :meth:`ClassificationEngine.classify` can return."""

        names = {rule.name for rule in self.categories}
        names.update({self.screenshot_category, self.config_category, self.default_category})
        return frozenset(names)

    def is_dotfile(self, name: str) -> bool:
        return name.startswith(".")

    def is_allowed_dotfile(self, name: str) -> bool:
        return name in self.dotfile_allow_list

    def is_excluded(self, name: str) -> bool:
        """Names that are never descended into, re-sorted or deleted."""

        if name in self.skip_names:
            return True
        return self.is_dotfile(name) and not self.is_allowed_dotfile(name)

    def is_protected(self, name: str) -> bool:
        """Directory names the pruner must never delete."""

        return name in self.skip_names or self.is_dotfile(name) or name in self.category_names

    def uses_date_bucket(self, category: str) -> bool:
        return category in self.date_bucket_categories


DEFAULT_RULES = RuleSet()


@dataclass(frozen=True)
class OrganizeOptions:
    """Options that control a single reorganization run."""

    include_nested: bool = False
    rules: RuleSet = DEFAULT_RULES
    hash_algorithm: str = "md5"
    hash_chunk_size: int = 1024 * 1024


__all__ = [
    "CategoryRule",
    "DEFAULT_CATEGORIES",
    "DEFAULT_RULES",
    "DEFAULT_SCREENSHOT_PATTERNS",
    "OrganizeOptions",
    "RuleSet",
]
