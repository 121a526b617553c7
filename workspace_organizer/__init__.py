"""Workspace organizer package exports."""

from .cli import main as cli_main
from .classifier import ClassificationEngine, classify
from .config import CategoryRule, OrganizeOptions, RuleSet
from .organizer import WorkspaceOrganizer, organize_folder
from .report import OperationReport

__all__ = [
    "CategoryRule",
    "ClassificationEngine",
    "OperationReport",
    "OrganizeOptions",
    "RuleSet",
    "WorkspaceOrganizer",
    "classify",
    "cli_main",
    "organize_folder",
]
