"""
Genesis ledger representation: unit conversion, raw record schemas and normalization.
"""

from genesis_client.ledger.models import Backer, Project, ProjectStatus, Stats
from genesis_client.ledger.normalizer import (
    normalize_backer,
    normalize_backers,
    normalize_project,
    normalize_projects,
    normalize_stats,
)

__all__ = [
    "Backer",
    "Project",
    "ProjectStatus",
    "Stats",
    "normalize_backer",
    "normalize_backers",
    "normalize_project",
    "normalize_projects",
    "normalize_stats",
]
