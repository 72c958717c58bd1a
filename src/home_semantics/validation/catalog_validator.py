"""Configuration checks for tag catalogs.

The registry itself never fails on ambiguous data: suffix collisions resolve
to the last registered definition. This module flags such smells so they can
be reviewed before a catalog is deployed.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

from home_semantics.domain.models import TagDefinition
from home_semantics.tags.registry import TagRegistry

logger = logging.getLogger(__name__)


class IssueType(Enum):
    """Types of catalog issues."""

    SUFFIX_COLLISION = "suffix_collision"
    DUPLICATE_ID = "duplicate_id"
    CATEGORY_MISMATCH = "category_mismatch"
    MISSING_PARENT = "missing_parent"


@dataclass(frozen=True, slots=True)
class CatalogIssue:
    """A single catalog finding."""

    issue_type: IssueType
    """Type of issue."""

    tag_id: str
    """Tag id or suffix the issue is about."""

    message: str
    """Human-readable description."""


@dataclass
class CatalogReport:
    """Result of validating a catalog."""

    definitions: int = 0
    """Number of distinct definitions."""

    lookup_keys: int = 0
    """Number of ids and suffixes in the registry."""

    issues: list[CatalogIssue] = field(default_factory=list)
    """Findings, in check order."""

    def of_type(self, issue_type: IssueType) -> list[CatalogIssue]:
        """Issues of one type."""
        return [i for i in self.issues if i.issue_type is issue_type]

    @property
    def has_collisions(self) -> bool:
        return bool(self.of_type(IssueType.SUFFIX_COLLISION))


class CatalogValidator:
    """Checks a catalog for ambiguities the registry resolves silently."""

    def validate(self, catalog: list[TagDefinition]) -> CatalogReport:
        """Validate a catalog.

        Args:
            catalog: Definitions in catalog order.

        Returns:
            Report with all findings.

        Raises:
            CatalogError: If a definition is invalid configuration.
        """
        registry = TagRegistry(catalog)
        report = CatalogReport(
            definitions=len(registry.definitions()),
            lookup_keys=len(registry),
        )

        counts = Counter(d.id for d in catalog)
        for tag_id, count in sorted(counts.items()):
            if count > 1:
                report.issues.append(
                    CatalogIssue(
                        IssueType.DUPLICATE_ID,
                        tag_id,
                        f"{tag_id} is defined {count} times; the last definition is used",
                    )
                )

        for collision in registry.collisions():
            shadowed = [d.id for d in collision.shadowed if d.id != collision.winner.id]
            if not shadowed:
                # Already reported as a duplicate id
                continue
            report.issues.append(
                CatalogIssue(
                    IssueType.SUFFIX_COLLISION,
                    collision.suffix,
                    f"'{collision.suffix}' resolves to {collision.winner.id}, "
                    f"shadowing {', '.join(shadowed)}",
                )
            )

        known_ids = set(counts)
        for definition in registry.definitions():
            root = definition.segments[0]
            if root != definition.category.value:
                report.issues.append(
                    CatalogIssue(
                        IssueType.CATEGORY_MISMATCH,
                        definition.id,
                        f"{definition.id} has category {definition.category.value} "
                        f"but its root segment is {root}",
                    )
                )
            parent_id = definition.parent_id
            if parent_id is not None and parent_id not in known_ids:
                report.issues.append(
                    CatalogIssue(
                        IssueType.MISSING_PARENT,
                        definition.id,
                        f"{definition.id} has no parent definition {parent_id}",
                    )
                )

        for issue in report.issues:
            logger.warning("Catalog %s: %s", issue.issue_type.value, issue.message)

        return report
