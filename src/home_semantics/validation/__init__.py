"""Catalog validation for tag configuration smells."""

from home_semantics.validation.catalog_validator import (
    CatalogIssue,
    CatalogReport,
    CatalogValidator,
    IssueType,
)

__all__ = ["CatalogValidator", "CatalogReport", "CatalogIssue", "IssueType"]
