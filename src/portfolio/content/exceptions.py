"""Exceptions for content reads and mutations."""

from __future__ import annotations


class ContentError(Exception):
    """Base exception for content errors."""


class ContentNotFoundError(ContentError):
    """Raised when an entity is absent from both the cache and the store."""

    def __init__(self, resource: str, identifier: str) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class NoChangesError(ContentError):
    """Raised when an update carries no fields to change."""

    def __init__(self, message: str = "No fields to update") -> None:
        super().__init__(message)


class ContentStoreError(ContentError):
    """Raised when the primary document store fails or is unreachable."""


class DuplicateSlugError(ContentStoreError):
    """Raised by the store when a write collides with an existing slug.

    This is the store-level uniqueness guarantee; the slug probe loop only
    makes the collision unlikely.
    """

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Slug '{slug}' is already taken")


class ContentSaveError(ContentError):
    """Raised when a mutation could not be persisted.

    Nothing was written when this is raised.
    """


class SlugAllocationError(ContentSaveError):
    """Raised when no free slug could be allocated within the suffix cap."""

    def __init__(self, base: str, attempts: int) -> None:
        self.base = base
        self.attempts = attempts
        super().__init__(
            f"Could not allocate a unique slug for '{base}' after {attempts} attempts"
        )
