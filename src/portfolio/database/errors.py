"""Translation of driver errors into content store errors."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import asyncpg

from portfolio.content.exceptions import ContentStoreError, DuplicateSlugError


if TYPE_CHECKING:
    from collections.abc import Iterator


@contextmanager
def translate_store_errors(operation: str, slug: str | None = None) -> Iterator[None]:
    """Re-raise asyncpg failures as ``DuplicateSlugError``/``ContentStoreError``.

    Args:
        operation: Short description used in the error message.
        slug: Slug being written, reported on a unique violation.
    """
    try:
        yield
    except asyncpg.UniqueViolationError as exc:
        raise DuplicateSlugError(slug or "") from exc
    except (
        asyncpg.PostgresError,
        asyncpg.InterfaceError,
        OSError,
        TimeoutError,
    ) as exc:
        msg = f"Store failure during {operation}: {exc}"
        raise ContentStoreError(msg) from exc
    except RuntimeError as exc:
        # Raised by get_database_pool() before startup completes.
        msg = f"Store unavailable during {operation}: {exc}"
        raise ContentStoreError(msg) from exc
