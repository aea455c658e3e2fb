"""Article endpoints.

Reads are public and served through the content cache. Mutations require
an admin token; DELETE archives rather than removes.
"""

from __future__ import annotations

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from portfolio.api.dependencies import get_article_service
from portfolio.auth.dependencies import AdminUser, OptionalUser
from portfolio.content.models import (
    Article,
    ArticleCreate,
    ArticleQuery,
    ArticleSummary,
    ArticleUpdate,
)
from portfolio.core.config import get_settings
from portfolio.core.exceptions import ForbiddenException
from portfolio.services.articles.service import ArticleService


router = APIRouter(prefix="/articles", tags=["articles"])

ArticleServiceDep = Annotated[ArticleService, Depends(get_article_service)]


@router.get(
    "",
    response_model=list[ArticleSummary],
    summary="List articles",
)
async def list_articles(
    service: ArticleServiceDep,
    user: OptionalUser,
    tag: Annotated[list[str] | None, Query()] = None,
    sort: Literal["newest", "oldest", "updated"] = "newest",
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
    include_archived: bool = False,
) -> list[ArticleSummary]:
    """List article summaries. Archived articles are visible to admins only."""
    if include_archived and (
        user is None or not user.has_role(get_settings().auth.admin_role)
    ):
        raise ForbiddenException("Admin role required to list archived articles")

    query = ArticleQuery(
        include_archived=include_archived,
        tags=tag or [],
        sort=sort,
        limit=limit,
    )
    return await service.list_articles(query)


@router.get(
    "/products",
    response_model=list[ArticleSummary],
    summary="List product articles",
)
async def list_products(service: ArticleServiceDep) -> list[ArticleSummary]:
    """Non-archived articles tagged ``product``, newest first."""
    return await service.list_products()


@router.get(
    "/{id_or_slug}",
    response_model=Article,
    summary="Get an article by id or slug",
)
async def get_article(id_or_slug: str, service: ArticleServiceDep) -> Article:
    return await service.get_by_id_or_slug(id_or_slug)


@router.post(
    "",
    response_model=Article,
    status_code=status.HTTP_201_CREATED,
    summary="Create an article",
)
async def create_article(
    data: ArticleCreate,
    service: ArticleServiceDep,
    _admin: AdminUser,
) -> Article:
    return await service.create(data)


@router.patch(
    "/{article_id}",
    response_model=Article,
    summary="Update an article",
)
async def update_article(
    article_id: UUID,
    changes: ArticleUpdate,
    service: ArticleServiceDep,
    _admin: AdminUser,
) -> Article:
    """Apply a partial update; a changed title re-derives the slug."""
    return await service.update(article_id, changes)


@router.delete(
    "/{article_id}",
    response_model=Article,
    summary="Archive an article",
)
async def archive_article(
    article_id: UUID,
    service: ArticleServiceDep,
    _admin: AdminUser,
) -> Article:
    return await service.archive(article_id)


@router.post(
    "/{article_id}/restore",
    response_model=Article,
    summary="Restore an archived article",
)
async def restore_article(
    article_id: UUID,
    service: ArticleServiceDep,
    _admin: AdminUser,
) -> Article:
    return await service.restore(article_id)
