"""Banner endpoints."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from portfolio.api.dependencies import get_banner_service
from portfolio.auth.dependencies import AdminUser
from portfolio.content.models import Banner, BannerCreate, BannerQuery, BannerUpdate
from portfolio.services.banners.service import BannerService


router = APIRouter(prefix="/banners", tags=["banners"])

BannerServiceDep = Annotated[BannerService, Depends(get_banner_service)]


@router.get("", response_model=list[Banner], summary="List active banners")
async def list_banners(service: BannerServiceDep) -> list[Banner]:
    return await service.list_banners(BannerQuery())


@router.get("/{banner_id}", response_model=Banner, summary="Get a banner")
async def get_banner(banner_id: UUID, service: BannerServiceDep) -> Banner:
    return await service.get(banner_id)


@router.post(
    "",
    response_model=Banner,
    status_code=status.HTTP_201_CREATED,
    summary="Create a banner",
)
async def create_banner(
    data: BannerCreate,
    service: BannerServiceDep,
    _admin: AdminUser,
) -> Banner:
    return await service.create(data)


@router.patch("/{banner_id}", response_model=Banner, summary="Update a banner")
async def update_banner(
    banner_id: UUID,
    changes: BannerUpdate,
    service: BannerServiceDep,
    _admin: AdminUser,
) -> Banner:
    return await service.update(banner_id, changes)


@router.delete("/{banner_id}", response_model=Banner, summary="Archive a banner")
async def archive_banner(
    banner_id: UUID,
    service: BannerServiceDep,
    _admin: AdminUser,
) -> Banner:
    return await service.archive(banner_id)
