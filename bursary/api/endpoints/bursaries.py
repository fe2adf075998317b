# bursary/api/endpoints/bursaries.py

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bursary.api.deps import get_db_session
from bursary.schemas.bursary import BursaryCreate, BursaryRead, BursaryUpdate
from bursary.services.bursary_service import (
    create_bursary,
    delete_bursary,
    get_bursary,
    list_bursaries,
    update_bursary,
)

router = APIRouter(prefix="/bursaries", tags=["Bursaries"])


@router.post("", response_model=BursaryRead, status_code=status.HTTP_201_CREATED)
async def create(data: BursaryCreate, session: AsyncSession = Depends(get_db_session)):
    return await create_bursary(session, data)


@router.get("", response_model=List[BursaryRead])
async def list_all(session: AsyncSession = Depends(get_db_session)):
    return await list_bursaries(session)


@router.get("/{bursary_id}", response_model=BursaryRead)
async def get_one(bursary_id: int, session: AsyncSession = Depends(get_db_session)):
    return await get_bursary(session, bursary_id)


@router.put("/{bursary_id}", response_model=BursaryRead)
async def update(bursary_id: int, data: BursaryUpdate, session: AsyncSession = Depends(get_db_session)):
    return await update_bursary(session, bursary_id, data)


@router.delete("/{bursary_id}")
async def delete(bursary_id: int, session: AsyncSession = Depends(get_db_session)):
    await delete_bursary(session, bursary_id)
    return {"message": "Bursary deleted successfully"}
