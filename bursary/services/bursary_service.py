# bursary/services/bursary_service.py

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from bursary.core.exceptions import ConflictError, NotFoundError
from bursary.models.admin import Admin
from bursary.models.application import Application
from bursary.models.bursary import Bursary
from bursary.schemas.bursary import BursaryCreate, BursaryUpdate


async def create_bursary(session: AsyncSession, data: BursaryCreate) -> Bursary:
    if data.created_by is not None and not await session.get(Admin, data.created_by):
        raise NotFoundError("Creating admin not found")

    bursary = Bursary(**data.model_dump())
    session.add(bursary)
    await session.commit()
    await session.refresh(bursary)

    logger.info(f"Bursary {bursary.id} created: {bursary.title}")
    return bursary


async def list_bursaries(session: AsyncSession) -> list[Bursary]:
    result = await session.execute(select(Bursary).order_by(Bursary.created_at.desc(), Bursary.id.desc()))
    return result.scalars().all()


async def get_bursary(session: AsyncSession, bursary_id: int) -> Bursary:
    bursary = await session.get(Bursary, bursary_id)
    if not bursary:
        raise NotFoundError("Bursary not found")
    return bursary


async def update_bursary(session: AsyncSession, bursary_id: int, data: BursaryUpdate) -> Bursary:
    bursary = await get_bursary(session, bursary_id)

    # Apply only fields provided
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(bursary, key, value)

    session.add(bursary)
    await session.commit()
    await session.refresh(bursary)
    return bursary


async def delete_bursary(session: AsyncSession, bursary_id: int) -> None:
    bursary = await get_bursary(session, bursary_id)

    in_use = await session.execute(
        select(Application.id).where(Application.bursary_id == bursary_id).limit(1)
    )
    if in_use.first():
        raise ConflictError("Bursary has applications and cannot be deleted")

    await session.delete(bursary)
    await session.commit()
    logger.info(f"Bursary {bursary_id} deleted")
