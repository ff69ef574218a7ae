# lidobook/db/repositories/base.py
from typing import Any, Generic, TypeVar, Type, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations.

    Repositories only flush; the service's unit of work owns the commit.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def add(self, db_obj: ModelType) -> ModelType:
        """Stage and flush a new record"""
        self.session.add(db_obj)
        await self.session.flush()
        return db_obj

    async def add_all(self, db_objs: List[ModelType]) -> List[ModelType]:
        self.session.add_all(db_objs)
        await self.session.flush()
        return db_objs

    async def save(self, db_obj: ModelType) -> ModelType:
        """Flush pending changes on an already tracked record"""
        await self.session.flush()
        return db_obj

    async def delete(self, id: Any) -> bool:
        """Delete record"""
        result = await self.session.execute(
            delete(self.model).where(self.model.id == id)
        )
        return result.rowcount > 0
