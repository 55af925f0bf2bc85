from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models import Vendor
from app.repository.base_repository import BaseRepository

class VendorRepository(BaseRepository[Vendor]):
    def __init__(self):
        super().__init__(Vendor)

    async def get_vendor(self, db: AsyncSession, vendor_id: int) -> Optional[Vendor]:
        return await self.get(db, vendor_id)

vendor_repository = VendorRepository()
