"""Production runs repository"""
from typing import List, Optional

from supabase import Client  # type: ignore

from proofmaster.models.production import ProductionRun, ProductionRunRecord

from .base import BaseRepository


class ProductionRunRepository(BaseRepository[ProductionRunRecord, ProductionRun]):
    """Finished production runs, one row per run with its batches as JSON"""

    def __init__(self, client: Client):
        super().__init__(client, "production_runs", ProductionRunRecord)

    async def create(self, run: ProductionRun) -> ProductionRunRecord:
        return await self.insert(run)

    async def find_by_run_id(self, run_id: str) -> Optional[ProductionRunRecord]:
        """Find a saved run by its PR-YYYYMMDD-NNN identifier"""
        runs = await self.find_many({"run_id": run_id}, limit=1)
        return runs[0] if runs else None

    async def find_recent(self, limit: int = 20) -> List[ProductionRunRecord]:
        """Most recently completed runs first"""
        return await self.find_many(order_by="completed_at", descending=True, limit=limit)
