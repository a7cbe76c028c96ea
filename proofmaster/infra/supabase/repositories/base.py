"""Base repository over one Supabase table"""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from supabase import Client  # type: ignore

T = TypeVar('T', bound=BaseModel)
CreateT = TypeVar('CreateT', bound=BaseModel)


class BaseRepository(Generic[T, CreateT]):
    """
    Maps rows of one table to a pydantic model.
    Keeps Supabase query details out of the services.
    """

    def __init__(self, client: Client, table_name: str, model_class: Type[T]):
        self._client = client
        self._table_name = table_name
        self._model_class = model_class

    def _table(self):
        return self._client.table(self._table_name)

    def _to_models(self, rows: List[Dict[str, Any]]) -> List[T]:
        return [self._model_class(**row) for row in rows]

    async def find_many(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[T]:
        """
        Select rows matching all equality filters.

        Args:
            filters: Column -> value pairs
            order_by: Column to sort on
            descending: Sort newest/largest first
            limit: Maximum number of rows

        Returns:
            List of models, possibly empty
        """
        query = self._table().select("*")
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit:
            query = query.limit(limit)

        response = query.execute()
        return self._to_models(response.data or [])

    async def insert(self, data: CreateT) -> T:
        """Insert one row and return it as stored"""
        response = self._table().insert(data.model_dump(mode='json')).execute()

        if not response.data:
            raise ValueError(f"Insert into {self._table_name} returned no row")

        return self._to_models(response.data)[0]
