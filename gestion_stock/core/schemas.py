from typing import Generic, List, TypeVar

from pydantic import BaseModel

# --- Pagination ---
T = TypeVar('T')

class PaginatedResponse(BaseModel, Generic[T]):
    items: List[T]
    total: int
