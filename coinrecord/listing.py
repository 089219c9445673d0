from __future__ import annotations
import math
from typing import Iterable, List, Literal

from .models import CoinRecord
from .submission import COLLECTION

COINS_PER_PAGE = 6

SortKey = Literal["createdAt", "year", "coinPresentValue"]
SortOrder = Literal["asc", "desc"]

def fetch_coins(store, sort_by: SortKey = "createdAt", order: SortOrder = "desc") -> List[CoinRecord]:
    # la ordenación la hace el almacén
    docs = store.query(COLLECTION, order_by=sort_by, direction=order)
    return [CoinRecord.model_validate(d) for d in docs]

def filter_coins(coins: Iterable[CoinRecord], term: str) -> List[CoinRecord]:
    """Búsqueda sin distinguir mayúsculas en número, país o material"""
    t = (term or "").lower()
    return [
        c for c in coins
        if t in (c.coin_no or "").lower()
        or t in (c.country or "").lower()
        or t in (c.material or "").lower()
    ]

def next_photo_index(current: int, count: int, direction: Literal["next", "prev"]) -> int:
    if count <= 0:
        return 0
    if direction == "next":
        return (current + 1) % count
    return (current - 1 + count) % count

class CoinListView:
    """
    Estado del listado: búsqueda y página actual.
    Cambiar la búsqueda siempre vuelve a la página 1.
    """
    def __init__(self, coins: Iterable[CoinRecord], per_page: int = COINS_PER_PAGE):
        self.coins = list(coins)
        self.per_page = per_page
        self.search_term = ""
        self.filtered = list(self.coins)
        self.page = 1

    def search(self, term: str) -> None:
        self.search_term = term or ""
        self.filtered = filter_coins(self.coins, self.search_term)
        self.page = 1

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self.filtered) / self.per_page)

    @property
    def items(self) -> List[CoinRecord]:
        start = (self.page - 1) * self.per_page
        return self.filtered[start:start + self.per_page]

    def next_page(self) -> None:
        if self.page < self.total_pages:
            self.page += 1

    def prev_page(self) -> None:
        if self.page > 1:
            self.page -= 1

    def go_to(self, page: int) -> None:
        self.page = max(1, min(page, self.total_pages or 1))
