from dataclasses import dataclass
from enum import Enum
from pydantic import BaseModel
from typing import Optional, Union

Amount = Union[int, float]

class Price(BaseModel):
    amount: Optional[Amount] = None
    currency: Optional[str] = None

class Deal(BaseModel):
    price: Optional[Price] = None
    regular: Optional[Price] = None
    cut: Optional[Amount] = 0

class HistoryEntry(BaseModel):
    timestamp: Optional[str] = None
    deal: Optional[Deal] = None

class LowPrice(BaseModel):
    price: Price
    timestamp: Optional[Union[int, float, str]] = None

class HistoryLowItem(BaseModel):
    id: Optional[str] = None
    low: Optional[LowPrice] = None

class LookupStatus(Enum):
    FOUND = 'found'
    NOT_FOUND = 'not_found'
    UPSTREAM_FAILURE = 'upstream_failure'

@dataclass
class GidLookup:
    """Outcome of mapping a storefront id to an IsThereAnyDeal game id."""
    status: LookupStatus
    gid: Optional[str] = None
    detail: str = ''
    
    @classmethod
    def found(cls, gid: str) -> 'GidLookup':
        return cls(LookupStatus.FOUND, gid=gid)
    
    @classmethod
    def not_found(cls) -> 'GidLookup':
        return cls(LookupStatus.NOT_FOUND)
    
    @classmethod
    def failed(cls, detail: str) -> 'GidLookup':
        return cls(LookupStatus.UPSTREAM_FAILURE, detail=detail)
