from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

Money = Decimal       # keep full-precision cents

def to_money(value) -> Money:
    """Coerce a price/tax value to Decimal without picking up float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)

@dataclass
class Person:
    id: str                      # stable, unique within a draft
    name: str
    handle: Optional[str] = None

@dataclass
class Item:
    id: str
    name: str
    price: Money
    payers: List[str] = field(default_factory=list)   # person ids, equal split
    category: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        self.price = to_money(self.price)
        self.payers = list(self.payers)

@dataclass
class ReceiptDraft:
    currency: str = 'USD'
    tax_total: Money = Money(0)  # order-level, not per item
    items: List[Item] = field(default_factory=list)
    people: List[Person] = field(default_factory=list)
    title: Optional[str] = None
    store_name: Optional[str] = None
    purchased_at: Optional[str] = None

    def __post_init__(self):
        self.tax_total = to_money(self.tax_total)
        self.items = list(self.items)
        self.people = list(self.people)

@dataclass(frozen=True)
class FractionalValues:
    subtotal: Money
    tax_share: Money
    total: Money

@dataclass(frozen=True)
class PersonBreakdown:
    person_id: str
    subtotal: Money              # rounded 2dp
    tax_share: Money             # rounded 2dp
    total: Money                 # rounded 2dp, after residual adjustment
    fractional: FractionalValues # pre-round values

@dataclass(frozen=True)
class ResidualAdjustment:
    person_id: str
    delta: Money                 # +0.01 or -0.01

@dataclass(frozen=True)
class RoundingInfo:
    method: str = 'half-up'
    residual_applied: List[ResidualAdjustment] = field(default_factory=list)

@dataclass(frozen=True)
class CalculationResult:
    per_person: List[PersonBreakdown]
    receipt_subtotal: Money
    receipt_tax: Money
    receipt_grand: Money
    rounding: RoundingInfo
    warnings: List[str] = field(default_factory=list)

    def breakdown_for(self, person_id: str) -> Optional[PersonBreakdown]:
        for b in self.per_person:
            if b.person_id == person_id:
                return b
        return None
