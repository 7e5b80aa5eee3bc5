"""
Draft editing operations.

Every function here takes a draft and returns a new one, leaving the
input untouched, so the caller always swaps in a whole new draft on edit.
After each edit the caller runs `recalculate` on the full draft: there is
no incremental update and nothing is cached between edits.
"""

import logging
from dataclasses import dataclass, replace

from .allocator import compute
from .datatypes import CalculationResult, Item, Person, ReceiptDraft, to_money
from .validator import validate

logger = logging.getLogger(__name__)

_META_FIELDS = ('title', 'store_name', 'purchased_at', 'currency')

@dataclass(frozen=True)
class Recalculation:
    draft: ReceiptDraft
    warnings: list
    result: CalculationResult

def recalculate(draft: ReceiptDraft) -> Recalculation:
    """Validate then compute the whole draft as one step."""
    warnings = validate(draft)
    result = compute(draft)
    return Recalculation(draft=draft, warnings=warnings, result=result)

def add_person(draft: ReceiptDraft, person: Person) -> ReceiptDraft:
    return replace(draft, people=[*draft.people, person])

def update_person(draft: ReceiptDraft, person: Person) -> ReceiptDraft:
    people = [person if p.id == person.id else p for p in draft.people]
    return replace(draft, people=people)

def remove_person(draft: ReceiptDraft, person_id: str) -> ReceiptDraft:
    """Drop a person and strip them from every item's payers."""
    people = [p for p in draft.people if p.id != person_id]
    items = [
        replace(item, payers=[pid for pid in item.payers if pid != person_id])
        for item in draft.items
    ]
    logger.debug(f"Removed person {person_id}; {len(draft.people) - len(people)} entries dropped")
    return replace(draft, people=people, items=items)

def add_item(draft: ReceiptDraft, item: Item) -> ReceiptDraft:
    return replace(draft, items=[*draft.items, item])

def update_item(draft: ReceiptDraft, item: Item) -> ReceiptDraft:
    items = [item if i.id == item.id else i for i in draft.items]
    return replace(draft, items=items)

def remove_item(draft: ReceiptDraft, item_id: str) -> ReceiptDraft:
    return replace(draft, items=[i for i in draft.items if i.id != item_id])

def set_tax(draft: ReceiptDraft, tax) -> ReceiptDraft:
    return replace(draft, tax_total=to_money(tax))

def update_receipt_meta(draft: ReceiptDraft, **meta) -> ReceiptDraft:
    """
    Update title / store_name / purchased_at / currency.

    Unknown keys raise TypeError, the same as passing them to the dataclass.
    """
    unknown = set(meta) - set(_META_FIELDS)
    if unknown:
        raise TypeError(f"Not receipt metadata: {', '.join(sorted(unknown))}")
    return replace(draft, **meta)

def assign_payers(draft: ReceiptDraft, item_id: str, payers: list,
                  replace_existing: bool = True) -> ReceiptDraft:
    """Set (or extend) the payer list of one item."""
    items = []
    for item in draft.items:
        if item.id == item_id:
            new_payers = list(payers) if replace_existing else [*item.payers, *payers]
            item = replace(item, payers=new_payers)
        items.append(item)
    return replace(draft, items=items)
