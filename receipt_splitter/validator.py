"""
Draft validation.

Checks a receipt draft for data problems and reports them as plain
warning strings. Nothing here is fatal: an item with no payers or a
dangling payer id is still a usable draft, it just won't be fully
allocated by the allocator.
"""

import logging
from typing import List

from .datatypes import ReceiptDraft

logger = logging.getLogger(__name__)

def validate(draft: ReceiptDraft) -> List[str]:
    """
    Return warnings for `draft` in the order they are found.

    Never raises and never touches the draft.
    """
    warnings = []

    if not draft.tax_total.is_finite():
        warnings.append('tax is not a number')
    elif draft.tax_total < 0:
        warnings.append('tax cannot be negative')

    known_ids = {p.id for p in draft.people}
    for item in draft.items:
        if not item.price.is_finite():
            warnings.append(f'item "{item.name}" has a price that is not a number')
        elif item.price < 0:
            warnings.append(f'item "{item.name}" has negative price')
        if not item.payers:
            warnings.append(
                f'item "{item.name}" has no payers assigned - '
                'assign payers to include in calculations')

        for payer_id in item.payers:
            if payer_id not in known_ids:
                warnings.append(f'unknown payer "{payer_id}" for item "{item.name}"')

    duplicates = _duplicate_ids([p.id for p in draft.people])
    if duplicates:
        warnings.append(f"duplicate person IDs: {', '.join(duplicates)}")

    logger.debug(f"Validated draft with {len(draft.items)} items: {len(warnings)} warnings")
    return warnings

def _duplicate_ids(ids):
    """Ids seen more than once, each listed once, in order of first repeat"""
    seen = set()
    dupes = []
    for person_id in ids:
        if person_id in seen and person_id not in dupes:
            dupes.append(person_id)
        seen.add(person_id)
    return dupes
