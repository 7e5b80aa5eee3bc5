import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .allocator import round2_half_up
from .datatypes import CalculationResult, Person, ReceiptDraft

logger = logging.getLogger(__name__)

# Column order for the per-person breakdown CSV
COLUMNS = [
    'Person',
    'Subtotal',
    'Tax',
    'Total',
]

SAMPLE_CSV = """name,price,category
Pizza,15.99,Food
Soda,5.00,Drinks
Salad,8.50,Food
Dessert,6.99,Food
"""

def draft_to_dict(draft: ReceiptDraft) -> dict:
    """Draft in its exchange shape (camelCase keys, money as strings)"""
    out = {
        'title': draft.title,
        'storeName': draft.store_name,
        'purchasedAt': draft.purchased_at,
        'currency': draft.currency,
        'taxTotal': str(draft.tax_total),
        'items': [
            {
                'id': item.id,
                'name': item.name,
                'price': str(item.price),
                'category': item.category,
                'payers': list(item.payers),
                'meta': item.meta,
            }
            for item in draft.items
        ],
        'people': [
            {'id': p.id, 'name': p.name, 'handle': p.handle}
            for p in draft.people
        ],
    }
    return out

def result_to_dict(result: CalculationResult) -> dict:
    return {
        'perPerson': [
            {
                'personId': b.person_id,
                'subtotal': str(b.subtotal),
                'taxShare': str(b.tax_share),
                'total': str(b.total),
                '_fractional': {
                    'subtotal': str(b.fractional.subtotal),
                    'taxShare': str(b.fractional.tax_share),
                    'total': str(b.fractional.total),
                },
            }
            for b in result.per_person
        ],
        'receiptSubtotal': str(result.receipt_subtotal),
        'receiptTax': str(result.receipt_tax),
        'receiptGrand': str(result.receipt_grand),
        'rounding': {
            'method': result.rounding.method,
            'residualApplied': [
                {'personId': adj.person_id, 'delta': str(adj.delta)}
                for adj in result.rounding.residual_applied
            ],
        },
        'warnings': list(result.warnings),
    }

def export_json(path: Path, draft: ReceiptDraft, result: Optional[CalculationResult] = None,
                exported_at: Optional[datetime] = None) -> None:
    """Write the draft (and its result, if given) as a JSON document"""
    data = draft_to_dict(draft)
    if result is not None:
        data['calculationResult'] = result_to_dict(result)
    data['exportedAt'] = (exported_at or datetime.now(timezone.utc)).isoformat()

    Path(path).write_text(json.dumps(data, indent=2))
    logger.info(f"Exported receipt to {path}")

def write_breakdown_csv(csv_path: Path, result: CalculationResult, people: List[Person]) -> None:
    """Write one row per person, replacing any existing file"""
    rows = []
    for b in result.per_person:
        rows.append({
            'Person': _display_name(b.person_id, people),
            'Subtotal': _format_money(b.subtotal),
            'Tax': _format_money(b.tax_share),
            'Total': _format_money(b.total),
        })

    df = pd.DataFrame(rows, columns=COLUMNS)
    df.to_csv(csv_path, index=False)
    logger.debug(f"Wrote {len(rows)} breakdown rows to {csv_path}")

def format_breakdown(draft: ReceiptDraft, result: CalculationResult) -> str:
    """
    Format the split as plain text, ready to paste into a message.
    """
    lines = [
        f"Receipt Breakdown - {draft.store_name or 'Receipt'}",
        f"Date: {draft.purchased_at or 'Not specified'}",
        "",
        "Per Person:",
    ]

    for b in result.per_person:
        name = _display_name(b.person_id, draft.people)
        lines.append(
            f"{name}: Subtotal {_format_money(b.subtotal)}, "
            f"Tax {_format_money(b.tax_share)}, Total {_format_money(b.total)}"
        )

    lines.append("")
    lines.append(f"Receipt Total: {_format_money(result.receipt_grand)}")

    if result.rounding.residual_applied:
        lines.append("")
        lines.append("Rounding adjustments:")
        for adj in result.rounding.residual_applied:
            sign = '+' if adj.delta > 0 else ''
            lines.append(f"{_display_name(adj.person_id, draft.people)}: {sign}{_format_money(adj.delta)}")

    return "\n".join(lines)

def write_sample_csv(path: Path) -> None:
    Path(path).write_text(SAMPLE_CSV)

def _display_name(person_id: str, people: List[Person]) -> str:
    for p in people:
        if p.id == person_id:
            return p.name
    return person_id

def _format_money(amount):
    """Format money amount with $ prefix, sign in front"""
    amount = round2_half_up(amount)
    if amount < 0:
        return f'-${abs(amount):.2f}'
    return f'${amount:.2f}'
