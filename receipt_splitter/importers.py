"""
Receipt import.

Turns CSV text or a decoded JSON document into a `ReceiptDraft`. This is
the one place that deals with loosely shaped input: alternate JSON field
names are mapped onto the canonical draft here, so the allocator and
validator only ever see a fixed shape.

Structural problems (missing columns, wrong JSON shape, money that is not
a number) raise `DraftImportError`. Row-level problems in a CSV (a bad
price, a payer name nobody matches) are logged and the row or name is
skipped; they are not part of the draft's own warnings.
"""

import io
import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .datatypes import Item, Money, Person, ReceiptDraft

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = ('name', 'price')

# alternate keys, first match wins
PRICE_KEYS = ('price', 'total', 'total_price')
STORE_KEYS = ('storeName', 'store')
PURCHASED_AT_KEYS = ('purchasedAt', 'purchased_at')

class DraftImportError(ValueError):
    """The input could not be turned into a receipt draft."""

# -------------------- CSV --------------------

def parse_csv_to_draft(text: str, people_bank: List[Person], currency: str = 'USD') -> ReceiptDraft:
    """
    Build a draft from CSV with `name`, `price` and optional `category`
    and `payers` columns. `payers` holds comma separated names or ids
    looked up in `people_bank`.
    """
    try:
        df = pd.read_csv(io.StringIO(text.strip()), dtype=str, keep_default_na=False,
                         skipinitialspace=True)
    except pd.errors.EmptyDataError:
        raise DraftImportError('CSV must have header and at least one data row')
    except pd.errors.ParserError as e:
        raise DraftImportError(f'Malformed CSV: {e}') from e

    df = df.fillna("")
    df.columns = [str(c).strip() for c in df.columns]
    if df.empty:
        raise DraftImportError('CSV must have header and at least one data row')

    for required in REQUIRED_CSV_COLUMNS:
        if required not in df.columns:
            raise DraftImportError(f'Missing required column: {required}')

    items = []
    skipped = 0
    for i, row in enumerate(df.to_dict('records'), start=1):
        name = row['name'].strip()
        price = _parse_price(row['price'])
        if price is None or price < 0:
            logger.warning(f"Invalid price for {name}, skipping row")
            skipped += 1
            continue

        payers = _resolve_payers(row.get('payers', ''), people_bank, name)
        category = row.get('category', '').strip() or None

        items.append(Item(id=f'item_{i}', name=name, price=price,
                          payers=payers, category=category))

    logger.info(f"Parsed {len(items)} items from CSV ({skipped} rows skipped)")
    return ReceiptDraft(currency=currency, tax_total=Money(0), items=items,
                        people=list(people_bank))

def _parse_price(raw: str) -> Optional[Decimal]:
    try:
        value = Decimal(raw.strip().lstrip('$'))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None

def _resolve_payers(raw: str, people_bank: List[Person], item_name: str) -> List[str]:
    payers = []
    for payer_name in (p.strip() for p in raw.split(',')):
        if not payer_name:
            continue
        person = _find_person(payer_name, people_bank)
        if person:
            payers.append(person.id)
        else:
            logger.warning(f'Unknown payer "{payer_name}" for {item_name} - '
                           'you can assign payers manually')
    return payers

def _find_person(name_or_id: str, people_bank: List[Person]) -> Optional[Person]:
    for p in people_bank:
        if p.name.lower() == name_or_id.lower() or p.id == name_or_id:
            return p
    return None

# -------------------- JSON --------------------

def parse_json_to_draft(data: Any) -> ReceiptDraft:
    """Map a decoded JSON receipt, with its alternate field names, onto a draft."""
    if not isinstance(data, dict):
        raise DraftImportError('Invalid JSON format')
    if not isinstance(data.get('items'), list):
        raise DraftImportError('items must be an array')
    if not isinstance(data.get('people'), list):
        raise DraftImportError('people must be an array')

    people = [_json_person(p, i) for i, p in enumerate(data['people'])]
    items = [_json_item(it, i) for i, it in enumerate(data['items'])]

    tax = data.get('taxTotal')
    if tax is None and isinstance(data.get('tax'), dict):
        tax = data['tax'].get('amount')

    return ReceiptDraft(
        title=data.get('title'),
        store_name=_first(data, STORE_KEYS),
        purchased_at=_first(data, PURCHASED_AT_KEYS),
        currency=data.get('currency') or 'USD',
        tax_total=_json_money(tax, 'taxTotal'),
        items=items,
        people=people,
    )

def _json_person(p: Any, index: int) -> Person:
    if isinstance(p, str):
        return Person(id=p, name=p)
    if not isinstance(p, dict):
        raise DraftImportError(f'people[{index}] must be a string or an object')
    person_id = p.get('id') or f'person_{index}'
    return Person(id=str(person_id),
                  name=p.get('name') or p.get('id') or f'Person {index + 1}',
                  handle=p.get('handle'))

def _json_item(it: Any, index: int) -> Item:
    if not isinstance(it, dict):
        raise DraftImportError(f'items[{index}] must be an object')

    name = it.get('name') or f'Item {index + 1}'
    if isinstance(it.get('payers'), list):
        payers = [str(pid) for pid in it['payers']]
    elif isinstance(it.get('shares'), dict):
        payers = list(it['shares'].keys())
    else:
        payers = []

    return Item(
        id=str(it.get('id') or f'item_{index}'),
        name=name,
        price=_json_money(_first(it, PRICE_KEYS), f'price of "{name}"'),
        payers=payers,
        category=it.get('category'),
        meta=it.get('meta'),
    )

def _first(d: Dict[str, Any], keys) -> Any:
    for key in keys:
        if d.get(key) is not None:
            return d[key]
    return None

def _json_money(value: Any, what: str) -> Money:
    if value is None:
        return Money(0)
    if isinstance(value, bool):
        raise DraftImportError(f'{what} must be a number, got {value!r}')
    try:
        money = Decimal(str(value))
    except InvalidOperation:
        raise DraftImportError(f'{what} must be a number, got {value!r}')
    if not money.is_finite():
        raise DraftImportError(f'{what} must be a number, got {value!r}')
    return money

# -------------------- files --------------------

def load_draft(path: Path, people_bank: Optional[List[Person]] = None,
               currency: str = 'USD') -> ReceiptDraft:
    """Read a `.csv` or `.json` receipt file."""
    path = Path(path)
    suffix = path.suffix.lower()
    logger.info(f"Importing receipt from {path}")

    if suffix == '.csv':
        return parse_csv_to_draft(path.read_text(), people_bank or [], currency)
    if suffix == '.json':
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise DraftImportError(f'Invalid JSON in {path.name}: {e}') from e
        return parse_json_to_draft(data)
    raise DraftImportError('Unsupported file type. Please upload a CSV or JSON file.')
