"""
Draft editor tests: every edit returns a new draft and a full
recalculation follows it.
"""
from decimal import Decimal

import pytest

from receipt_splitter import draft_editor
from receipt_splitter.datatypes import Item, Person, ReceiptDraft


@pytest.fixture()
def draft() -> ReceiptDraft:
    return ReceiptDraft(
        tax_total=Decimal('0.36'),
        people=[Person('kevin', 'Kevin'), Person('alice', 'Alice'), Person('bob', 'Bob')],
        items=[
            Item('i1', 'Oranges', Decimal('3.00'), ['kevin', 'alice', 'bob']),
            Item('i2', 'Apple', Decimal('1.50'), ['kevin']),
        ],
    )


def test_remove_person_cascades_to_payers(draft):
    edited = draft_editor.remove_person(draft, 'kevin')

    assert [p.id for p in edited.people] == ['alice', 'bob']
    assert edited.items[0].payers == ['alice', 'bob']
    assert edited.items[1].payers == []

    # original untouched
    assert [p.id for p in draft.people] == ['kevin', 'alice', 'bob']
    assert draft.items[1].payers == ['kevin']


def test_add_and_update_person(draft):
    edited = draft_editor.add_person(draft, Person('zoe', 'Zoe'))
    edited = draft_editor.update_person(edited, Person('zoe', 'Zoë', handle='@zoe'))

    assert edited.people[-1] == Person('zoe', 'Zoë', handle='@zoe')
    assert len(draft.people) == 3


def test_item_edits(draft):
    edited = draft_editor.add_item(draft, Item('i3', 'Bread', '2.25'))
    assert edited.items[-1].price == Decimal('2.25')

    edited = draft_editor.update_item(edited, Item('i3', 'Rye bread', Decimal('2.50'), ['bob']))
    assert edited.items[-1].name == 'Rye bread'

    edited = draft_editor.remove_item(edited, 'i1')
    assert [i.id for i in edited.items] == ['i2', 'i3']
    assert [i.id for i in draft.items] == ['i1', 'i2']


def test_assign_payers(draft):
    edited = draft_editor.assign_payers(draft, 'i2', ['alice'], replace_existing=False)
    assert edited.items[1].payers == ['kevin', 'alice']

    edited = draft_editor.assign_payers(edited, 'i2', ['bob'])
    assert edited.items[1].payers == ['bob']


def test_set_tax_coerces_to_decimal(draft):
    edited = draft_editor.set_tax(draft, 0.83)
    assert edited.tax_total == Decimal('0.83')
    assert draft.tax_total == Decimal('0.36')


def test_update_receipt_meta(draft):
    edited = draft_editor.update_receipt_meta(draft, store_name='Corner Shop', purchased_at='2025-06-01')
    assert edited.store_name == 'Corner Shop'
    assert edited.purchased_at == '2025-06-01'

    with pytest.raises(TypeError):
        draft_editor.update_receipt_meta(draft, tax_total=Decimal('1'))


def test_recalculate_runs_validate_and_compute(draft):
    edited = draft_editor.remove_person(draft, 'kevin')
    recalc = draft_editor.recalculate(edited)

    assert recalc.draft is edited
    assert recalc.warnings == [
        'item "Apple" has no payers assigned - assign payers to include in calculations',
    ]
    assert recalc.result.warnings == ['item "Apple" has no payers']
    assert recalc.result.receipt_subtotal == Decimal('4.50')
    assert recalc.result.breakdown_for('alice').subtotal == Decimal('1.50')
