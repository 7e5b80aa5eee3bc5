import logging
from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP, localcontext
from .datatypes import (
    CalculationResult,
    FractionalValues,
    Money,
    PersonBreakdown,
    ReceiptDraft,
    ResidualAdjustment,
    RoundingInfo,
    to_money,
)

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
HALF_CENT = Decimal('0.005')

class _Accumulator:
    __slots__ = ('subtotal', 'tax_share', 'total')

    def __init__(self):
        self.subtotal = Money(0)
        self.tax_share = Money(0)
        self.total = Money(0)

def compute(draft: ReceiptDraft) -> CalculationResult:
    """
    Split a receipt among its people.

    Items are divided equally among their payers, the order-level tax is
    apportioned in proportion to each person's pre-tax subtotal, and every
    figure is rounded half-up to cents only at the end. A final penny pass
    makes the rounded per-person totals add up to the rounded grand total.

    Never raises for a well-formed draft: data problems come back as
    warning strings on the result.
    """
    warnings: list[str] = []

    # Step 1 – one accumulator per person, in draft order
    people: 'OrderedDict[str, _Accumulator]' = OrderedDict()
    for person in draft.people:
        people.setdefault(person.id, _Accumulator())

    # Step 2 – item subtotals, equal split
    receipt_subtotal = Money(0)
    for item in draft.items:
        receipt_subtotal += item.price

        if not item.payers:
            warnings.append(f'item "{item.name}" has no payers')
            continue

        per_payer = item.price / Decimal(len(item.payers))
        for payer_id in item.payers:
            acc = people.get(payer_id)
            if acc is None:
                warnings.append(f'unknown payer "{payer_id}" for item "{item.name}"')
                continue
            acc.subtotal += per_payer

    # Step 3 – tax in proportion to subtotal
    tax_total = draft.tax_total
    total_subtotal = sum((acc.subtotal for acc in people.values()), Money(0))
    if total_subtotal == 0:
        if tax_total > 0:
            warnings.append('cannot allocate tax when no items have payers')
    else:
        for acc in people.values():
            acc.tax_share = tax_total * acc.subtotal / total_subtotal

    # Step 4 – pre-round totals
    for acc in people.values():
        acc.total = acc.subtotal + acc.tax_share

    # Step 5 – round each figure independently
    rounded = OrderedDict()
    for person_id, acc in people.items():
        rounded[person_id] = {
            'subtotal': _r(acc.subtotal),
            'tax_share': _r(acc.tax_share),
            'total': _r(acc.total),
        }

    # Step 6/7 – penny reconciliation against the receipt grand total
    receipt_grand = receipt_subtotal + tax_total
    delta = _r(receipt_grand) - sum((r['total'] for r in rounded.values()), Money(0))
    residual_applied = _reconcile(delta, people, rounded)

    per_person = [
        PersonBreakdown(
            person_id=person_id,
            subtotal=rounded[person_id]['subtotal'],
            tax_share=rounded[person_id]['tax_share'],
            total=rounded[person_id]['total'],
            fractional=FractionalValues(
                subtotal=acc.subtotal,
                tax_share=acc.tax_share,
                total=acc.total,
            ),
        )
        for person_id, acc in people.items()
    ]

    logger.debug(f"Computed {len(per_person)} breakdowns: subtotal={receipt_subtotal} "
                 f"tax={tax_total} grand={receipt_grand} residuals={len(residual_applied)}")

    return CalculationResult(
        per_person=per_person,
        receipt_subtotal=receipt_subtotal,
        receipt_tax=tax_total,
        receipt_grand=receipt_grand,
        rounding=RoundingInfo(method='half-up', residual_applied=residual_applied),
        warnings=warnings,
    )

def round2_half_up(x) -> Money:
    """Round to cents, halves away from zero (2.345 -> 2.35, -2.345 -> -2.35)."""
    return _r(x)

# -------------------- helpers --------------------

def _reconcile(delta, people, rounded) -> list[ResidualAdjustment]:
    """
    Hand out `delta` one cent at a time, largest rounding remainder first.

    Ties go to the lexically smaller person id. Each person gets at most one
    cent, so a delta bigger than one cent per person (money that was never
    attributed to anyone) is left partly unreconciled and logged.
    """
    applied: list[ResidualAdjustment] = []
    if delta == 0:
        return applied

    step = CENT if delta > 0 else -CENT
    order = sorted(
        people.keys(),
        key=lambda pid: (-abs(people[pid].total - rounded[pid]['total']), pid),
    )

    remaining = delta
    for person_id in order:
        if abs(remaining) < HALF_CENT:
            break
        rounded[person_id]['total'] += step
        applied.append(ResidualAdjustment(person_id=person_id, delta=step))
        remaining -= step

    if abs(remaining) >= HALF_CENT:
        logger.warning(f"Rounding residual of {remaining} could not be reconciled across "
                       f"{len(people)} people (unassigned items or unknown payers?)")
    return applied

def _r(x):  # round 2dp HALF_UP
    x = to_money(x)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the two cents
        ctx.prec = max(ctx.prec, x.adjusted() + 3)
        return x.quantize(CENT, ROUND_HALF_UP)
