"""
Which fee structure lines a student owes for a term.

Pure functions over plain records; no database access. Every screen that
shows what a student owes (invoices, dashboard, payment form) goes through
resolve_applicable_items.
"""

import logging
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from src.modules.fees.models import AppliesTo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeeItemRule:
    """The parts of a fee item definition that drive applicability."""

    id: int
    name: str
    is_optional: bool = False
    applies_to: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class StructureLine:
    fee_item_id: int
    amount: Decimal


@dataclass(frozen=True)
class ApplicableItem:
    name: str
    amount: Decimal


def is_mandatory_item_applicable(
    applies_to: Collection[str], *, is_new_student: bool, term_number: int
) -> bool:
    """
    Mandatory item rule.

    New students get ``new`` items in any term; everyone gets ``term1`` items
    in term 1 and ``term2_3`` items in later terms. Continuing students never
    get ``new`` items.
    """
    if is_new_student and AppliesTo.NEW in applies_to:
        return True
    if term_number == 1:
        return AppliesTo.TERM1 in applies_to
    return term_number > 1 and AppliesTo.TERM2_3 in applies_to


def resolve_applicable_items(
    lines: Iterable[StructureLine],
    definitions: Mapping[int, FeeItemRule],
    *,
    is_new_student: bool,
    term_number: int,
    paid_item_names: Collection[str] = frozenset(),
) -> list[ApplicableItem]:
    """
    Resolve the structure lines a student owes, in structure order.

    Lines whose fee item is unknown are dropped. Optional items are included
    only when ``paid_item_names`` contains their name, so they show up on
    invoices after the fact rather than being billed in advance. Amounts are
    taken from the structure as configured.
    """
    if term_number < 1:
        raise ValueError(f"Term number must be positive, got {term_number}")

    applicable: list[ApplicableItem] = []
    for line in lines:
        rule = definitions.get(line.fee_item_id)
        if rule is None:
            logger.warning("Fee structure references unknown fee item id=%s; skipped", line.fee_item_id)
            continue

        if rule.is_optional:
            owed = rule.name in paid_item_names
        else:
            owed = is_mandatory_item_applicable(
                rule.applies_to, is_new_student=is_new_student, term_number=term_number
            )

        if owed:
            applicable.append(ApplicableItem(name=rule.name, amount=line.amount))

    return applicable
