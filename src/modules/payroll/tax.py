"""
Progressive income tax (PAYE) from a bracket table.

Brackets are marginal: each slice of income is taxed at the rate of the
bracket it falls in, and no slice is taxed twice.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from src.shared.utils.money import ZERO, as_decimal, percent_to_rate


@dataclass(frozen=True)
class TaxBand:
    """One bracket: income from ``lower`` up to ``upper`` (None = and above) at ``rate`` percent."""

    lower: Decimal
    upper: Decimal | None
    rate: Decimal

    @classmethod
    def of(cls, lower, upper, rate) -> "TaxBand":
        return cls(
            lower=as_decimal(lower),
            upper=None if upper is None else as_decimal(upper),
            rate=as_decimal(rate),
        )


DEFAULT_TAX_BANDS: tuple[TaxBand, ...] = (
    TaxBand.of("0", "490", "0"),
    TaxBand.of("490", "600", "5"),
    TaxBand.of("600", "730", "10"),
    TaxBand.of("730", "3000", "17.5"),
    TaxBand.of("3000", "16491.67", "25"),
    TaxBand.of("16491.67", "50000", "30"),
    TaxBand.of("50000", None, "35"),
)


def calculate_income_tax(taxable_income: Decimal, bands: Iterable[TaxBand]) -> Decimal:
    """
    Tax owed on ``taxable_income``.

    Bands are sorted by lower bound here, whatever order they come in.
    Gaps and overlaps are not checked; use ``validate_tax_bands`` when
    the table is saved.
    """
    income = as_decimal(taxable_income)
    if income <= 0:
        return ZERO

    tax = ZERO
    remaining = income
    for band in sorted(bands, key=lambda b: b.lower):
        if remaining <= 0 or band.lower >= income:
            break
        top = income if band.upper is None else min(income, band.upper)
        portion = min(top - band.lower, remaining)
        if portion <= 0:
            continue
        tax += portion * percent_to_rate(band.rate)
        remaining -= portion
    return tax


def validate_tax_bands(bands: Sequence[TaxBand]) -> list[str]:
    """
    Problems with a bracket table, in order; empty when the table is usable.

    A usable table starts at 0, has no gaps or overlaps, rates within
    0-100, and only its last band open-ended.
    """
    problems: list[str] = []
    if not bands:
        return problems

    ordered = sorted(bands, key=lambda b: b.lower)
    if ordered[0].lower != 0:
        problems.append("The first bracket must start at 0")

    for index, band in enumerate(ordered, start=1):
        if band.lower < 0:
            problems.append(f"Bracket {index}: lower bound cannot be negative")
        if not (0 <= band.rate <= 100):
            problems.append(f"Bracket {index}: rate must be between 0 and 100")
        if band.upper is not None and band.upper <= band.lower:
            problems.append(f"Bracket {index}: upper bound must be greater than lower bound")

        is_last = index == len(ordered)
        if band.upper is None and not is_last:
            problems.append(f"Bracket {index}: only the last bracket may be open-ended")
        if not is_last and band.upper is not None:
            following = ordered[index]
            if following.lower > band.upper:
                problems.append(f"Gap between {band.upper} and {following.lower}")
            elif following.lower < band.upper:
                problems.append(f"Brackets {index} and {index + 1} overlap")

    return problems
