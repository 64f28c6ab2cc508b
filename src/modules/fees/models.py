"""Fee item definitions and per class/term fee structures."""

from decimal import Decimal
from enum import StrEnum

from sqlalchemy import JSON, BigInteger, Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, MoneyAmount


class AppliesTo(StrEnum):
    """Who a mandatory fee item is billed to."""

    NEW = "new"  # newly admitted students, whatever the term
    TERM1 = "term1"  # 1st term
    TERM2_3 = "term2_3"  # 2nd and 3rd term


class FeeItem(BaseModel):
    """
    A named billable component, e.g. "Books Fee".

    Optional items are only billed once they have actually been paid for, so
    their applies_to tags are advisory.
    """

    __tablename__ = "fee_items"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    is_optional: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_to: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)


class FeeStructure(BaseModel):
    """Fee amounts configured for one class in one academic term."""

    __tablename__ = "fee_structures"

    class_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("school_classes.id"), nullable=False, index=True
    )
    academic_term_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("academic_terms.id"), nullable=False, index=True
    )

    items: Mapped[list["FeeStructureItem"]] = relationship(
        "FeeStructureItem",
        back_populates="structure",
        cascade="all, delete-orphan",
        order_by="FeeStructureItem.position",
    )

    __table_args__ = (
        UniqueConstraint("class_id", "academic_term_id", name="uq_fee_structure_class_term"),
    )

    @property
    def total_amount(self) -> Decimal:
        return sum((item.amount for item in self.items), Decimal("0"))


class FeeStructureItem(BaseModel):
    """One (fee item, amount) line of a fee structure."""

    __tablename__ = "fee_structure_items"

    structure_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("fee_structures.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Not a foreign key: deleting a fee item leaves the line dangling, and
    # dangling lines are skipped when resolving what a student owes.
    fee_item_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyAmount, nullable=False)
    position: Mapped[int] = mapped_column(nullable=False, default=0)

    structure: Mapped["FeeStructure"] = relationship("FeeStructure", back_populates="items")

    __table_args__ = (
        UniqueConstraint("structure_id", "fee_item_id", name="uq_fee_structure_item"),
    )
