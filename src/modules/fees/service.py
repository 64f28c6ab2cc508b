import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.exceptions import DuplicateError, NotFoundError, ValidationError
from src.modules.fees.applicability import FeeItemRule, StructureLine
from src.modules.fees.models import FeeItem, FeeStructure, FeeStructureItem
from src.modules.fees.schemas import FeeItemCreate, FeeItemUpdate, FeeStructureUpsert
from src.modules.students.models import SchoolClass
from src.modules.terms.models import AcademicTerm

logger = logging.getLogger(__name__)


def to_rule(fee_item: FeeItem) -> FeeItemRule:
    return FeeItemRule(
        id=fee_item.id,
        name=fee_item.name,
        is_optional=fee_item.is_optional,
        applies_to=frozenset(fee_item.applies_to or ()),
    )


def to_lines(structure: FeeStructure | None) -> list[StructureLine]:
    if structure is None:
        return []
    return [StructureLine(fee_item_id=i.fee_item_id, amount=i.amount) for i in structure.items]


class FeeService:
    """Service for fee item definitions and fee structures."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Fee Items ---

    async def list_fee_items(self) -> list[FeeItem]:
        result = await self.session.execute(select(FeeItem).order_by(FeeItem.name))
        return list(result.scalars().all())

    async def get_fee_item(self, fee_item_id: int) -> FeeItem:
        fee_item = await self.session.get(FeeItem, fee_item_id)
        if not fee_item:
            raise NotFoundError("FeeItem", fee_item_id)
        return fee_item

    async def get_rules(self) -> dict[int, FeeItemRule]:
        """All fee item definitions keyed by id, as resolver input."""
        return {fi.id: to_rule(fi) for fi in await self.list_fee_items()}

    async def _ensure_unique_name(self, name: str, exclude_id: int | None = None) -> None:
        stmt = select(FeeItem).where(FeeItem.name == name)
        if exclude_id is not None:
            stmt = stmt.where(FeeItem.id != exclude_id)
        if (await self.session.execute(stmt)).scalar_one_or_none():
            raise DuplicateError("FeeItem", "name", name)

    async def create_fee_item(self, data: FeeItemCreate) -> FeeItem:
        await self._ensure_unique_name(data.name)
        fee_item = FeeItem(
            name=data.name,
            is_optional=data.is_optional,
            applies_to=[tag.value for tag in data.applies_to],
        )
        self.session.add(fee_item)
        await self.session.flush()
        return fee_item

    async def update_fee_item(self, fee_item_id: int, data: FeeItemUpdate) -> FeeItem:
        fee_item = await self.get_fee_item(fee_item_id)

        if data.name is not None and data.name != fee_item.name:
            await self._ensure_unique_name(data.name, exclude_id=fee_item_id)
            fee_item.name = data.name
        if data.is_optional is not None:
            fee_item.is_optional = data.is_optional
        if data.applies_to is not None:
            fee_item.applies_to = [tag.value for tag in data.applies_to]

        if not fee_item.is_optional and not fee_item.applies_to:
            raise ValidationError(
                "Mandatory fee items must apply to at least one of: new, term1, term2_3",
                field="applies_to",
            )

        await self.session.flush()
        await self.session.refresh(fee_item)
        return fee_item

    async def delete_fee_item(self, fee_item_id: int) -> None:
        """
        Delete a fee item definition.

        Structure lines that reference it are kept and ignored when billing.
        """
        fee_item = await self.get_fee_item(fee_item_id)
        await self.session.delete(fee_item)
        await self.session.flush()

    # --- Fee Structures ---

    async def get_structure(self, class_id: int, academic_term_id: int) -> FeeStructure | None:
        """The structure for a class and term, or None when not configured."""
        result = await self.session.execute(
            select(FeeStructure)
            .where(
                FeeStructure.class_id == class_id,
                FeeStructure.academic_term_id == academic_term_id,
            )
            .options(selectinload(FeeStructure.items))
        )
        return result.scalar_one_or_none()

    async def list_structures(self, academic_term_id: int) -> list[FeeStructure]:
        result = await self.session.execute(
            select(FeeStructure)
            .where(FeeStructure.academic_term_id == academic_term_id)
            .options(selectinload(FeeStructure.items))
            .order_by(FeeStructure.class_id)
        )
        return list(result.scalars().all())

    async def upsert_structure(self, data: FeeStructureUpsert) -> FeeStructure:
        """
        Create or replace the structure for a class and term.

        Editing a structure changes the amount due on invoices computed
        afterwards; payments already recorded are unaffected.
        """
        if not await self.session.get(SchoolClass, data.class_id):
            raise NotFoundError("SchoolClass", data.class_id)
        if not await self.session.get(AcademicTerm, data.academic_term_id):
            raise NotFoundError("AcademicTerm", data.academic_term_id)

        known_ids = set((await self.get_rules()).keys())
        unknown = sorted({i.fee_item_id for i in data.items} - known_ids)
        if unknown:
            raise ValidationError(
                f"Unknown fee item ids: {', '.join(str(i) for i in unknown)}", field="items"
            )

        structure = await self.get_structure(data.class_id, data.academic_term_id)
        if structure is None:
            structure = FeeStructure(class_id=data.class_id, academic_term_id=data.academic_term_id)
            self.session.add(structure)
            await self.session.flush()
        else:
            await self.session.execute(
                delete(FeeStructureItem).where(FeeStructureItem.structure_id == structure.id)
            )
            await self.session.flush()

        for position, item in enumerate(data.items):
            self.session.add(
                FeeStructureItem(
                    structure_id=structure.id,
                    fee_item_id=item.fee_item_id,
                    amount=item.amount,
                    position=position,
                )
            )
        await self.session.flush()

        result = await self.session.execute(
            select(FeeStructure)
            .where(FeeStructure.id == structure.id)
            .options(selectinload(FeeStructure.items))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
