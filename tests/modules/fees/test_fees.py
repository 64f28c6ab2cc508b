from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import DuplicateError, NotFoundError, ValidationError
from src.modules.fees.models import AppliesTo
from src.modules.fees.schemas import (
    FeeItemCreate,
    FeeItemUpdate,
    FeeStructureItemInput,
    FeeStructureUpsert,
)
from src.modules.fees.service import FeeService, to_lines


class TestFeeService:
    """Tests for FeeService."""

    async def test_create_fee_item(self, db_session: AsyncSession):
        service = FeeService(db_session)

        item = await service.create_fee_item(
            FeeItemCreate(name="School Fees", applies_to=[AppliesTo.TERM1, AppliesTo.TERM2_3])
        )

        assert item.id is not None
        assert item.applies_to == ["term1", "term2_3"]
        rules = await service.get_rules()
        assert rules[item.id].applies_to == frozenset({"term1", "term2_3"})

    async def test_duplicate_name(self, db_session: AsyncSession):
        service = FeeService(db_session)
        await service.create_fee_item(FeeItemCreate(name="Books Fee", applies_to=[AppliesTo.NEW]))

        with pytest.raises(DuplicateError):
            await service.create_fee_item(FeeItemCreate(name="Books Fee", applies_to=[AppliesTo.NEW]))

    async def test_mandatory_item_cannot_lose_all_tags(self, db_session: AsyncSession):
        service = FeeService(db_session)
        item = await service.create_fee_item(FeeItemCreate(name="PTA Dues", applies_to=[AppliesTo.TERM1]))

        with pytest.raises(ValidationError):
            await service.update_fee_item(item.id, FeeItemUpdate(applies_to=[]))

    async def test_optional_item_may_have_no_tags(self, db_session: AsyncSession):
        service = FeeService(db_session)

        item = await service.create_fee_item(FeeItemCreate(name="Canteen Fees", is_optional=True))

        assert item.applies_to == []

    async def test_upsert_structure_replaces_lines(
        self, db_session: AsyncSession, current_term, basic_one
    ):
        service = FeeService(db_session)
        tuition = await service.create_fee_item(
            FeeItemCreate(name="School Fees", applies_to=[AppliesTo.TERM1, AppliesTo.TERM2_3])
        )
        books = await service.create_fee_item(FeeItemCreate(name="Books Fee", applies_to=[AppliesTo.NEW]))

        first = await service.upsert_structure(
            FeeStructureUpsert(
                class_id=basic_one.id,
                academic_term_id=current_term.id,
                items=[
                    FeeStructureItemInput(fee_item_id=tuition.id, amount=Decimal("800")),
                    FeeStructureItemInput(fee_item_id=books.id, amount=Decimal("120")),
                ],
            )
        )
        assert first.total_amount == Decimal("920")

        second = await service.upsert_structure(
            FeeStructureUpsert(
                class_id=basic_one.id,
                academic_term_id=current_term.id,
                items=[FeeStructureItemInput(fee_item_id=tuition.id, amount=Decimal("850"))],
            )
        )

        assert second.id == first.id
        assert [(line.fee_item_id, line.amount) for line in to_lines(second)] == [
            (tuition.id, Decimal("850"))
        ]

    async def test_upsert_rejects_unknown_fee_item(
        self, db_session: AsyncSession, current_term, basic_one
    ):
        service = FeeService(db_session)

        with pytest.raises(ValidationError):
            await service.upsert_structure(
                FeeStructureUpsert(
                    class_id=basic_one.id,
                    academic_term_id=current_term.id,
                    items=[FeeStructureItemInput(fee_item_id=42, amount=Decimal("10"))],
                )
            )

    async def test_upsert_rejects_unknown_class(self, db_session: AsyncSession, current_term):
        service = FeeService(db_session)

        with pytest.raises(NotFoundError):
            await service.upsert_structure(
                FeeStructureUpsert(class_id=999, academic_term_id=current_term.id, items=[])
            )

    async def test_deleting_fee_item_leaves_line_unbilled(
        self, db_session: AsyncSession, current_term, basic_one
    ):
        service = FeeService(db_session)
        item = await service.create_fee_item(FeeItemCreate(name="Exam Fee", applies_to=[AppliesTo.TERM2_3]))
        await service.upsert_structure(
            FeeStructureUpsert(
                class_id=basic_one.id,
                academic_term_id=current_term.id,
                items=[FeeStructureItemInput(fee_item_id=item.id, amount=Decimal("40"))],
            )
        )

        await service.delete_fee_item(item.id)

        structure = await service.get_structure(basic_one.id, current_term.id)
        assert len(structure.items) == 1
        assert item.id not in await service.get_rules()

    async def test_missing_structure_is_none(self, db_session: AsyncSession, current_term, basic_one):
        service = FeeService(db_session)

        assert await service.get_structure(basic_one.id, current_term.id) is None
        assert to_lines(None) == []


class TestFeesAPI:
    async def test_structure_round_trip(self, client: AsyncClient, current_term, basic_one):
        created = await client.post(
            "/api/v1/fees/items",
            json={"name": "School Fees", "applies_to": ["term1", "term2_3"]},
        )
        assert created.status_code == 201
        fee_item_id = created.json()["data"]["id"]

        saved = await client.put(
            "/api/v1/fees/structures",
            json={
                "class_id": basic_one.id,
                "academic_term_id": current_term.id,
                "items": [{"fee_item_id": fee_item_id, "amount": "750.00"}],
            },
        )
        assert saved.status_code == 200
        body = saved.json()["data"]
        assert body["items"][0]["fee_item_name"] == "School Fees"
        assert Decimal(body["total_amount"]) == Decimal("750")

        lookup = await client.get(
            "/api/v1/fees/structures/lookup",
            params={"class_id": basic_one.id, "academic_term_id": current_term.id},
        )
        assert lookup.status_code == 200

    async def test_mandatory_item_without_tags_rejected(self, client: AsyncClient):
        response = await client.post("/api/v1/fees/items", json={"name": "PTA Dues"})
        assert response.status_code == 422

    async def test_negative_amount_rejected(self, client: AsyncClient, current_term, basic_one):
        response = await client.put(
            "/api/v1/fees/structures",
            json={
                "class_id": basic_one.id,
                "academic_term_id": current_term.id,
                "items": [{"fee_item_id": 1, "amount": "-5"}],
            },
        )
        assert response.status_code == 422
