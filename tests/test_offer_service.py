"""Tests for the offer service and Supabase offer store."""

import pytest

from merchant_app.offers import (
    BaseOffer,
    OfferConfig,
    OfferNotFoundError,
    OfferService,
    OfferStore,
    OfferStoreError,
    OfferValidationError,
)

from conftest import FakeSupabase


@pytest.fixture
def db():
    return FakeSupabase({"offers": []})


@pytest.fixture
def service(db):
    return OfferService(OfferConfig(), OfferStore(db))


def base_offer(**kwargs):
    data = {
        "discount_type": "percent",
        "discount_value": 10,
        "min_followers": 1000,
        "start_at": "2024-05-01",
    }
    data.update(kwargs)
    return BaseOffer(**data)


class TestPreview:
    def test_preview_contains_base_copy_and_ladder(self, service):
        preview = service.preview(base_offer(), "Cafe Roma").to_dict()
        assert preview["base_title"] == "-10% at Cafe Roma"
        assert preview["base_description"] == "Show your QR and get -10%"
        assert preview["can_scale"] is True
        assert len(preview["ladder"]) == 6

    def test_preview_top_tier_cannot_scale(self, service):
        preview = service.preview(base_offer(min_followers=100000), "Cafe Roma")
        assert preview.to_dict()["can_scale"] is False

    def test_preview_rejects_invalid_base(self, service):
        with pytest.raises(OfferValidationError) as exc:
            service.preview(base_offer(discount_value=7), "Cafe Roma")
        assert "discount_value" in exc.value.errors


class TestBuildRecords:
    def test_only_selected_ladder_entries(self, service):
        base = base_offer(min_followers=20000)
        ladder = service.scaler.compute_scaling_ladder(base, "Cafe Roma")
        ladder[0].selected = False
        records = service.build_records(42, "Cafe Roma", base, ladder)
        assert [r["min_followers"] for r in records] == [20000, 100000]
        assert [r["discount_value"] for r in records] == [10, 30]

    def test_record_fields(self, service):
        base = base_offer(discount_type="coupon", discount_value=5, end_at="")
        record = service.build_records(42, "Cafe Roma", base)[0]
        assert record == {
            "merchant_id": 42,
            "title": "-€5.00 at Cafe Roma",
            "description": "Show your QR and get -€5.00",
            "discount_type": "coupon",
            "discount_value": 5,
            "min_followers": 1000,
            "start_at": "2024-05-01",
            "end_at": None,
            "is_active": True,
        }

    def test_custom_title_kept(self, service):
        base = base_offer(title="  Summer deal ", description="Bring a friend")
        record = service.build_records(42, "Cafe Roma", base)[0]
        assert record["title"] == "Summer deal"
        assert record["description"] == "Bring a friend"


class TestCreateOffers:
    def test_inserts_base_and_selected_tiers(self, service, db):
        created = service.create_offers(42, "Cafe Roma", base_offer(), selected_tiers=[2000, 100000])
        assert [o["min_followers"] for o in created] == [1000, 2000, 100000]
        assert [o["discount_value"] for o in created] == [10, 20, 70]
        assert len(db.tables["offers"]) == 3
        assert all(o["merchant_id"] == 42 for o in db.tables["offers"])

    def test_no_selection_inserts_base_only(self, service, db):
        created = service.create_offers(42, "Cafe Roma", base_offer())
        assert len(created) == 1

    def test_invalid_offer_not_inserted(self, service, db):
        with pytest.raises(OfferValidationError):
            service.create_offers(42, "Cafe Roma", base_offer(start_at=None))
        assert db.tables["offers"] == []

    def test_store_error_propagates(self, service, db):
        db.failing_tables.add("offers")
        with pytest.raises(OfferStoreError):
            service.create_offers(42, "Cafe Roma", base_offer())


class TestUpdateToggleDelete:
    @pytest.fixture
    def existing(self, db):
        row = {
            "id": 5, "merchant_id": 42, "title": "-10% at Cafe Roma", "discount_type": "percent",
            "discount_value": 10, "min_followers": 1000, "is_active": True, "deleted": False,
        }
        db.tables["offers"].append(row)
        return row

    def test_update_requires_title(self, service, existing):
        with pytest.raises(OfferValidationError) as exc:
            service.update_offer(42, 5, {"discount_type": "percent", "discount_value": 20, "title": ""})
        assert exc.value.errors == {"title": "title required"}

    def test_update_without_start_date(self, service, existing):
        updated = service.update_offer(42, 5, {
            "discount_type": "percent", "discount_value": 20, "min_followers": 2000, "title": "New",
        })
        assert updated["discount_value"] == 20
        assert updated["is_active"] is True

    def test_update_sets_is_active_when_given(self, service, existing):
        updated = service.update_offer(42, 5, {
            "discount_type": "percent", "discount_value": 20, "title": "New", "is_active": False,
        })
        assert updated["is_active"] is False

    def test_update_other_merchant_not_found(self, service, existing):
        with pytest.raises(OfferNotFoundError):
            service.update_offer(99, 5, {"discount_type": "percent", "discount_value": 20, "title": "New"})

    def test_toggle_flips(self, service, existing):
        assert service.toggle_status(42, 5)["is_active"] is False
        assert service.toggle_status(42, 5)["is_active"] is True

    def test_toggle_missing(self, service):
        with pytest.raises(OfferNotFoundError):
            service.toggle_status(42, 404)

    def test_delete_is_soft(self, service, existing, db):
        service.delete_offer(42, 5)
        assert existing["deleted"] is True
        assert service.store.list_offers(42) == []


class TestStore:
    def test_list_orders_by_tier_desc(self, db):
        db.tables["offers"] = [
            {"id": 1, "merchant_id": 42, "min_followers": 1000, "deleted": False},
            {"id": 2, "merchant_id": 42, "min_followers": 50000, "deleted": False},
            {"id": 3, "merchant_id": 7, "min_followers": 2000, "deleted": False},
        ]
        offers = OfferStore(db).list_offers(42)
        assert [o["id"] for o in offers] == [2, 1]

    def test_count_active(self, db):
        db.tables["offers"] = [
            {"id": 1, "merchant_id": 42, "is_active": True, "deleted": False},
            {"id": 2, "merchant_id": 42, "is_active": False, "deleted": False},
            {"id": 3, "merchant_id": 42, "is_active": True, "deleted": True},
        ]
        assert OfferStore(db).count_active(42) == 1

    def test_offer_ids_include_deleted(self, db):
        db.tables["offers"] = [
            {"id": 1, "merchant_id": 42, "deleted": False},
            {"id": 2, "merchant_id": 42, "deleted": True},
        ]
        assert OfferStore(db).offer_ids(42) == [1, 2]

    def test_errors_wrapped(self, db):
        db.failing_tables.add("offers")
        with pytest.raises(OfferStoreError):
            OfferStore(db).list_offers(42)
