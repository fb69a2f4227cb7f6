"""Promocode model rules and PromocodeService permissions."""

from datetime import timedelta

import pytest

from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.core.timezone_utils import utc_now
from app.models.promocode import Promocode
from app.services.promocode_service import PromocodeService


@pytest.fixture
def service(db):
    return PromocodeService(db)


def _window(days: int = 30):
    return {"valid_until": utc_now() + timedelta(days=days)}


# ------------------------------------------------------------------- model


def test_percentage_discount_is_capped_by_max_amount():
    promocode = Promocode(
        discount_type="percentage", discount_value=50, max_discount_amount=15, minimum_order_amount=0
    )
    assert promocode.calculate_discount(20) == 10.0
    assert promocode.calculate_discount(100) == 15


def test_fixed_discount_never_exceeds_order_amount():
    promocode = Promocode(discount_type="fixed", discount_value=25, minimum_order_amount=0)
    assert promocode.calculate_discount(10) == 10
    assert promocode.calculate_discount(40) == 25


def test_discount_is_zero_below_minimum_order():
    promocode = Promocode(discount_type="fixed", discount_value=5, minimum_order_amount=50)
    assert promocode.calculate_discount(49.99) == 0.0


def test_empty_restriction_lists_apply_everywhere():
    promocode = Promocode(
        is_global=False, applicable_products=[], applicable_categories=["c1"], applicable_industries=[]
    )
    assert promocode.is_applicable_to_products(["p1"])
    assert promocode.is_applicable_to_categories(["c1", "c2"])
    assert not promocode.is_applicable_to_categories(["c2"])
    assert promocode.is_applicable_to_industries(["i9"])


def test_validity_and_per_user_limit(make_promocode, buyer):
    promocode = make_promocode(usage_limit=2, usage_limit_per_user=1)

    assert promocode.is_valid()
    assert promocode.can_be_used_by(buyer.id)

    promocode.record_usage(buyer.id, None, 2.0)
    assert promocode.is_valid()
    assert not promocode.can_be_used_by(buyer.id)

    promocode.record_usage("someone-else", None, 2.0)
    assert not promocode.is_valid()


def test_expired_code_is_not_valid(make_promocode):
    promocode = make_promocode(valid_until=utc_now() - timedelta(minutes=1))
    assert not promocode.is_valid()


# ----------------------------------------------------------------- service


def test_seller_cannot_create_global_code(service, seller):
    with pytest.raises(ForbiddenException):
        service.create(
            seller,
            {"code": "EVERYONE", "discount_type": "percentage", "discount_value": 10, "is_global": True, **_window()},
        )


def test_create_uppercases_and_tags_creator(service, seller, admin):
    seller_code = service.create(
        seller, {"code": "spring10", "discount_type": "percentage", "discount_value": 10, **_window()}
    )
    admin_code = service.create(
        admin, {"code": "GLOBAL5", "discount_type": "fixed", "discount_value": 5, "is_global": True, **_window()}
    )

    assert seller_code.code == "SPRING10"
    assert seller_code.created_by_type == "seller"
    assert seller_code.seller_id == seller.id
    assert admin_code.created_by_type == "admin"
    assert admin_code.seller_id is None


def test_create_rejects_duplicates_and_past_windows(service, admin):
    service.create(admin, {"code": "ONCE", "discount_type": "fixed", "discount_value": 5, **_window()})

    with pytest.raises(ValidationException) as exc:
        service.create(admin, {"code": "once", "discount_type": "fixed", "discount_value": 5, **_window()})
    assert exc.value.code == "DUPLICATE_CODE"

    with pytest.raises(ValidationException):
        service.create(admin, {"code": "LATE", "discount_type": "fixed", "discount_value": 5, **_window(-1)})


def test_only_creator_or_admin_manages_code(service, seller, other_seller, admin):
    promocode = service.create(
        seller, {"code": "MINE", "discount_type": "percentage", "discount_value": 10, **_window()}
    )

    with pytest.raises(ForbiddenException):
        service.get(promocode.id, other_seller)
    assert service.get(promocode.id, admin).id == promocode.id
    assert service.toggle_status(promocode.id, seller).is_active is False


def test_used_code_is_frozen_and_undeletable(db, service, make_promocode, admin, buyer):
    promocode = make_promocode(code="USED")
    promocode.record_usage(buyer.id, None, 1.0)
    db.commit()

    with pytest.raises(ValidationException) as exc:
        service.update(promocode.id, admin, {"discount_value": 50})
    assert exc.value.code == "PROMOCODE_IN_USE"

    updated = service.update(promocode.id, admin, {"description": "Still editable"})
    assert updated.description == "Still editable"

    with pytest.raises(ValidationException):
        service.delete(promocode.id, admin)


def test_seller_list_is_scoped(service, seller, other_seller, admin):
    service.create(seller, {"code": "AAA1", "discount_type": "fixed", "discount_value": 1, **_window()})
    service.create(other_seller, {"code": "BBB1", "discount_type": "fixed", "discount_value": 1, **_window()})

    assert [p.code for p in service.list(seller).items] == ["AAA1"]
    assert service.list(admin).total == 2


def test_validate_reports_remaining_uses(service, make_promocode, buyer):
    make_promocode(code="THREE", usage_limit=3, usage_limit_per_user=2)

    summary = service.validate("three", buyer)

    assert summary["code"] == "THREE"
    assert summary["remaining_uses"] == 3
    assert summary["user_remaining_uses"] == 2

    with pytest.raises(ValidationException):
        service.validate("MISSING", buyer)


def test_usage_stats(db, service, make_promocode, admin, buyer, seller):
    promocode = make_promocode(code="STATS", usage_limit=10, usage_limit_per_user=5)
    promocode.record_usage(buyer.id, None, 2.5)
    promocode.record_usage(buyer.id, None, 2.5)
    promocode.record_usage(seller.id, None, 1.0)
    db.commit()

    stats = service.usage_stats(promocode.id, admin)

    assert stats["total_usages"] == 3
    assert stats["total_discount_given"] == 6.0
    assert stats["unique_users"] == 2
    assert stats["remaining_uses"] == 7


def test_applicable_groups_codes(service, make_product, make_promocode, category):
    product = make_product()
    make_promocode(code="ALL", is_global=True, discount_value=5)
    make_promocode(code="THISONE", applicable_products=[product.id], discount_value=20)
    make_promocode(code="OTHER", applicable_products=["01ARZ3NDEKTSV4RRFFQ69G5FAV"])
    make_promocode(code="CAT", applicable_categories=[category.id], discount_value=15)
    make_promocode(code="HIDDEN", is_global=True, is_public=False)

    result = service.applicable([product.id])
    groups = result["applicable_promocodes"]

    assert [p.code for p in groups["global"]] == ["ALL"]
    assert [p.code for p in groups["product_specific"]] == ["THISONE"]
    assert [p.code for p in groups["category_specific"]] == ["CAT"]
    assert groups["industry_specific"] == []
    assert result["total_count"] == 3


def test_applicable_requires_published_products(service, make_product):
    draft = make_product(status="draft")

    with pytest.raises(ValidationException):
        service.applicable([" ", ""])
    with pytest.raises(NotFoundException):
        service.applicable([draft.id])
