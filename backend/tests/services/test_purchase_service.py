"""Cart totals, promocode application and checkout."""

import pytest

from app.core.enums import OrderStatus, PaymentStatus, ProductStatus
from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.services.purchase_service import PurchaseService


@pytest.fixture
def service(db):
    return PurchaseService(db)


def test_add_to_cart_updates_totals(service, buyer, make_product):
    first = make_product(title="Pack One", price=20)
    second = make_product(title="Pack Two", price=15.5)

    service.add_to_cart(buyer, first.id)
    cart = service.add_to_cart(buyer, second.id)

    assert cart.total_items == 2
    assert cart.total_amount == 35.5
    assert cart.final_amount == 35.5


def test_add_to_cart_rejections(service, buyer, seller, make_product):
    product = make_product()
    draft = make_product(title="Draft Pack", status=ProductStatus.DRAFT.value)

    with pytest.raises(NotFoundException):
        service.add_to_cart(buyer, "01ARZ3NDEKTSV4RRFFQ69G5FAV")
    with pytest.raises(ValidationException):
        service.add_to_cart(buyer, draft.id)
    with pytest.raises(ValidationException):
        service.add_to_cart(seller, product.id)

    service.add_to_cart(buyer, product.id)
    with pytest.raises(ValidationException):
        service.add_to_cart(buyer, product.id)


def test_get_cart_drops_unpublished_products(db, service, buyer, make_product):
    product = make_product(price=30)
    service.add_to_cart(buyer, product.id)

    product.status = ProductStatus.DRAFT.value
    db.commit()

    cart = service.get_cart(buyer)
    assert cart.total_items == 0
    assert cart.total_amount == 0


def test_remove_missing_item_is_not_found(service, buyer):
    with pytest.raises(NotFoundException):
        service.remove_from_cart(buyer, "01ARZ3NDEKTSV4RRFFQ69G5FAV")


def test_apply_promocode_discounts_cart(service, buyer, make_product, make_promocode):
    product = make_product(price=40)
    make_promocode(code="SAVE25", discount_value=25)
    service.add_to_cart(buyer, product.id)

    cart = service.apply_promocode(buyer, "save25")

    assert cart.promocode_code == "SAVE25"
    assert cart.promocode_discount_percentage == 25
    assert cart.promocode_discount_amount == 10.0
    assert cart.final_amount == 30.0

    cart = service.remove_promocode(buyer)
    assert cart.promocode_code is None
    assert cart.final_amount == 40.0


def test_apply_promocode_rejections(service, buyer, make_product, make_promocode):
    make_promocode(code="BIGSPEND", minimum_order_amount=100)
    make_promocode(code="ELSEWHERE", applicable_categories=["01ARZ3NDEKTSV4RRFFQ69G5FAV"])

    with pytest.raises(ValidationException):
        service.apply_promocode(buyer, "BIGSPEND")

    service.add_to_cart(buyer, make_product(price=10).id)

    with pytest.raises(ValidationException):
        service.apply_promocode(buyer, "NOPE")
    with pytest.raises(ValidationException):
        service.apply_promocode(buyer, "ELSEWHERE")
    with pytest.raises(ValidationException):
        service.apply_promocode(buyer, "BIGSPEND")


def test_promocode_dropped_when_cart_no_longer_qualifies(service, buyer, make_product, make_promocode):
    cheap = make_product(title="Cheap", price=5)
    pricey = make_product(title="Pricey", price=60)
    make_promocode(code="OVER50", discount_type="fixed", discount_value=10, minimum_order_amount=50)
    service.add_to_cart(buyer, cheap.id)
    service.add_to_cart(buyer, pricey.id)
    service.apply_promocode(buyer, "OVER50")

    cart = service.remove_from_cart(buyer, pricey.id)

    assert cart.promocode_code is None
    assert cart.final_amount == 5


def test_checkout_records_usage_and_clears_cart(db, service, buyer, make_product, make_promocode):
    product = make_product(price=50)
    promocode = make_promocode(code="TENOFF", discount_type="fixed", discount_value=10)
    service.add_to_cart(buyer, product.id)
    service.apply_promocode(buyer, "TENOFF")

    purchase = service.checkout(buyer, payment_reference="INV-42")

    assert purchase.total_amount == 50
    assert purchase.discount_amount == 10
    assert purchase.final_amount == 40
    assert purchase.payment_status == PaymentStatus.PENDING.value
    assert purchase.order_status == OrderStatus.PENDING.value
    assert purchase.payment_reference == "INV-42"
    assert promocode.current_usage_count == 1
    assert product.sales == 1
    assert service.get_cart(buyer).total_items == 0

    # access arrives only once payment completes
    with pytest.raises(ForbiddenException):
        service.product_access(buyer, product.id)

    service.complete_payment(purchase.id)
    access = service.product_access(buyer, product.id)
    assert access["premium_content"] == {"promptText": "You are a sales expert"}
    assert access["access_granted_at"] is not None

    with pytest.raises(ValidationException):
        service.complete_payment(purchase.id)
    with pytest.raises(ValidationException):
        service.add_to_cart(buyer, product.id)


def test_free_checkout_completes_immediately(service, buyer, make_product):
    product = make_product(price=0)
    service.add_to_cart(buyer, product.id)

    purchase = service.checkout(buyer)

    assert purchase.payment_status == PaymentStatus.COMPLETED.value
    assert purchase.order_status == OrderStatus.COMPLETED
    assert all(item.access_granted for item in purchase.items)


def test_checkout_empty_cart_fails(service, buyer):
    with pytest.raises(ValidationException):
        service.checkout(buyer)


def test_owner_and_admin_always_have_access(service, seller, admin, make_product):
    product = make_product()

    assert service.product_access(seller, product.id)["access_granted_at"] is None
    assert service.product_access(admin, product.id)["title"] == product.title


def test_refund_revokes_access(service, buyer, make_product):
    product = make_product(price=0)
    service.add_to_cart(buyer, product.id)
    purchase = service.checkout(buyer)

    with pytest.raises(ValidationException):
        service.refund(purchase.id, 5, "too much")

    refunded = service.refund(purchase.id, None, "Changed my mind")

    assert refunded.payment_status == PaymentStatus.REFUNDED.value
    assert refunded.order_status == OrderStatus.REFUNDED
    assert refunded.refund_amount == 0
    with pytest.raises(ForbiddenException):
        service.product_access(buyer, product.id)


def test_my_purchases_filters_by_type(service, buyer, make_product):
    prompt = make_product(title="Prompt", price=0, type="prompt")
    service.add_to_cart(buyer, prompt.id)
    service.checkout(buyer)

    assert service.my_purchases(buyer).total == 1
    assert service.my_purchases(buyer, product_type="agent").total == 0
