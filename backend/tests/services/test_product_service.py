"""ProductService lifecycle and taxonomy counter bookkeeping."""

from datetime import timedelta

import pytest

from app.core.enums import ProductStatus
from app.core.exceptions import (
    BusinessRuleException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from app.core.timezone_utils import utc_now
from app.models.purchase import Purchase, PurchaseItem
from app.models.taxonomy import Category, Industry, Tool
from app.repositories.product_repository import ProductFilters
from app.services.product_service import ProductService, bump_version, slugify


@pytest.fixture
def service(db):
    return ProductService(db)


@pytest.fixture
def draft_data(category, industry, tool):
    return {
        "title": "Cold Email Prompt Pack",
        "short_description": "Prompts that book meetings",
        "type": "prompt",
        "category_id": category.id,
        "industry_id": industry.id,
        "tool_ids": [tool.id],
        "price": 19.0,
        "premium_content": {"promptText": "You are a sales expert"},
    }


def test_slugify_and_bump_version():
    assert slugify("  Cold Email: 50 Prompts! ") == "cold-email-50-prompts"
    assert slugify("!!!") == "product"
    assert bump_version("1.0.0") == "1.1.0"
    assert bump_version("2.4.9") == "2.5.0"
    assert bump_version("garbage") == "1.1.0"


def test_create_starts_as_draft_with_initial_version(service, seller, draft_data, tool):
    product = service.create(seller, draft_data)

    assert product.status == ProductStatus.DRAFT.value
    assert product.slug == "cold-email-prompt-pack"
    assert product.current_version == "1.0.0"
    assert product.versions[0]["changes"] == ["Initial release"]
    assert product.tool_ids == [tool.id]


def test_create_deduplicates_slugs(service, seller, draft_data):
    service.create(seller, draft_data)
    second = service.create(seller, dict(draft_data))

    assert second.slug == "cold-email-prompt-pack-2"


def test_create_rejects_inactive_category(db, service, seller, draft_data, category):
    category.is_active = False
    db.commit()

    with pytest.raises(ValidationException):
        service.create(seller, draft_data)


def test_publish_and_unpublish_move_counters_once(service, seller, draft_data, category, industry, tool):
    product = service.create(seller, draft_data)
    assert category.product_count == 0

    service.publish(product.id, seller)
    assert (category.product_count, industry.product_count, tool.product_count) == (1, 1, 1)

    with pytest.raises(ValidationException):
        service.publish(product.id, seller)
    assert category.product_count == 1

    service.unpublish(product.id, seller)
    assert (category.product_count, industry.product_count, tool.product_count) == (0, 0, 0)

    with pytest.raises(ValidationException):
        service.unpublish(product.id, seller)


def test_update_published_product_moves_counters(db, service, seller, draft_data, category, tool):
    product = service.create(seller, draft_data)
    service.publish(product.id, seller)

    new_category = Category(name="Sales")
    new_tool = Tool(name="Claude")
    db.add_all([new_category, new_tool])
    db.commit()

    service.update(
        product.id,
        seller,
        {"category_id": new_category.id, "tool_ids": [new_tool.id]},
    )

    assert category.product_count == 0
    assert new_category.product_count == 1
    assert tool.product_count == 0
    assert new_tool.product_count == 1


def test_update_with_version_notes_appends_version(service, seller, draft_data):
    product = service.create(seller, draft_data)

    updated = service.update(
        product.id, seller, {"title": "Warm Email Pack", "version_notes": ["Ten new prompts"]}
    )

    assert updated.slug == "warm-email-pack"
    assert updated.current_version == "1.1.0"
    assert [v["version"] for v in updated.versions] == ["1.0.0", "1.1.0"]


def test_only_owner_or_admin_can_manage(service, seller, other_seller, admin, draft_data):
    product = service.create(seller, draft_data)

    with pytest.raises(ForbiddenException):
        service.publish(product.id, other_seller)

    assert service.publish(product.id, admin).is_published


def test_get_hides_drafts_and_counts_views(service, seller, buyer, draft_data):
    product = service.create(seller, draft_data)

    with pytest.raises(NotFoundException):
        service.get(product.id, buyer)
    assert service.get(product.slug, seller).id == product.id

    service.publish(product.id, seller)
    service.get(product.slug, None)
    service.get(product.id, buyer)
    assert product.views == 2


def test_delete_refused_after_purchase(db, service, seller, buyer, draft_data):
    product = service.create(seller, draft_data)
    service.publish(product.id, seller)
    purchase = Purchase(user_id=buyer.id, total_amount=19.0, final_amount=19.0)
    purchase.items = [PurchaseItem(product_id=product.id, seller_id=seller.id, price=19.0)]
    db.add(purchase)
    db.commit()

    with pytest.raises(ValidationException) as exc:
        service.delete(product.id, seller)
    assert exc.value.code == "HAS_PURCHASES"


def test_delete_published_product_releases_counters(service, seller, draft_data, category):
    product = service.create(seller, draft_data)
    service.publish(product.id, seller)

    service.delete(product.id, seller)

    assert category.product_count == 0
    with pytest.raises(NotFoundException):
        service.get(product.id, seller)


def test_list_only_returns_published(service, make_product):
    make_product(title="Live Pack", price=10)
    make_product(title="Hidden Pack", status=ProductStatus.DRAFT.value)

    page = service.list(ProductFilters(status=None))
    assert [p.title for p in page.items] == ["Live Pack"]


def test_search_folds_non_ascii_case(service, make_product):
    make_product(title="Ärzte Prompt Pack")
    make_product(title="Plain Pack")

    page = service.list(ProductFilters(search="ÄRZTE"))
    assert [p.title for p in page.items] == ["Ärzte Prompt Pack"]


# ------------------------------------------------------------------ moderation


REVIEWABLE = dict(
    full_description="Fifty prompts with worked examples",
    thumbnail="https://cdn.example.com/pack.png",
    setup_time="5 minutes",
)


def test_submit_for_review_lists_missing_fields(service, seller, make_product):
    product = make_product(status=ProductStatus.DRAFT.value)

    with pytest.raises(BusinessRuleException) as exc:
        service.submit_for_review(product.id, seller)
    assert exc.value.code == "MISSING_FIELDS"
    assert exc.value.details == {"missing": ["fullDescription", "thumbnail", "setupTime"]}
    assert product.status == ProductStatus.DRAFT.value


def test_submit_for_review_queues_complete_draft(service, seller, make_product):
    product = make_product(status=ProductStatus.DRAFT.value, **REVIEWABLE)

    submitted = service.submit_for_review(product.id, seller, "Ready for a look")

    assert submitted.status == ProductStatus.PENDING_REVIEW.value
    assert submitted.submitted_at is not None
    assert submitted.review_message == "Ready for a look"


def test_submit_for_review_refuses_published(service, seller, make_product):
    product = make_product(**REVIEWABLE)

    with pytest.raises(ValidationException) as exc:
        service.submit_for_review(product.id, seller)
    assert exc.value.code == "INVALID_STATUS_TRANSITION"


def test_admin_rejects_pending_product_and_owner_resubmits(service, seller, admin, make_product):
    product = make_product(status=ProductStatus.PENDING_REVIEW.value, **REVIEWABLE)

    rejected = service.update_status(product.id, admin, ProductStatus.REJECTED.value, "Add examples")
    assert rejected.status == ProductStatus.REJECTED.value
    assert rejected.rejection_reason == "Add examples"

    resubmitted = service.submit_for_review(product.id, seller)
    assert resubmitted.status == ProductStatus.PENDING_REVIEW.value
    assert resubmitted.rejection_reason is None


def test_only_admins_reject_and_only_pending_products(service, seller, admin, make_product):
    pending = make_product(title="Pending Pack", status=ProductStatus.PENDING_REVIEW.value)
    draft = make_product(title="Draft Pack", status=ProductStatus.DRAFT.value)

    with pytest.raises(ForbiddenException):
        service.update_status(pending.id, seller, ProductStatus.REJECTED.value, "No")
    with pytest.raises(ValidationException):
        service.update_status(draft.id, admin, ProductStatus.REJECTED.value, "No")
    with pytest.raises(ValidationException) as exc:
        service.update_status(pending.id, admin, ProductStatus.REJECTED.value)
    assert exc.value.code == "REASON_REQUIRED"


def test_pending_review_is_only_reachable_by_submitting(service, admin, make_product):
    product = make_product(status=ProductStatus.DRAFT.value)

    with pytest.raises(ValidationException):
        service.update_status(product.id, admin, ProductStatus.PENDING_REVIEW.value)


def test_owner_publishes_only_after_verification(service, seller, admin, make_product, category):
    product = make_product(status=ProductStatus.DRAFT.value)

    with pytest.raises(ValidationException) as exc:
        service.update_status(product.id, seller, ProductStatus.PUBLISHED.value)
    assert exc.value.code == "NOT_VERIFIED"

    service.verify(product.id, is_verified=True, is_tested=True)
    published = service.update_status(product.id, seller, ProductStatus.PUBLISHED.value)

    assert published.status == ProductStatus.PUBLISHED.value
    assert published.published_at is not None
    assert category.product_count == 1


def test_verified_product_stays_out_of_draft_for_owner(service, seller, admin, make_product, category):
    product = make_product(status=ProductStatus.DRAFT.value, is_verified=True, is_tested=True)
    service.update_status(product.id, seller, ProductStatus.PUBLISHED.value)

    with pytest.raises(ValidationException):
        service.update_status(product.id, seller, ProductStatus.DRAFT.value)

    archived = service.update_status(product.id, admin, ProductStatus.ARCHIVED.value)
    assert archived.status == ProductStatus.ARCHIVED.value
    assert category.product_count == 0


def test_admin_list_includes_every_status(service, make_product):
    make_product(title="Live Pack")
    make_product(title="Queued Pack", status=ProductStatus.PENDING_REVIEW.value)

    everything = service.admin_list()
    queue = service.admin_list(status=ProductStatus.PENDING_REVIEW.value)

    assert everything.total == 2
    assert [p.title for p in queue.items] == ["Queued Pack"]


# ------------------------------------------------------------------- discovery


def test_featured_pins_hand_picked_then_scores(service, make_product):
    strong = make_product(title="Strong Pack", is_verified=True, sales=10, average_rating=4.5)
    weak = make_product(title="Weak Pack", is_verified=True, sales=1)
    pinned = make_product(title="Pinned Pack", is_featured=True)
    make_product(title="Unvetted Pack", sales=50)
    make_product(title="Draft Pack", status=ProductStatus.DRAFT.value, is_verified=True)

    assert [p.id for p in service.featured()] == [pinned.id, strong.id, weak.id]
    assert [p.id for p in service.featured(1)] == [pinned.id]


def test_trending_ignores_products_untouched_in_window(service, make_product):
    busy = make_product(title="Busy Pack", sales=5)
    quiet = make_product(title="Quiet Pack", sales=1)
    make_product(title="Stale Pack", sales=100, updated_at=utc_now() - timedelta(days=30))

    assert [p.id for p in service.trending(days=7)] == [busy.id, quiet.id]


def test_high_rated_needs_enough_reviews(service, make_product):
    loved = make_product(title="Loved Pack", average_rating=4.6, total_reviews=5)
    make_product(title="New Pack", average_rating=5.0, total_reviews=2)
    make_product(title="Okay Pack", average_rating=3.9, total_reviews=10)

    assert [p.id for p in service.high_rated()] == [loved.id]


def test_recently_added_only_verified_in_window(service, make_product):
    fresh = make_product(title="Fresh Pack", is_verified=True)
    make_product(title="Unverified Pack")
    make_product(title="Old Pack", is_verified=True, created_at=utc_now() - timedelta(days=60))

    assert [p.id for p in service.recently_added()] == [fresh.id]


def test_related_shares_category_industry_or_type(db, service, make_product):
    other_category = Category(name="Sales")
    other_industry = Industry(name="Healthcare")
    db.add_all([other_category, other_industry])
    db.commit()

    base = make_product(title="Base Pack")
    popular = make_product(title="Popular Pack", sales=9)
    quiet = make_product(title="Quiet Pack", sales=1)
    make_product(
        title="Unrelated Pack",
        type="agent",
        category_id=other_category.id,
        industry_id=other_industry.id,
    )
    make_product(title="Hidden Pack", status=ProductStatus.DRAFT.value)

    assert [p.id for p in service.related(base.slug)] == [popular.id, quiet.id]


def test_related_hides_unpublished_product(service, make_product):
    draft = make_product(status=ProductStatus.DRAFT.value)

    with pytest.raises(NotFoundException):
        service.related(draft.id)


def test_discovery_returns_all_sections(service, make_product):
    product = make_product(is_verified=True)

    sections = service.discovery()

    assert set(sections) == {"featured", "trending", "high_rated", "recently_added"}
    assert [p.id for p in sections["recently_added"]] == [product.id]
