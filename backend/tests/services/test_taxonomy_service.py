"""TaxonomyService rules shared by categories, industries and tools."""

import pytest

from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.models.taxonomy import Category, Industry, Tool
from app.services.taxonomy_service import TaxonomyService


@pytest.fixture(params=[Category, Industry, Tool])
def service(request, db):
    return TaxonomyService(db, request.param)


def test_create_applies_default_icon(service):
    entity = service.create({"name": "  Marketing  "})

    assert entity.name == "Marketing"
    assert entity.icon == service.model.default_icon
    assert entity.is_active is True
    assert entity.product_count == 0


def test_duplicate_name_is_case_insensitive_conflict(service):
    service.create({"name": "Marketing"})

    with pytest.raises(ConflictException):
        service.create({"name": "marketing"})


def test_duplicate_check_folds_non_ascii_case(service):
    service.create({"name": "Ärzte"})

    with pytest.raises(ConflictException):
        service.create({"name": "ÄRZTE"})
    with pytest.raises(ConflictException):
        service.create({"name": " ärzte "})


def test_update_to_non_ascii_case_variant_conflicts(service):
    service.create({"name": "Straße"})
    other = service.create({"name": "Logistik"})

    with pytest.raises(ConflictException):
        service.update(other.id, {"name": "STRASSE"})


def test_search_matches_non_ascii_case_variants(service):
    service.create({"name": "Ärzte"})
    service.create({"name": "Marketing"})

    result = service.list(search="ärz")

    assert [entity.name for entity in result.items] == ["Ärzte"]


def test_update_duplicate_check_excludes_self(service):
    first = service.create({"name": "Marketing"})
    second = service.create({"name": "Sales"})

    renamed = service.update(first.id, {"name": "MARKETING"})
    assert renamed.name == "MARKETING"

    with pytest.raises(ConflictException):
        service.update(second.id, {"name": "marketing"})


def test_delete_refused_while_products_reference_row(service):
    entity = service.create({"name": "Marketing"})
    service.increment_product_count([entity.id])

    with pytest.raises(ValidationException) as exc:
        service.delete(entity.id)
    assert exc.value.code == "HAS_PRODUCTS"


def test_delete_is_soft_and_hides_row(service):
    entity = service.create({"name": "Marketing"})

    service.delete(entity.id)

    assert entity.is_deleted is True
    assert entity.is_active is False
    assert entity.deleted_at is not None
    assert service.list_active() == []
    assert service.list().total == 0
    with pytest.raises(NotFoundException):
        service.get(entity.id)


def test_soft_deleted_name_stays_reserved_until_restore(service):
    original = service.create({"name": "Marketing"})
    service.delete(original.id)

    with pytest.raises(ConflictException):
        # the unique index still holds the soft-deleted name
        service.create({"name": "Marketing"})

    restored = service.restore(original.id)
    assert restored.is_deleted is False
    assert restored.is_active is True


def test_toggle_twice_restores_original_state(service):
    entity = service.create({"name": "Marketing"})

    assert service.toggle_status(entity.id).is_active is False
    assert service.toggle_status(entity.id).is_active is True


def test_require_active_rejects_inactive_reference(service):
    entity = service.create({"name": "Marketing", "is_active": False})

    with pytest.raises(ValidationException) as exc:
        service.require_active([entity.id])
    assert exc.value.code == "INVALID_REFERENCE"


def test_decrement_clamps_at_zero(service):
    entity = service.create({"name": "Marketing"})

    service.decrement_product_count([entity.id])

    assert entity.product_count == 0


def test_analytics_overview(service):
    service.create({"name": "Marketing"})
    inactive = service.create({"name": "Sales", "is_active": False})
    gone = service.create({"name": "Legacy"})
    service.delete(gone.id)

    result = service.analytics()

    assert result["overview"] == {"total": 3, "active": 1, "inactive": 1, "deleted": 1}
    assert inactive in result["recent"]
    assert gone not in result["top_by_products"]
