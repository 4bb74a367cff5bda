import asyncio

import pytest

from sku_api.errors import CatalogError, CatalogUnavailableError
from sku_api.models.update_models import ItemFailure, ItemSuccess, Many, Single
from sku_api.sku_update.handler import BatchSkuUpdateHandler


def run(catalog, batch):
    return asyncio.run(BatchSkuUpdateHandler(catalog).handle(batch))


def test_mixed_batch_counts_and_order(catalog):
    res = run(catalog, Many([{"sku": "A1", "stock_quantity": 5}, {"sku": "ZZZ-missing"}]))
    assert res.updated == 1
    assert res.failed == 1
    assert isinstance(res.results[0], ItemSuccess)
    assert res.results[0].id == 101
    assert res.results[0].sku == "A1"
    assert res.results[0].message == "product updated successfully"
    assert res.results[1] == ItemFailure(sku="ZZZ-missing", error="product not found")
    assert catalog.get(101).stock_quantity == 5


def test_one_result_per_item(catalog):
    items = [{"sku": "A1"}, {}, {"sku": ""}, "not-an-object", {"sku": "nope"}, {"sku": "B2", "featured": 1}]
    res = run(catalog, Many(items))
    assert len(res.results) == len(items)
    assert res.updated + res.failed == len(res.results)
    assert res.updated == 2
    assert res.failed == 4


def test_missing_sku_ignores_other_fields(catalog):
    res = run(catalog, Single({"regular_price": "1.00", "new_sku": "X"}))
    assert res.results[0] == ItemFailure(sku=None, error="SKU not specified")
    assert catalog.calls == []


def test_single_and_one_element_batch_match(catalog):
    item = {"sku": "A1", "description": "hello"}
    one = run(catalog, Single(dict(item)))
    many = run(catalog, Many([dict(item)]))
    assert one.results[0] == many.results[0]


def test_rename_collision_applies_nothing(catalog):
    res = run(catalog, Single({"sku": "A1", "new_sku": "B2", "regular_price": "99", "tags": [{"name": "x"}]}))
    assert res.results[0] == ItemFailure(sku="A1", error="new SKU already exists on another product")
    assert catalog.calls == []
    assert catalog.get(101).regular_price == "10.00"
    assert 8 not in catalog.tags


def test_rename_to_free_sku(catalog):
    res = run(catalog, Single({"sku": "A1", "new_sku": "A1-NEW", "status": "draft"}))
    assert isinstance(res.results[0], ItemSuccess)
    assert res.results[0].sku == "A1"
    assert catalog.get(101).sku == "A1-NEW"
    assert catalog.get(101).status == "draft"


def test_rename_to_own_sku_is_noop(catalog):
    res = run(catalog, Single({"sku": "A1", "new_sku": "A1"}))
    assert isinstance(res.results[0], ItemSuccess)
    assert "set_sku" not in catalog.calls

def test_empty_new_sku_keeps_current_sku(catalog):
    res = run(catalog, Single({"sku": "A1", "new_sku": "", "status": "draft"}))
    assert isinstance(res.results[0], ItemSuccess)
    assert catalog.get(101).sku == "A1"
    assert catalog.get(101).status == "draft"
    assert "set_sku" not in catalog.calls



def test_on_sale_uses_regular_price_set_in_same_item(catalog):
    run(catalog, Single({"sku": "A1", "on_sale": True, "regular_price": "12.50"}))
    p = catalog.get(101)
    assert p.regular_price == "12.50"
    assert p.sale_price == "12.50"


def test_on_sale_prefers_explicit_sale_price(catalog):
    run(catalog, Single({"sku": "A1", "on_sale": True, "sale_price": "7.00"}))
    assert catalog.get(101).sale_price == "7.00"


def test_on_sale_false_clears_price_but_not_window(catalog):
    run(catalog, Single({"sku": "B2", "on_sale": False}))
    p = catalog.get(102)
    assert p.sale_price == ""
    assert p.date_on_sale_from == "2024-01-01T00:00:00"
    assert p.date_on_sale_to == "2024-02-01T00:00:00"

def test_on_sale_string_zero_is_false(catalog):
    run(catalog, Single({"sku": "B2", "on_sale": "0"}))
    assert catalog.get(102).sale_price == ""


def test_string_zero_flags_are_false(catalog):
    run(catalog, Single({"sku": "A1", "manage_stock": "0", "featured": "1"}))
    p = catalog.get(101)
    assert p.manage_stock is False
    assert p.featured is True



def test_empty_sale_price_clears(catalog):
    run(catalog, Single({"sku": "B2", "sale_price": ""}))
    assert catalog.get(102).sale_price == ""


def test_scalar_fields_and_bool_coercion(catalog):
    run(catalog, Single({
        "sku": "B2", "manage_stock": 1, "featured": 0, "short_description": "short",
        "date_created": "2023-05-01T10:00:00", "date_modified": "2023-05-02T10:00:00",
        "date_on_sale_to": "2024-03-01T00:00:00", "unknown_field": "ignored",
    }))
    p = catalog.get(102)
    assert p.manage_stock is True
    assert p.featured is False
    assert p.short_description == "short"
    assert p.date_created == "2023-05-01T10:00:00"
    assert p.date_modified == "2023-05-02T10:00:00"
    assert p.date_on_sale_to == "2024-03-01T00:00:00"


def test_null_fields_are_not_applied(catalog):
    run(catalog, Single({"sku": "A1", "regular_price": None, "categories": None}))
    assert catalog.calls == ["save"]


def test_images_without_src_leave_gallery(catalog):
    run(catalog, Single({"sku": "A1", "images": [{}, {"src": ""}, {"alt": "x"}]}))
    p = catalog.get(101)
    assert p.gallery == ["https://shop.example/a1-g1.jpg"]
    assert p.image == "https://shop.example/a1.jpg"


def test_images_replace_gallery_in_order(catalog):
    run(catalog, Single({"sku": "A1", "images": [
        {"src": " https://cdn.example/2.jpg "},
        {"name": "no src"},
        {"src": "https://cdn.example/1 b.jpg"},
        {"src": "javascript:alert(1)"},
    ]}))
    p = catalog.get(101)
    assert p.gallery == ["https://cdn.example/2.jpg", "https://cdn.example/1%20b.jpg"]
    assert p.image == "https://shop.example/a1.jpg"


def test_single_image_wins_and_clears_primary(catalog):
    run(catalog, Single({"sku": "A1", "image": "https://cdn.example/new.jpg",
                         "images": [{"src": "https://cdn.example/other.jpg"}]}))
    p = catalog.get(101)
    assert p.image is None
    assert p.gallery == ["https://cdn.example/new.jpg"]

def test_empty_image_does_not_block_images(catalog):
    run(catalog, Single({"sku": "A1", "image": "", "images": [{"src": "https://cdn.example/x.jpg"}]}))
    p = catalog.get(101)
    assert p.image == "https://shop.example/a1.jpg"
    assert p.gallery == ["https://cdn.example/x.jpg"]


def test_unusable_image_leaves_media(catalog):
    run(catalog, Single({"sku": "A1", "image": "javascript:alert(1)"}))
    p = catalog.get(101)
    assert p.image == "https://shop.example/a1.jpg"
    assert p.gallery == ["https://shop.example/a1-g1.jpg"]
    assert "set_image" not in catalog.calls
    assert "set_gallery" not in catalog.calls



def test_categories_replace_set(catalog):
    run(catalog, Single({"sku": "A1", "categories": [{"id": 3}, {"name": "no id"}, {"id": "5"}, {"id": "x"}]}))
    assert catalog.get(101).category_ids == [3, 5]


def test_empty_categories_untouched(catalog):
    catalog.get(101).category_ids = [9]
    run(catalog, Single({"sku": "A1", "categories": []}))
    assert catalog.get(101).category_ids == [9]


def test_tags_by_id_and_name(catalog):
    run(catalog, Single({"sku": "A1", "tags": [{"id": 4}, {"name": "sale"}, {"name": "New Tag"}, {}]}))
    assert catalog.get(101).tag_ids == [4, 7, 8]
    assert catalog.tags[8] == "New Tag"


def test_tag_creation_is_reused_across_items(catalog):
    run(catalog, Many([{"sku": "A1", "tags": [{"name": "fresh"}]},
                       {"sku": "B2", "tags": [{"name": "fresh"}]}]))
    assert catalog.get(101).tag_ids == catalog.get(102).tag_ids == [8]


def test_later_items_see_earlier_mutations(catalog):
    res = run(catalog, Many([{"sku": "A1", "regular_price": "30.00"},
                             {"sku": "A1", "on_sale": True}]))
    assert res.updated == 2
    assert catalog.get(101).sale_price == "30.00"


def test_item_after_rename_uses_new_sku(catalog):
    res = run(catalog, Many([{"sku": "A1", "new_sku": "A9"}, {"sku": "A1"}, {"sku": "A9", "status": "private"}]))
    assert [getattr(r, "error", None) for r in res.results] == [None, "product not found", None]
    assert catalog.get(101).status == "private"


def test_unready_catalog_raises(catalog):
    async def not_ready():
        raise CatalogUnavailableError("down")
    catalog.ensure_ready = not_ready
    with pytest.raises(CatalogUnavailableError):
        run(catalog, Single({"sku": "A1"}))


def test_save_failure_propagates(catalog):
    class Boom(Exception):
        pass

    async def broken_load(product_id):
        handle = await type(catalog).load_product(catalog, product_id)

        async def save():
            raise Boom("store down")
        handle.save = save
        return handle

    catalog.load_product = broken_load
    with pytest.raises(Boom):
        run(catalog, Many([{"sku": "A1"}]))


def test_load_of_unknown_id_raises(catalog):
    with pytest.raises(CatalogError):
        asyncio.run(catalog.load_product(999))


def test_handle_raw_parses_body(catalog):
    res = asyncio.run(BatchSkuUpdateHandler(catalog).handle_raw(b'[{"sku":"B2","status":"draft"}]'))
    assert res.updated == 1
    assert catalog.get(102).status == "draft"
