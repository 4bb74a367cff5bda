import pytest
from fastapi.testclient import TestClient

from sku_api.catalog.memory import MemoryCatalog, MemoryProductHandle
from sku_api.main_app import app


class RecordingHandle(MemoryProductHandle):
    """Memory handle that remembers which setters were called."""

    def __init__(self, store, record, calls):
        super().__init__(store, record)
        self._calls = calls

    def __getattribute__(self, name):
        attr = super().__getattribute__(name)
        if name.startswith("set_") or name == "save":
            self_calls = super().__getattribute__("_calls")
            self_calls.append(name)
        return attr


class RecordingCatalog(MemoryCatalog):
    def __init__(self, *a, **kw):
        super().__init__(*a, **kw)
        self.calls = []

    async def load_product(self, product_id):
        await super().load_product(product_id)  # raises for unknown ids
        return RecordingHandle(self, self.products[product_id], self.calls)


@pytest.fixture
def catalog():
    cat = RecordingCatalog(tags={7: "sale"})
    cat.add_product("A1", id=101, regular_price="10.00", stock_quantity=1,
                    image="https://shop.example/a1.jpg",
                    gallery=["https://shop.example/a1-g1.jpg"])
    cat.add_product("B2", id=102, regular_price="20.00", sale_price="18.00",
                    date_on_sale_from="2024-01-01T00:00:00", date_on_sale_to="2024-02-01T00:00:00")
    return cat


@pytest.fixture
def client(catalog):
    app.state.catalog = catalog
    try:
        yield TestClient(app)
    finally:
        app.state.catalog = None
