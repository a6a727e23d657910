"""Tests for batched product persistence and the import commands."""

import io

import pytest
from fakeredis import FakeServer
from fakeredis import aioredis as fakeredis

from storefront.config import settings
from storefront.models.product import Product
from storefront.services.importer import cli
from storefront.services.importer.classifier import KeywordVehicleClassifier
from storefront.services.importer.mapper import iter_products
from storefront.services.importer.pipeline import (
    ImportReport,
    ProductImporter,
    seed_categories,
    slugify,
)
from storefront.services.importer.schemas import CATALOG_SCHEMA
from storefront.services.storage.document_store import DocumentStore


class RecordingSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


class FailingStore:
    """Store whose writes fail for one SKU."""

    def __init__(self, store, failing_sku):
        self._store = store
        self._failing_sku = failing_sku

    async def add(self, collection, data):
        if data.get("sku") == self._failing_sku:
            raise RuntimeError("quota exceeded")
        return await self._store.add(collection, data)


def _products(count):
    return [Product(title=f"Key {n}", sku=str(n), price="10.00") for n in range(1, count + 1)]


@pytest.mark.asyncio
async def test_import_counts_imported_skipped_and_errors(store):
    products = [
        Product(title="Good", sku="1"),
        Product(title="", sku="2"),
        Product(title="No SKU", sku=""),
        Product(title="Draft", sku="3", published=False),
        Product(title="Broken", sku="4"),
        Product(title="Also good", sku="5"),
    ]
    importer = ProductImporter(FailingStore(store, "4"), sleep=RecordingSleep())

    report = await importer.import_products(products)

    assert report == ImportReport(imported=2, skipped=3, errors=1)
    assert report.total == 6
    stored = await store.stream("products")
    assert sorted(doc["sku"] for _, doc in stored) == ["1", "5"]


@pytest.mark.asyncio
async def test_import_pauses_between_batches_only(store):
    sleep = RecordingSleep()
    importer = ProductImporter(store, batch_size=10, batch_delay=0.5, sleep=sleep)

    report = await importer.import_products(_products(25))

    assert report.imported == 25
    assert sleep.calls == [0.5, 0.5]


@pytest.mark.asyncio
async def test_single_batch_never_sleeps(store):
    sleep = RecordingSleep()
    importer = ProductImporter(store, batch_size=10, batch_delay=1.0, sleep=sleep)

    await importer.import_products(_products(10))
    await importer.import_products([])

    assert sleep.calls == []


@pytest.mark.asyncio
async def test_imported_document_uses_camel_case_fields(store):
    importer = ProductImporter(store, sleep=RecordingSleep())

    await importer.import_products([Product(title="Fob", sku="77", low_stock_amount=2)])

    [(_, document)] = await store.stream("products")
    assert document["lowStockAmount"] == 2
    assert document["discountInfo"] is None
    assert "low_stock_amount" not in document


@pytest.mark.asyncio
async def test_seed_categories_creates_each_kind_once(store):
    await store.add("products", {"brand": "Land Rover", "year": 2015, "keyType": "Smart"})
    await store.add("products", {"brand": "Land Rover", "year": 2016, "keyType": "Smart"})
    await store.add("products", {"brand": "", "year": None})
    await store.add(
        "categories", {"name": "2016", "slug": "2016", "type": "year", "isActive": True}
    )

    created = await seed_categories(store)

    assert created == {"brand": 1, "year": 1, "type": 1}
    categories = [doc for _, doc in await store.stream("categories")]
    brand = next(doc for doc in categories if doc["type"] == "brand")
    assert brand["slug"] == "land-rover"
    assert brand["sortOrder"] == 1
    assert brand["isActive"] is True

    assert await seed_categories(store) == {"brand": 0, "year": 0, "type": 0}


def test_slugify():
    assert slugify("  Mercedes Benz ") == "mercedes-benz"


@pytest.fixture()
def isolated_store(monkeypatch):
    """Route the CLI to a private fake Redis server."""
    server = FakeServer()
    stores = []

    def _create_store(client=None):
        store = DocumentStore(
            fakeredis.FakeRedis(server=server, decode_responses=True),
            settings.STORE_KEY_PREFIX,
        )
        stores.append(store)
        return store

    async def _close():
        return None

    monkeypatch.setattr(cli, "create_document_store", _create_store)
    monkeypatch.setattr(cli, "close_redis_client", _close)
    return stores


def test_cli_requires_csv_path(isolated_store, capsys):
    assert cli.import_products_main([]) == 1
    assert "Usage: import-products" in capsys.readouterr().out
    assert isolated_store == []


def test_cli_rejects_missing_file(isolated_store, tmp_path):
    assert cli.import_products_main([str(tmp_path / "nope.csv")]) == 1
    assert isolated_store == []


def test_cli_header_only_file_succeeds(isolated_store, tmp_path, capsys):
    csv_path = tmp_path / "empty.csv"
    csv_path.write_text("Name,SKU,Regular price\n", encoding="utf-8")

    assert cli.import_products_main([str(csv_path)]) == 0
    assert "Successfully imported: 0 products" in capsys.readouterr().out


def test_cli_imports_catalog_export(isolated_store, tmp_path, capsys):
    csv_path = tmp_path / "catalog.csv"
    csv_path.write_text(
        "\ufeffName,SKU,Regular price,In stock?,Categories\n"
        "Toyota Remote,1001,89.99,1,Car Remotes\n"
        ",1002,10.00,1,\n",
        encoding="utf-8",
    )

    assert cli.import_products_main([str(csv_path)]) == 0

    out = capsys.readouterr().out
    assert "Successfully imported: 1 products" in out
    assert "Skipped: 1 products" in out
    assert "Errors: 0 products" in out


def test_cli_woocommerce_skips_unpublished_rows(isolated_store, tmp_path, capsys):
    csv_path = tmp_path / "woo.csv"
    csv_path.write_text(
        "Published,Name,SKU,Regular price,Sale price\n"
        "1,2019 Honda Civic Remote,2001,120,99\n"
        "0,Hidden Draft,2002,50,\n",
        encoding="utf-8",
    )

    assert cli.import_woocommerce_main([str(csv_path)]) == 0

    out = capsys.readouterr().out
    assert "Successfully imported: 1 products" in out
    assert "Skipped: 1 products" in out


def _catalog_stream(*rows):
    return io.StringIO("Name,SKU,Stock\n" + "".join(f"{row}\n" for row in rows))


@pytest.mark.asyncio
async def test_oversized_stock_cell_does_not_abort_import(store):
    importer = ProductImporter(store, sleep=RecordingSleep())

    report = await importer.import_products(
        iter_products(_catalog_stream("First,1,3", "Bad,2,1e400", "Third,3,4"), CATALOG_SCHEMA)
    )

    assert report == ImportReport(imported=3, skipped=0, errors=0)
    stock = {doc["sku"]: doc["stock"] for _, doc in await store.stream("products")}
    assert stock == {"1": 3, "2": 0, "3": 4}


@pytest.mark.asyncio
async def test_row_that_fails_to_map_is_counted_and_run_continues(store):
    class BrokenForSecondRow(KeywordVehicleClassifier):
        def vehicle_types(self, categories):
            if "Broken" in categories:
                raise RuntimeError("unreadable categories")
            return super().vehicle_types(categories)

    stream = io.StringIO(
        "Name,SKU,Categories\n"
        "First,1,Car Keys\n"
        "Second,2,Broken\n"
        "Third,3,Truck Keys\n"
    )
    importer = ProductImporter(store, sleep=RecordingSleep())

    report = await importer.import_products(
        iter_products(stream, CATALOG_SCHEMA, BrokenForSecondRow())
    )

    assert report == ImportReport(imported=2, skipped=0, errors=1)
    stored = await store.stream("products")
    assert sorted(doc["sku"] for _, doc in stored) == ["1", "3"]


def test_cli_overflowing_cell_still_exits_cleanly(isolated_store, tmp_path, capsys):
    csv_path = tmp_path / "catalog.csv"
    csv_path.write_text(
        "Name,SKU,Stock,Low stock amount\n"
        "First,1,3,2\n"
        "Bad,2,inf,-1e999\n"
        "Third,3,4,1\n",
        encoding="utf-8",
    )

    assert cli.import_products_main([str(csv_path)]) == 0
    assert "Successfully imported: 3 products" in capsys.readouterr().out
