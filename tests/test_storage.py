"""
Storage Tests
=============

Response ledger, product store and file export.
"""

import json

import pytest

from barcode_agent.models import ProductRecord
from barcode_agent.storage import (
    EXPORTED_LEDGER_NAME,
    EXPORTED_PRODUCTS_NAME,
    NO_PRODUCTS_TEXT,
    NO_RESPONSES_TEXT,
    ExportError,
    LedgerCorruptError,
    ProductStore,
    ResponseLedger,
    export_files,
    read_file_contents,
)


class SteppingClock:
    """Millisecond clock that replays a fixed sequence of readings."""

    def __init__(self, *readings):
        self.readings = list(readings)

    def __call__(self):
        if len(self.readings) > 1:
            return self.readings.pop(0)
        return self.readings[0]


class TestResponseLedger:
    """Tests for the whole-document ledger."""

    def test_sequential_appends_keep_order(self, ledger):
        for i in range(5):
            result = ledger.append(ledger.new_entry(f"code-{i}", {"n": i}))
            assert result.ok

        entries = ledger.entries()
        assert [e.barcode for e in entries] == [f"code-{i}" for i in range(5)]
        assert [e.api_response for e in entries] == [{"n": i} for i in range(5)]

    def test_document_shape_is_pretty_printed(self, ledger):
        ledger.append(ledger.new_entry("123", {"status": 1}))

        text = ledger.path.read_text(encoding="utf-8")
        document = json.loads(text)

        assert list(document) == ["responses"]
        assert document["responses"][0]["barcode"] == "123"
        assert document["responses"][0]["api_response"] == {"status": 1}
        assert "\n  " in text

    def test_timestamps_never_decrease(self, tmp_path):
        clock = SteppingClock(5_000, 4_000, 6_000)
        ledger = ResponseLedger(tmp_path / "ledger.json", clock=clock)

        stamps = [ledger.new_entry("x", {}).timestamp for _ in range(3)]

        assert stamps == [5_000, 5_000, 6_000]

    def test_missing_file_reads_empty(self, ledger):
        assert ledger.entries() == []

    def test_corrupt_file_is_quarantined(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("{not json", encoding="utf-8")
        ledger = ResponseLedger(path, clock=lambda: 42)

        result = ledger.append(ledger.new_entry("123", {"status": 1}))

        assert result.ok
        assert (tmp_path / "ledger.json.corrupt-42").read_text(encoding="utf-8") == "{not json"
        assert [e.barcode for e in ledger.entries()] == ["123"]

    def test_entries_raises_on_corrupt_file(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text('{"something": "else"}', encoding="utf-8")

        with pytest.raises(LedgerCorruptError):
            ResponseLedger(path).entries()

    def test_write_failure_is_returned_not_raised(self, tmp_path):
        path = tmp_path / "is_a_directory"
        path.mkdir()
        ledger = ResponseLedger(path)

        result = ledger.append(ledger.new_entry("123", {}))

        assert not result.ok
        assert result.error
        assert ledger.failures == 1

    def test_no_temp_files_left_behind(self, ledger):
        ledger.append(ledger.new_entry("123", {}))
        leftovers = [p.name for p in ledger.path.parent.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []


class TestProductStore:
    """Tests for the JSON Lines product store."""

    def test_append_writes_one_line_per_record(self, product_store):
        product_store.append(ProductRecord(barcode="1", name="A", brand="B", quantity="1L"))
        product_store.append(ProductRecord(barcode="1", name="A", brand="B", quantity="1L"))

        lines = product_store.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0]) == {"barcode": "1", "name": "A", "brand": "B", "quantity": "1L"}

    def test_records_round_trip(self, product_store):
        record = ProductRecord(barcode="5000112637922", name="Coca-Cola", brand="Coca-Cola", quantity="330ml")
        product_store.append(record)
        assert product_store.records() == [record]

    def test_reads_legacy_concatenated_objects(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text(
            '{"barcode": "1", "name": "A", "brand": "", "quantity": ""}'
            '{"barcode": "2", "name": "B", "brand": "", "quantity": ""}',
            encoding="utf-8",
        )

        records = ProductStore(path).records()

        assert [r.barcode for r in records] == ["1", "2"]

    def test_missing_file_reads_empty(self, product_store):
        assert product_store.records() == []

    def test_write_failure_is_returned(self, tmp_path):
        path = tmp_path / "products_dir"
        path.mkdir()
        store = ProductStore(path)

        result = store.append(ProductRecord(barcode="1"))

        assert not result.ok
        assert store.failures == 1


class TestExport:
    """Tests for export_files and read_file_contents."""

    def test_exports_under_fixed_names(self, tmp_path, ledger, product_store):
        ledger.append(ledger.new_entry("123", {"status": 1}))
        product_store.append(ProductRecord(barcode="123", name="A"))
        out = tmp_path / "exports"

        exported = export_files(ledger.path, product_store.path, out)

        assert sorted(p.name for p in exported) == sorted([EXPORTED_LEDGER_NAME, EXPORTED_PRODUCTS_NAME])
        assert (out / EXPORTED_LEDGER_NAME).read_bytes() == ledger.path.read_bytes()
        assert (out / EXPORTED_PRODUCTS_NAME).read_bytes() == product_store.path.read_bytes()

    def test_export_overwrites_previous_copy(self, tmp_path, ledger, product_store):
        out = tmp_path / "exports"
        ledger.append(ledger.new_entry("1", {}))
        export_files(ledger.path, product_store.path, out)
        ledger.append(ledger.new_entry("2", {}))

        export_files(ledger.path, product_store.path, out)

        assert (out / EXPORTED_LEDGER_NAME).read_bytes() == ledger.path.read_bytes()

    def test_missing_sources_are_skipped(self, tmp_path, ledger, product_store):
        ledger.append(ledger.new_entry("1", {}))

        exported = export_files(ledger.path, product_store.path, tmp_path / "exports")

        assert [p.name for p in exported] == [EXPORTED_LEDGER_NAME]

    def test_unwritable_destination_raises(self, tmp_path, ledger, product_store):
        ledger.append(ledger.new_entry("1", {}))
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x", encoding="utf-8")

        with pytest.raises(ExportError):
            export_files(ledger.path, product_store.path, blocker)

    def test_read_file_contents_placeholders(self, ledger, product_store):
        contents = read_file_contents(ledger.path, product_store.path)
        assert contents == {"api_responses": NO_RESPONSES_TEXT, "products": NO_PRODUCTS_TEXT}

    def test_read_file_contents_raw_text(self, ledger, product_store):
        ledger.append(ledger.new_entry("1", {}))
        contents = read_file_contents(ledger.path, product_store.path)
        assert contents["api_responses"] == ledger.path.read_text(encoding="utf-8")
        assert contents["products"] == NO_PRODUCTS_TEXT
