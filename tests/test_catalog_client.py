"""
Catalog Client Tests
====================

Outcome classification against a mocked transport, and the
ledger-before-result contract.
"""

import asyncio

import httpx
import pytest

from barcode_agent.catalog import classify_response
from barcode_agent.models import (
    EmptyBody,
    HttpError,
    NetworkError,
    NotFound,
    OutcomeKind,
    Success,
)

from conftest import COCA_COLA_BODY, json_response


def lookup(client, barcode):
    return asyncio.run(client.lookup(barcode))


class TestClassification:
    """Every simulated response maps to exactly one outcome variant."""

    def test_success_body(self, catalog_factory, ledger, product_store):
        client = catalog_factory(lambda request: json_response(COCA_COLA_BODY))

        outcome = lookup(client, "5000112637922")

        assert outcome == Success(name="Coca-Cola", brand="Coca-Cola", quantity="330ml")
        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.display_text == "Coca-Cola • Coca-Cola • 330ml"

    def test_legacy_integer_status(self, catalog_factory):
        body = {"status": 1, "product": {"product_name": "Nutella"}}
        client = catalog_factory(lambda request: json_response(body))

        outcome = lookup(client, "3017620422003")

        assert outcome == Success(name="Nutella", brand="", quantity="")

    def test_error_status_is_not_found(self, catalog_factory):
        body = {"status": "error", "status_verbose": "product not found"}
        client = catalog_factory(lambda request: json_response(body))

        assert isinstance(lookup(client, "123"), NotFound)

    def test_legacy_zero_status_is_not_found(self, catalog_factory):
        client = catalog_factory(lambda request: json_response({"status": 0}))
        assert isinstance(lookup(client, "123"), NotFound)

    def test_http_404(self, catalog_factory):
        client = catalog_factory(lambda request: httpx.Response(404, content=b"nope"))

        outcome = lookup(client, "0000000000000")

        assert outcome == HttpError(code=404)
        assert outcome.display_text == "Error 404"

    def test_empty_body(self, catalog_factory):
        client = catalog_factory(lambda request: httpx.Response(200, content=b""))

        outcome = lookup(client, "123")

        assert isinstance(outcome, EmptyBody)
        assert outcome.display_text == "Empty response"

    def test_connection_reset(self, catalog_factory):
        def handler(request):
            raise httpx.ConnectError("Connection reset by peer", request=request)

        client = catalog_factory(handler)

        outcome = lookup(client, "123")

        assert isinstance(outcome, NetworkError)
        assert "Connection reset" in outcome.message
        assert outcome.display_text == "Network error"

    def test_timeout_is_network_error(self, catalog_factory):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        assert isinstance(lookup(catalog_factory(handler), "123"), NetworkError)

    def test_malformed_body_is_network_error(self, catalog_factory):
        client = catalog_factory(lambda request: httpx.Response(200, content=b"<html>oops"))
        assert isinstance(lookup(client, "123"), NetworkError)

    def test_non_object_json_is_network_error(self, catalog_factory):
        client = catalog_factory(lambda request: json_response([1, 2, 3]))
        assert isinstance(lookup(client, "123"), NetworkError)

    def test_undecodable_compressed_body_is_network_error(self, catalog_factory, ledger):
        def handler(request):
            return httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all"
            )

        outcome = lookup(catalog_factory(handler), "5000112637922")

        assert isinstance(outcome, NetworkError)
        entries = ledger.entries()
        assert len(entries) == 1
        assert entries[0].api_response["barcode"] == "5000112637922"
        assert entries[0].api_response["error"].startswith("Network error: ")

    def test_redirect_loop_is_network_error(self, ledger, product_store):
        from barcode_agent.catalog import CatalogClient

        def handler(request):
            return httpx.Response(302, headers={"Location": str(request.url)})

        http = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            follow_redirects=True,
            max_redirects=3,
        )
        client = CatalogClient(ledger, product_store, http_client=http)

        outcome = lookup(client, "123")

        assert isinstance(outcome, NetworkError)
        assert len(ledger.entries()) == 1


class TestClassifyResponse:
    """Direct tests for the pure classifier."""

    def test_null_fields_default_to_empty(self):
        body = '{"status": "success", "product": {"product_name": null, "brands": "Acme"}}'
        outcome, payload = classify_response("1", 200, body)

        assert outcome == Success(name="", brand="Acme", quantity="")
        assert payload["product"]["brands"] == "Acme"

    def test_missing_product_is_nameless_success(self):
        outcome, _ = classify_response("1", 200, '{"status": "success"}')
        assert outcome == Success()
        assert outcome.display_text == "Product found (no name)"

    def test_blank_fields_filtered_from_display(self):
        outcome, _ = classify_response(
            "1", 200,
            '{"status": 1, "product": {"product_name": "Water", "brands": "  ", "quantity": "1L"}}',
        )
        assert outcome.display_text == "Water • 1L"

    def test_boolean_status_is_not_found(self):
        outcome, _ = classify_response("1", 200, '{"status": true}')
        assert isinstance(outcome, NotFound)

    @pytest.mark.parametrize("code", [301, 400, 429, 500, 503])
    def test_non_2xx_codes(self, code):
        outcome, payload = classify_response("42", code, "")
        assert outcome == HttpError(code=code)
        assert payload == {"error": f"HTTP {code}", "barcode": "42"}


class TestRecording:
    """Every attempt is ledgered before the outcome is returned."""

    def test_request_url(self, catalog_factory, coca_cola_handler):
        client = catalog_factory(coca_cola_handler)
        lookup(client, "5000112637922")

        assert coca_cola_handler.calls == [
            "https://world.openfoodfacts.org/api/v2/product/5000112637922.json"
        ]

    def test_success_writes_ledger_and_product(self, catalog_factory, ledger, product_store):
        client = catalog_factory(lambda request: json_response(COCA_COLA_BODY))

        lookup(client, "5000112637922")

        entries = ledger.entries()
        assert len(entries) == 1
        assert entries[0].barcode == "5000112637922"
        assert entries[0].api_response == COCA_COLA_BODY

        records = product_store.records()
        assert len(records) == 1
        assert records[0].name == "Coca-Cola"
        assert records[0].quantity == "330ml"

    def test_http_error_synthesizes_ledger_body(self, catalog_factory, ledger, product_store):
        client = catalog_factory(lambda request: httpx.Response(404))

        lookup(client, "0000000000000")

        entries = ledger.entries()
        assert len(entries) == 1
        assert entries[0].api_response == {"error": "HTTP 404", "barcode": "0000000000000"}
        assert product_store.records() == []

    def test_empty_body_synthesizes_ledger_body(self, catalog_factory, ledger):
        client = catalog_factory(lambda request: httpx.Response(200, content=b""))
        lookup(client, "123")
        assert ledger.entries()[0].api_response == {"error": "Empty response", "barcode": "123"}

    def test_network_error_synthesizes_ledger_body(self, catalog_factory, ledger):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        lookup(catalog_factory(handler), "123")

        body = ledger.entries()[0].api_response
        assert body["barcode"] == "123"
        assert body["error"].startswith("Network error: ")

    def test_not_found_ledgers_raw_document(self, catalog_factory, ledger, product_store):
        body = {"status": "error", "code": "123"}
        lookup(catalog_factory(lambda request: json_response(body)), "123")

        assert ledger.entries()[0].api_response == body
        assert product_store.records() == []

    def test_mixed_sequence_is_ledgered_in_call_order(self, catalog_factory, ledger, product_store):
        def handler(request):
            barcode = request.url.path.rsplit("/", 1)[-1].removesuffix(".json")
            if barcode == "1":
                return json_response(COCA_COLA_BODY)
            if barcode == "2":
                return httpx.Response(404)
            if barcode == "3":
                return httpx.Response(200, content=b"")
            if barcode == "4":
                raise httpx.ConnectError("Connection reset by peer", request=request)
            if barcode == "5":
                return json_response({"status": "error"})
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"garbage")

        client = catalog_factory(handler)
        barcodes = ["1", "2", "3", "4", "5", "6"]

        async def scan_all():
            return [await client.lookup(b) for b in barcodes]

        outcomes = asyncio.run(scan_all())

        assert [o.kind for o in outcomes] == [
            OutcomeKind.SUCCESS,
            OutcomeKind.HTTP_ERROR,
            OutcomeKind.EMPTY_BODY,
            OutcomeKind.NETWORK_ERROR,
            OutcomeKind.NOT_FOUND,
            OutcomeKind.NETWORK_ERROR,
        ]

        entries = ledger.entries()
        assert [e.barcode for e in entries] == barcodes
        assert entries[0].api_response == COCA_COLA_BODY
        assert entries[1].api_response == {"error": "HTTP 404", "barcode": "2"}
        assert entries[2].api_response == {"error": "Empty response", "barcode": "3"}
        assert entries[3].api_response["error"].startswith("Network error: ")
        assert entries[4].api_response == {"status": "error"}
        assert entries[5].api_response["error"].startswith("Network error: ")

        stamps = [e.timestamp for e in entries]
        assert stamps == sorted(stamps)

        assert [r.barcode for r in product_store.records()] == ["1"]

    def test_ledger_failure_does_not_change_outcome(self, tmp_path, product_store):
        from barcode_agent.catalog import CatalogClient
        from barcode_agent.storage import ResponseLedger

        broken_path = tmp_path / "ledger_is_a_directory"
        broken_path.mkdir()
        broken_ledger = ResponseLedger(broken_path)
        http = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: json_response(COCA_COLA_BODY))
        )
        client = CatalogClient(broken_ledger, product_store, http_client=http)

        outcome = lookup(client, "5000112637922")

        assert isinstance(outcome, Success)
        assert broken_ledger.failures == 1
        assert len(product_store.records()) == 1
