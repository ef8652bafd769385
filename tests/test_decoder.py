import json
import logging
from typing import Any, Dict, List

import pytest

from docseek.exceptions import ResponseDecodeError
from docseek.search.decoder import decode_error_body, decode_page
from fake_engine import make_source


def _envelope(total: Any, hits: List[Dict[str, Any]]) -> bytes:
    return json.dumps(
        {"took": 3, "hits": {"total": {"value": total, "relation": "eq"}, "hits": hits}}
    ).encode()


def _hit(source: Any, sort: Any) -> Dict[str, Any]:
    return {"_index": "users", "_id": "x", "_source": source, "sort": sort}


def test_decodes_documents_and_cursor() -> None:
    raw = _envelope(25, [_hit(make_source(i), [i]) for i in (0, 1, 2)])
    page = decode_page(raw)

    assert page.total == 25
    assert [d.id for d in page.documents] == [0, 1, 2]
    assert page.documents[1].username == "user 1"
    assert page.cursor == 2
    assert page.truncated is False
    assert (page.attempted, page.succeeded) == (3, 3)


def test_engine_order_is_kept() -> None:
    raw = _envelope(3, [_hit(make_source(i), [i]) for i in (5, 2, 9)])
    page = decode_page(raw)
    assert [d.id for d in page.documents] == [5, 2, 9]
    assert page.cursor == 9


def test_zero_total_is_empty_page_regardless_of_noise() -> None:
    raw = json.dumps(
        {
            "hits": {"total": {"value": 0}, "hits": "not-a-list"},
            "aggregations": {"whatever": [1, 2]},
        }
    )
    page = decode_page(raw)
    assert page.documents == []
    assert page.total == 0
    assert page.cursor is None
    assert page.truncated is False


@pytest.mark.parametrize(
    "body",
    [
        {"hits": {"hits": []}},
        {"hits": {"total": 5, "hits": []}},
        {"hits": {"total": {"relation": "eq"}, "hits": []}},
        {"hits": {"total": {"value": "5"}, "hits": []}},
        {"took": 1},
        [],
    ],
)
def test_missing_total_is_a_decode_error(body: Any) -> None:
    with pytest.raises(ResponseDecodeError):
        decode_page(json.dumps(body))


def test_invalid_json_is_a_decode_error() -> None:
    with pytest.raises(ResponseDecodeError):
        decode_page(b"<html>bad gateway</html>")


def test_non_list_hits_with_matches_is_a_decode_error() -> None:
    raw = json.dumps({"hits": {"total": {"value": 2}, "hits": None}})
    with pytest.raises(ResponseDecodeError):
        decode_page(raw)


def test_malformed_document_truncates_page(caplog: pytest.LogCaptureFixture) -> None:
    hits = [_hit(make_source(i), [i]) for i in range(5)]
    hits[2]["_source"] = {"ID": "not-a-number", "CreatedAt": "2024-01-01T00:00:00Z"}

    with caplog.at_level(logging.ERROR, logger="docseek.search.decoder"):
        page = decode_page(_envelope(40, hits))

    # third entry fails: the first two survive
    assert [d.id for d in page.documents] == [0, 1]
    assert page.total == 40
    assert page.truncated is True
    assert (page.attempted, page.succeeded) == (5, 2)
    assert any("partial page" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize(
    "override",
    [
        {"ID": "7"},
        {"ID": 7.0},
        {"ID": True},
        {"Username": 42},
        {"CreatedAt": 1700000000},
        {"CreatedAt": "2024-01-01"},
        {"CreatedAt": "2024-01-01T00:00:00"},
    ],
)
def test_source_values_are_not_coerced(override: Dict[str, Any]) -> None:
    source = {**make_source(7), **override}
    hits = [_hit(make_source(6), [6]), _hit(source, [7]), _hit(make_source(8), [8])]

    page = decode_page(_envelope(3, hits))

    assert [d.id for d in page.documents] == [6]
    assert page.truncated is True
    assert page.cursor == 8


def test_offset_timestamps_are_accepted() -> None:
    source = {**make_source(3), "CreatedAt": "2024-01-01T09:30:00.5+05:30"}
    page = decode_page(_envelope(1, [_hit(source, [3])]))

    assert page.truncated is False
    assert page.documents[0].created_at.utcoffset() is not None
    assert page.documents[0].created_at.microsecond == 500000


def test_cursor_is_last_hit_even_when_truncated() -> None:
    hits = [_hit(make_source(i), [i]) for i in range(10, 14)]
    hits[0]["_source"] = None
    page = decode_page(_envelope(4, hits))

    assert page.documents == []
    assert page.truncated is True
    assert page.cursor == 13


def test_missing_source_counts_as_document_failure() -> None:
    hits = [_hit(make_source(1), [1]), {"_id": "2", "sort": [2]}]
    page = decode_page(_envelope(2, hits))
    assert [d.id for d in page.documents] == [1]
    assert page.truncated is True


def test_zero_sort_key_is_reported() -> None:
    page = decode_page(_envelope(1, [_hit(make_source(0), [0])]))
    assert page.cursor == 0


def test_last_hit_without_sort_is_a_decode_error() -> None:
    hits = [_hit(make_source(1), [1]), {"_source": make_source(2)}]
    with pytest.raises(ResponseDecodeError):
        decode_page(_envelope(2, hits))


def test_offset_past_end_gives_empty_page_with_total() -> None:
    page = decode_page(_envelope(25, []))
    assert page.documents == []
    assert page.total == 25
    assert page.cursor is None
    assert page.is_empty


def test_decode_error_body_prefers_error_member() -> None:
    body = {"error": {"type": "index_not_found_exception"}, "status": 404}
    assert decode_error_body(json.dumps(body)) == {"type": "index_not_found_exception"}
    assert decode_error_body(b'"plain"') == "plain"
    with pytest.raises(ValueError):
        decode_error_body(b"not json")
