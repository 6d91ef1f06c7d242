import asyncio

import pytest

from cancellation import CancellationToken
from detail_fetcher import fetch_detail, parse_project_detail, parse_publication_detail
from errors import Cancelled, NetworkFailure, SchemaInvalid
from fakes import FakeClient, Hold, settle
from models import Partner, ProjectDetail, PublicationDetail

DETAIL_URL = "https://api.example.com/api/publications/detail/sdf-tracing.json"


def test_parse_publication_detail_full_record() -> None:
    detail = parse_publication_detail(
        {
            "title": "Fast SDF Ray Tracing",
            "content": ["We present a method.", "Benchmarks show 2x speedup."],
            "date": "2024-03-21",
            "publicationUrl": "https://arxiv.org/abs/2403.12345",
            "authors": ["J. Doe", "A. Smith"],
            "venue": "SIGGRAPH",
        }
    )

    assert detail == PublicationDetail(
        title="Fast SDF Ray Tracing",
        content=("We present a method.", "Benchmarks show 2x speedup."),
        date="2024-03-21",
        publication_url="https://arxiv.org/abs/2403.12345",
        authors=("J. Doe", "A. Smith"),
        venue="SIGGRAPH",
    )


def test_parse_publication_detail_degrades_wrong_types_to_zero_values() -> None:
    detail = parse_publication_detail(
        {"title": "Only Title", "content": 42, "date": None, "authors": "J. Doe", "venue": ["x"]}
    )

    assert detail is not None
    assert detail.content == ""
    assert detail.date == ""
    assert detail.authors == ()
    assert detail.venue == ""
    assert detail.publication_url == ""


def test_parse_publication_detail_drops_non_string_list_elements() -> None:
    detail = parse_publication_detail({"title": "T", "content": ["a", 1, "b"], "authors": ["x", None]})

    assert detail is not None
    assert detail.content == ("a", "b")
    assert detail.authors == ("x",)


@pytest.mark.parametrize("payload", [
    {"title": ""},
    {"content": "no title"},
    {"title": 12},
    ["not", "a", "record"],
    "string body",
    None,
])
def test_parse_detail_rejects_missing_title_or_non_record(payload: object) -> None:
    assert parse_publication_detail(payload) is None
    assert parse_project_detail(payload) is None


def test_parse_project_detail_coerces_partner() -> None:
    detail = parse_project_detail(
        {
            "title": "Neural Shape Reconstruction",
            "content": "Reconstructing shapes.",
            "date": "2024-06-12",
            "partner": {"name": "ACME Labs", "url": 7},
        }
    )

    assert detail == ProjectDetail(
        title="Neural Shape Reconstruction",
        content="Reconstructing shapes.",
        date="2024-06-12",
        partner=Partner(name="ACME Labs", url=""),
    )


def test_parse_project_detail_non_string_content_and_missing_partner() -> None:
    detail = parse_project_detail({"title": "P", "content": ["para"], "partner": "ACME"})

    assert detail is not None
    assert detail.content == ""
    assert detail.partner == Partner()


def test_fetch_detail_returns_parsed_detail() -> None:
    client = FakeClient()
    client.on("GET", DETAIL_URL, {"title": "Fast SDF Ray Tracing", "date": "2024-03-21"})

    detail = asyncio.run(fetch_detail(client, DETAIL_URL, parse_publication_detail, CancellationToken()))

    assert detail.title == "Fast SDF Ray Tracing"
    assert detail.date == "2024-03-21"


def test_fetch_detail_raises_schema_invalid() -> None:
    client = FakeClient()
    client.on("GET", DETAIL_URL, {"content": "untitled"})

    with pytest.raises(SchemaInvalid, match="Invalid detail schema"):
        asyncio.run(fetch_detail(client, DETAIL_URL, parse_publication_detail, CancellationToken()))


def test_fetch_detail_propagates_http_failure() -> None:
    client = FakeClient()
    client.on("GET", DETAIL_URL, NetworkFailure("HTTP 500", status=500))

    with pytest.raises(NetworkFailure) as excinfo:
        asyncio.run(fetch_detail(client, DETAIL_URL, parse_publication_detail, CancellationToken()))

    assert excinfo.value.status == 500
    assert str(excinfo.value) == "HTTP 500"


def test_fetch_detail_cancelled_mid_flight() -> None:
    async def scenario() -> None:
        client = FakeClient()
        client.on("GET", DETAIL_URL, Hold({"title": "Late"}))
        token = CancellationToken()
        task = asyncio.create_task(fetch_detail(client, DETAIL_URL, parse_publication_detail, token))
        await settle()
        token.cancel()
        with pytest.raises(Cancelled):
            await task

    asyncio.run(scenario())
