"""Tests for fetcher.py."""

import httpx
import pytest

from errors import (
    ParseError,
    TooManyRedirects,
    UpstreamHttpError,
    UpstreamTimeout,
    UpstreamTransportError,
)
from fetcher import MAX_REDIRECTS, fetch_json, fetch_text

URL = "https://example.com/data.csv"


class TestFetchText:
    """Tests for fetch_text()."""

    @pytest.mark.asyncio
    async def test_fetch_text_success(self, httpx_mock, client):
        """Returns the response body as text."""
        httpx_mock.add_response(url=URL, text="exercise,label\nsquat,Squat\n")

        result = await fetch_text(client, URL)

        assert result == "exercise,label\nsquat,Squat\n"

    @pytest.mark.asyncio
    async def test_fetch_text_decodes_utf8(self, httpx_mock, client):
        """Body is decoded as UTF-8 and a leading BOM is dropped."""
        httpx_mock.add_response(url=URL, content="\ufefflabel\nSprünge\n".encode("utf-8"))

        result = await fetch_text(client, URL)

        assert result == "label\nSprünge\n"

    @pytest.mark.asyncio
    async def test_follows_redirects(self, httpx_mock, client):
        """A 3xx with a Location header is followed."""
        httpx_mock.add_response(
            url=URL,
            status_code=302,
            headers={"Location": "https://cdn.example.com/data.csv"},
        )
        httpx_mock.add_response(url="https://cdn.example.com/data.csv", text="a,b\n")

        result = await fetch_text(client, URL)

        assert result == "a,b\n"

    @pytest.mark.asyncio
    async def test_redirect_loop_is_bounded(self, httpx_mock, client):
        """Raises TooManyRedirects instead of following a loop forever."""
        httpx_mock.add_response(
            url=URL,
            status_code=302,
            headers={"Location": URL},
            is_reusable=True,
        )

        with pytest.raises(TooManyRedirects):
            await fetch_text(client, URL)

        assert len(httpx_mock.get_requests()) == MAX_REDIRECTS + 1

    @pytest.mark.asyncio
    async def test_http_error_404(self, httpx_mock, client):
        """Raises UpstreamHttpError carrying the status code."""
        httpx_mock.add_response(url=URL, status_code=404)

        with pytest.raises(UpstreamHttpError) as exc_info:
            await fetch_text(client, URL)

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_http_error_500(self, httpx_mock, client):
        """Raises UpstreamHttpError on server errors."""
        httpx_mock.add_response(url=URL, status_code=500)

        with pytest.raises(UpstreamHttpError) as exc_info:
            await fetch_text(client, URL)

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_timeout(self, httpx_mock, client):
        """Raises UpstreamTimeout when no response arrives in time."""
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"), url=URL)

        with pytest.raises(UpstreamTimeout):
            await fetch_text(client, URL, timeout=0.5)

    @pytest.mark.asyncio
    async def test_transport_error(self, httpx_mock, client):
        """Raises UpstreamTransportError on connection failures."""
        httpx_mock.add_exception(httpx.ConnectError("connection refused"), url=URL)

        with pytest.raises(UpstreamTransportError) as exc_info:
            await fetch_text(client, URL)

        assert exc_info.value.url == URL

    @pytest.mark.asyncio
    async def test_malformed_url(self, client):
        """A URL httpx cannot parse raises UpstreamTransportError."""
        bad_url = "http://data.example.com:notaport/x.csv"

        with pytest.raises(UpstreamTransportError) as exc_info:
            await fetch_text(client, bad_url)

        assert exc_info.value.url == bad_url


class TestFetchJson:
    """Tests for fetch_json()."""

    @pytest.mark.asyncio
    async def test_fetch_json_success(self, httpx_mock, client):
        httpx_mock.add_response(url="https://example.com/api?x=1", json={"files": []})

        result = await fetch_json(client, "https://example.com/api", params={"x": "1"})

        assert result == {"files": []}

    @pytest.mark.asyncio
    async def test_invalid_json_raises_parse_error(self, httpx_mock, client):
        httpx_mock.add_response(url="https://example.com/api", text="<html>")

        with pytest.raises(ParseError):
            await fetch_json(client, "https://example.com/api")
