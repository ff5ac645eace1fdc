"""Tests for the HTTP transfer fetcher against a local aiohttp server."""

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from catch_cli.exceptions import FetchError
from catch_cli.net.fetcher import Fetcher

BODY = bytes(range(256)) * 64


async def _body(request):
    return web.Response(body=BODY)


async def _chunked(request):
    response = web.StreamResponse()
    response.enable_chunked_encoding()
    await response.prepare(request)
    await response.write(b"abc")
    await response.write(b"def")
    await response.write_eof()
    return response


async def _missing(request):
    raise web.HTTPNotFound()


def _make_app(**routes) -> web.Application:
    app = web.Application()
    for path, handler in routes.items():
        app.router.add_get(f"/{path}", handler)
    return app


@pytest.mark.asyncio
async def test_fetch_reads_whole_body(progress):
    async with TestServer(_make_app(body=_body)) as server:
        async with Fetcher(chunk_size=1024) as fetcher:
            result = await fetcher.fetch(str(server.make_url("/body")), progress)

    assert result.data == BODY
    assert result.total_length == len(BODY)
    assert result.stats.bytes_received == len(BODY)
    assert progress.total == len(BODY)
    assert progress.advanced == len(BODY)
    assert progress.finished_with == "done"


@pytest.mark.asyncio
async def test_fetch_without_content_length():
    async with TestServer(_make_app(chunked=_chunked)) as server:
        async with Fetcher() as fetcher:
            result = await fetcher.fetch(str(server.make_url("/chunked")))

    assert result.data == b"abcdef"
    assert result.total_length == 0


@pytest.mark.asyncio
async def test_http_error_raises_fetch_error():
    async with TestServer(_make_app(missing=_missing)) as server:
        async with Fetcher() as fetcher:
            with pytest.raises(FetchError, match="404"):
                await fetcher.fetch(str(server.make_url("/missing")))


@pytest.mark.asyncio
async def test_retries_when_configured(progress):
    calls = []

    async def flaky(request):
        calls.append(request)
        if len(calls) == 1:
            raise web.HTTPServiceUnavailable()
        return web.Response(body=b"ok")

    async with TestServer(_make_app(flaky=flaky)) as server:
        async with Fetcher(max_attempts=2, base_delay=0) as fetcher:
            result = await fetcher.fetch(str(server.make_url("/flaky")), progress)

    assert result.data == b"ok"
    assert len(calls) == 2
    assert progress.resets == 1


@pytest.mark.asyncio
async def test_no_retry_by_default():
    calls = []

    async def failing(request):
        calls.append(request)
        raise web.HTTPInternalServerError()

    async with TestServer(_make_app(failing=failing)) as server:
        async with Fetcher() as fetcher:
            with pytest.raises(FetchError):
                await fetcher.fetch(str(server.make_url("/failing")))

    assert len(calls) == 1
