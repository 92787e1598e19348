import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from gyotaku.crawler import PageFetcher, WebsiteCrawler
from gyotaku.exceptions import FetchError, ResourceFetchError
from gyotaku.utils.constants import DEFAULT_USER_AGENT


async def index(request):
    body = (
        '<html><head><link rel="stylesheet" href="/static/site.css"></head>'
        f'<body><p>{request.headers.get("User-Agent")}</p><a href="/next">Next</a></body></html>'
    )
    return web.Response(text=body, content_type='text/html')


async def next_page(request):
    return web.Response(text='<html><body>Next</body></html>', content_type='text/html')


async def stylesheet(request):
    return web.Response(body=b'body { margin: 0 }', content_type='text/css')


async def broken(request):
    return web.Response(status=500, text='boom')


async def slow(request):
    await asyncio.sleep(2)
    return web.Response(text='late')


@pytest_asyncio.fixture
async def server():
    app = web.Application()
    app.router.add_get('/', index)
    app.router.add_get('/next', next_page)
    app.router.add_get('/static/site.css', stylesheet)
    app.router.add_get('/broken', broken)
    app.router.add_get('/slow', slow)
    async with TestServer(app) as test_server:
        yield test_server


@pytest.mark.asyncio
async def test_fetch_page_sends_user_agent(server):
    async with PageFetcher() as fetcher:
        body = await fetcher.fetch_page(str(server.make_url('/')))

    assert DEFAULT_USER_AGENT in body


@pytest.mark.asyncio
async def test_fetch_resource_returns_bytes(server):
    async with PageFetcher() as fetcher:
        body = await fetcher.fetch_resource(str(server.make_url('/static/site.css')))

    assert body == b'body { margin: 0 }'


@pytest.mark.asyncio
async def test_non_success_status_raises(server):
    async with PageFetcher() as fetcher:
        with pytest.raises(FetchError) as excinfo:
            await fetcher.fetch_page(str(server.make_url('/broken')))
        with pytest.raises(ResourceFetchError) as missing:
            await fetcher.fetch_resource(str(server.make_url('/missing.png')))

    assert excinfo.value.status == 500
    assert missing.value.status == 404


@pytest.mark.asyncio
async def test_timeout_raises_fetch_error(server):
    async with PageFetcher(timeout=0.2) as fetcher:
        with pytest.raises(FetchError, match='Timed out'):
            await fetcher.fetch_page(str(server.make_url('/slow')))


@pytest.mark.asyncio
async def test_connection_error_raises_fetch_error():
    async with PageFetcher(timeout=2) as fetcher:
        with pytest.raises(FetchError):
            await fetcher.fetch_page('http://127.0.0.1:9/')


@pytest.mark.asyncio
async def test_crawl_against_live_server(server, tmp_path):
    seed = str(server.make_url('/'))
    host = server.host

    result = await WebsiteCrawler(seed, str(tmp_path), max_depth=1, delay_ms=0).crawl()

    assert result.pages_crawled == 2
    assert result.resources_downloaded == 1
    assert (tmp_path / host / 'index.html').exists()
    assert (tmp_path / host / 'next.html').exists()
    assert (tmp_path / host / 'static' / 'site.css').read_bytes() == b'body { margin: 0 }'
    assert f'/{host}/static/site.css' in (tmp_path / host / 'index.html').read_text(encoding='utf-8')


LONG_HOST_URL = 'http://' + 'a' * 70 + '.com/x.png'


@pytest.mark.asyncio
async def test_unencodable_host_raises_fetch_error():
    async with PageFetcher(timeout=2) as fetcher:
        with pytest.raises(ResourceFetchError):
            await fetcher.fetch_resource(LONG_HOST_URL)


@pytest.mark.asyncio
async def test_bad_resource_host_does_not_abort_page(tmp_path):
    async def page(request):
        return web.Response(
            text=f'<html><body><img src="{LONG_HOST_URL}"><img src="/ok.png"></body></html>',
            content_type='text/html'
        )

    async def image(request):
        return web.Response(body=b'PNG', content_type='image/png')

    app = web.Application()
    app.router.add_get('/', page)
    app.router.add_get('/ok.png', image)

    async with TestServer(app) as test_server:
        result = await WebsiteCrawler(
            str(test_server.make_url('/')), str(tmp_path), max_depth=0, delay_ms=0
        ).crawl()
        host = test_server.host

    saved = (tmp_path / host / 'index.html').read_text(encoding='utf-8')
    assert LONG_HOST_URL in saved
    assert f'/{host}/ok.png' in saved
    assert result.resources_downloaded == 1
    assert [e['type'] for e in result.errors] == ['resource_error']
