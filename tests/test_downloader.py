import os

import pytest

from gyotaku.crawler.context import CrawlContext
from gyotaku.crawler.downloader import ResourceArchiver
from gyotaku.crawler.extractor import ResourceExtractor

PAGE_URL = 'https://example.com/blog/post'


def make_context(tmp_path):
    return CrawlContext.for_seed('https://example.com/', str(tmp_path), max_depth=1, delay=0)


def references_for(html):
    extractor = ResourceExtractor()
    return extractor.extract(extractor.parse(html))


@pytest.mark.asyncio
async def test_archives_and_records_resource(tmp_path, make_fetcher):
    fetcher = make_fetcher({'https://example.com/img/logo.png': b'\x89PNG'})
    context = make_context(tmp_path)

    results = await ResourceArchiver(fetcher).archive(
        references_for('<img src="../img/logo.png">'), PAGE_URL, context
    )

    expected = os.path.join(str(tmp_path), 'example.com', 'img', 'logo.png')
    assert results[0].local_path == expected
    assert results[0].url == 'https://example.com/img/logo.png'
    with open(expected, 'rb') as f:
        assert f.read() == b'\x89PNG'
    assert context.downloaded_resources == {'https://example.com/img/logo.png'}


@pytest.mark.asyncio
async def test_already_downloaded_resource_is_not_fetched_again(tmp_path, make_fetcher):
    fetcher = make_fetcher({'https://example.com/app.js': 'alert(1)'})
    context = make_context(tmp_path)
    archiver = ResourceArchiver(fetcher)

    first = await archiver.archive(references_for('<script src="/app.js"></script>'), PAGE_URL, context)
    second = await archiver.archive(
        references_for('<script src="/app.js"></script><script src="../app.js"></script>'),
        PAGE_URL,
        context
    )

    assert fetcher.resources_fetched() == ['https://example.com/app.js']
    assert [r.local_path for r in second] == [first[0].local_path] * 2


@pytest.mark.asyncio
async def test_foreign_origin_resource_is_archived(tmp_path, make_fetcher):
    fetcher = make_fetcher({'https://cdn.other.com/a/b/style.css': 'body {}'})
    context = make_context(tmp_path)

    results = await ResourceArchiver(fetcher).archive(
        references_for('<link rel="stylesheet" href="https://cdn.other.com/a/b/style.css">'),
        PAGE_URL,
        context
    )

    assert results[0].local_path == os.path.join(
        str(tmp_path), 'cdn.other.com', 'a', 'b', 'style.css'
    )


@pytest.mark.asyncio
async def test_failed_download_leaves_reference_and_continues(tmp_path, make_fetcher):
    fetcher = make_fetcher({'https://example.com/ok.png': b'ok'})
    context = make_context(tmp_path)
    archiver = ResourceArchiver(fetcher)

    results = await archiver.archive(
        references_for('<img src="/missing.png"><img src="/ok.png">'), PAGE_URL, context
    )

    assert [r.archived for r in results] == [False, True]
    assert context.downloaded_resources == {'https://example.com/ok.png'}
    assert archiver.failed_resources == [{
        'url': 'https://example.com/missing.png',
        'error': 'HTTP 404 Not Found',
        'type': 'resource_error',
    }]


@pytest.mark.asyncio
async def test_inline_data_uri_is_left_alone(tmp_path, make_fetcher):
    fetcher = make_fetcher({})
    archiver = ResourceArchiver(fetcher)

    results = await archiver.archive(
        references_for('<img src="data:image/gif;base64,R0lGOD">'), PAGE_URL, make_context(tmp_path)
    )

    assert not results[0].archived
    assert fetcher.requests == []
    assert archiver.failed_resources == []


@pytest.mark.asyncio
async def test_write_failure_propagates(tmp_path, make_fetcher):
    fetcher = make_fetcher({'https://example.com/img/a.png': b'a'})
    context = make_context(tmp_path)
    # A file where the host directory should be
    (tmp_path / 'example.com').write_text('in the way')

    with pytest.raises(OSError):
        await ResourceArchiver(fetcher).archive(
            references_for('<img src="/img/a.png">'), PAGE_URL, context
        )
    assert context.downloaded_resources == set()
