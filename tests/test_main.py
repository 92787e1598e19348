import pytest

from gyotaku.main import main, parse_arguments, validate_url


def test_defaults():
    args = parse_arguments(['https://example.com'])

    assert args.url == 'https://example.com'
    assert args.output == './archive'
    assert args.depth == 1
    assert args.wait == 1000


def test_short_options():
    args = parse_arguments(['https://example.com', '-o', 'out', '-d', '0', '-w', '50', '-q'])

    assert (args.output, args.depth, args.wait, args.quiet) == ('out', 0, 50, True)


@pytest.mark.parametrize('flag', ['--depth', '--wait'])
def test_negative_values_rejected(flag):
    with pytest.raises(SystemExit):
        parse_arguments(['https://example.com', flag, '-1'])


def test_validate_url_adds_scheme():
    assert validate_url('example.com/docs') == 'https://example.com/docs'
    assert validate_url('http://example.com') == 'http://example.com'


@pytest.mark.asyncio
async def test_invalid_url_exits_with_error(tmp_path):
    assert await main(['https://[::1', '-o', str(tmp_path / 'out'), '-q']) == 1
    assert not (tmp_path / 'out').exists()
