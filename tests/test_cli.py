"""Tests for the Typer command-line interface."""

import asyncio
import threading

import pytest
from aiohttp import web
from typer.testing import CliRunner

import catch_cli.cli.app as app_module
from catch_cli import __version__
from catch_cli.cli.app import app
from catch_cli.models.record import Dialect
from catch_cli.storage.reader import find_record
from catch_cli.storage.writer import append_record

runner = CliRunner()

PAGE = b"<html><body>" + bytes(range(256)) + b"</body></html>"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config_file = tmp_path / "config" / "config.ini"
    monkeypatch.setattr(app_module, "CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def filled_store(tmp_path):
    store = tmp_path / "files.dlb"
    append_record(store, "hello.txt", b"hello", Dialect.STANDARD)
    append_record(store, "data.bin", bytes([0, 15, 255]), Dialect.QUANTUM)
    return store


@pytest.fixture
def page_url():
    """Serves PAGE from an aiohttp server running on its own thread."""

    async def _page(request):
        return web.Response(body=PAGE)

    web_app = web.Application()
    web_app.router.add_get("/page.html", _page)
    web_runner = web.AppRunner(web_app)

    loop = asyncio.new_event_loop()
    loop.run_until_complete(web_runner.setup())
    site = web.TCPSite(web_runner, "127.0.0.1", 0)
    loop.run_until_complete(site.start())
    port = web_runner.addresses[0][1]

    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{port}/page.html"

    asyncio.run_coroutine_threadsafe(web_runner.cleanup(), loop).result(timeout=10)
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=10)
    loop.close()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_extract(filled_store, tmp_path):
    out = tmp_path / "hello.out"
    result = runner.invoke(app, ["extract", str(filled_store), "hello.txt", "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_bytes() == b"hello"


def test_extract_missing_name_fails(filled_store, tmp_path):
    out = tmp_path / "nothing.out"
    result = runner.invoke(app, ["extract", str(filled_store), "nope", "-o", str(out)])
    assert result.exit_code == 1
    assert "RecordNotFoundError" in result.output
    assert not out.exists()


def test_list(filled_store):
    result = runner.invoke(app, ["list", str(filled_store)])
    assert result.exit_code == 0, result.output
    assert "hello.txt" in result.output
    assert "data.bin" in result.output


def test_show_octal(filled_store):
    result = runner.invoke(app, ["show", str(filled_store), "data.bin", "--radix", "oct"])
    assert result.exit_code == 0, result.output
    assert "0 17 377" in result.output


def test_show_unknown_radix(filled_store):
    result = runner.invoke(app, ["show", str(filled_store), "data.bin", "-r", "bin"])
    assert result.exit_code == 2


def test_init_writes_config(isolated_config):
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    assert isolated_config.is_file()
    assert "dialect = auto" in isolated_config.read_text(encoding="utf-8")


def test_show_config_without_file():
    result = runner.invoke(app, ["--show-config"])
    assert result.exit_code == 0, result.output
    assert "default_output" in result.output


def test_show_unreadable_store_is_a_store_error(tmp_path):
    store = tmp_path / "broken.dlb"
    store.write_bytes(b"---ENTRY---\nNAME:\xff\n---END---\n")
    result = runner.invoke(app, ["show", str(store), "x"])
    assert result.exit_code == 1
    assert "StoreIOError" in result.output


def test_fetch_writes_output(page_url, tmp_path):
    out = tmp_path / "page.html"
    result = runner.invoke(app, ["fetch", page_url, "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_bytes() == PAGE


@pytest.mark.parametrize(
    "store_name, extra_args, begin_marker",
    [
        ("pages.dlb", [], "---ENTRY---"),
        ("pages.dqb", [], "###ENTRY###"),
        ("pages.dqb", ["--dialect", "standard"], "---ENTRY---"),
        ("pages.dlb", ["--dialect", "quantum"], "###ENTRY###"),
    ],
)
def test_fetch_appends_to_store(
    page_url, tmp_path, store_name, extra_args, begin_marker
):
    out = tmp_path / "page.html"
    store = tmp_path / store_name
    result = runner.invoke(
        app, ["fetch", page_url, "-o", str(out), "-s", str(store), *extra_args]
    )
    assert result.exit_code == 0, result.output
    assert out.read_bytes() == PAGE
    assert store.read_text(encoding="utf-8").startswith(begin_marker + "\n")

    record = find_record(store, str(out))
    assert record.payload == PAGE
    assert record.size == len(PAGE)


def test_fetch_http_error_fails(page_url, tmp_path):
    out = tmp_path / "missing.html"
    result = runner.invoke(app, ["fetch", page_url + ".gone", "-o", str(out)])
    assert result.exit_code == 1
    assert "FetchError" in result.output
    assert not out.exists()
