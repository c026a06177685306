import json

from access_audit.client.storage import LAST_URL_KEY, LastUrlStore


def test_read_without_file_returns_none(tmp_path):
    assert LastUrlStore(tmp_path / "state.json").read() is None


def test_write_then_read(tmp_path):
    store = LastUrlStore(tmp_path / "nested" / "state.json")
    store.write("https://example.com/")

    assert store.read() == "https://example.com/"
    assert LastUrlStore(tmp_path / "nested" / "state.json").read() == "https://example.com/"


def test_write_keeps_other_keys(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

    LastUrlStore(path).write("https://example.com/")

    assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark", LAST_URL_KEY: "https://example.com/"}


def test_corrupt_file_reads_as_none_and_is_overwritten(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("not json", encoding="utf-8")
    store = LastUrlStore(path)

    assert store.read() is None
    store.write("https://example.com/")
    assert store.read() == "https://example.com/"
