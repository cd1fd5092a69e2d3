from __future__ import annotations

from journey_core.address import AddressBar
from journey_core.store import JsonFilePreferenceStore, MemoryPreferenceStore


def test_memory_store_round_trip():
    store = MemoryPreferenceStore({"a": "1"})
    assert store.get("a") == "1"
    assert store.get("b") is None
    store.set("b", "2")
    assert store.snapshot() == {"a": "1", "b": "2"}


def test_json_store_persists_per_client(tmp_path):
    alice = JsonFilePreferenceStore("alice", root=tmp_path)
    alice.set("preferred-language", "zh-TW")

    assert JsonFilePreferenceStore("alice", root=tmp_path).get("preferred-language") == "zh-TW"
    assert JsonFilePreferenceStore("bob", root=tmp_path).get("preferred-language") is None
    assert alice.path.parent == tmp_path / "prefs"


def test_json_store_sanitises_client_id(tmp_path):
    store = JsonFilePreferenceStore("../../etc/passwd", root=tmp_path)
    store.set("k", "v")
    assert store.path.parent == tmp_path / "prefs"
    assert store.get("k") == "v"


def test_json_store_corrupt_file_reads_as_empty(tmp_path):
    store = JsonFilePreferenceStore("carol", root=tmp_path)
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{broken", encoding="utf-8")
    assert store.get("preferred-language") is None
    store.set("preferred-language", "en")
    assert store.get("preferred-language") == "en"


def test_address_bar_query_updates():
    bar = AddressBar("https://example.com/journey?lang=en&results=abc#top")
    assert bar.get("lang") == "en"
    bar.set("lang", "zh-TW")
    bar.delete("results")
    bar.delete("missing")
    assert bar.url == "https://example.com/journey?lang=zh-TW#top"
    assert bar.document_lang is None
