import json
from datetime import datetime

import pytest

from g2g_seller.core.errors import SettingsError
from g2g_seller.models.tokens import AuthTokens
from g2g_seller.services.account_store import (
    account_images,
    is_receipt,
    list_account_folders,
    read_account_text,
    write_receipt,
)
from g2g_seller.services.champion_usage import ChampionUsageStore
from g2g_seller.services.settings_store import SettingsStore

TOKEN_ENV = ("G2G_USER_ID", "G2G_REFRESH_TOKEN", "G2G_LONG_LIVED_TOKEN", "G2G_ACTIVE_DEVICE_TOKEN")


@pytest.fixture
def clean_env(monkeypatch):
    for name in TOKEN_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ---- settings ----

def test_save_then_load_from_file(tmp_path, clean_env, tokens):
    store = SettingsStore(tmp_path / "settings.json")
    store.save_tokens(tokens)

    assert json.loads(store.path.read_text())["g2g"]["user_id"] == "1234567"
    assert store.load_tokens() == tokens
    assert store.has_tokens()


def test_environment_fallback(tmp_path, clean_env):
    for name, value in zip(TOKEN_ENV, ("42", "r", "l", "d")):
        clean_env.setenv(name, value)

    tokens = SettingsStore(tmp_path / "absent.json").load_tokens()

    assert tokens.user_id == "42"
    assert tokens.active_device_token == "d"


def test_file_wins_over_environment(tmp_path, clean_env, tokens):
    clean_env.setenv("G2G_USER_ID", "999")
    store = SettingsStore(tmp_path / "settings.json")
    store.save_tokens(tokens)
    assert store.load_tokens().user_id == "1234567"


def test_blank_field_is_reported(tmp_path, clean_env):
    (tmp_path / "settings.json").write_text(json.dumps({"g2g": {"user_id": "1", "refresh_token": "r"}}))

    with pytest.raises(SettingsError) as info:
        SettingsStore(tmp_path / "settings.json").load_tokens()

    assert info.value.problems == ["long_lived_token is empty", "active_device_token is empty"]


def test_no_source_at_all(tmp_path, clean_env):
    store = SettingsStore(tmp_path / "settings.json")
    assert not store.has_tokens()
    with pytest.raises(SettingsError):
        store.load_tokens()


def test_corrupt_settings_file(tmp_path, clean_env):
    (tmp_path / "settings.json").write_text("{not json")
    with pytest.raises(SettingsError):
        SettingsStore(tmp_path / "settings.json").load_tokens()


def test_save_refuses_incomplete_tokens(tmp_path):
    incomplete = AuthTokens(user_id="1", refresh_token=" ", long_lived_token="l", active_device_token="d")
    with pytest.raises(SettingsError):
        SettingsStore(tmp_path / "settings.json").save_tokens(incomplete)


# ---- account folders ----

@pytest.fixture
def accounts(tmp_path):
    one = tmp_path / "acc-01"
    one.mkdir()
    (one / "info.txt").write_text("")
    (one / "data.txt").write_text("Level - 30\n")
    (one / "purchase.txt").write_text("Login: a\nPassword: b\nEmail is new\n")
    (one / "shot.PNG").write_bytes(b"\x89PNG")
    (tmp_path / "acc-02").mkdir()
    (tmp_path / "notes.md").write_text("ignored")
    return tmp_path


def test_list_folders(accounts):
    assert [f.name for f in list_account_folders(accounts)] == ["acc-01", "acc-02"]


def test_list_missing_base(tmp_path):
    with pytest.raises(FileNotFoundError):
        list_account_folders(tmp_path / "nope")


def test_read_text_skips_template_and_receipts(accounts):
    folder = accounts / "acc-01"
    write_receipt(folder, "offer-1", when=datetime(2024, 5, 1, 12, 0, 0))

    text = read_account_text(folder)

    assert "Level - 30" in text
    assert "Login: a" in text
    assert "Offer ID" not in text


def test_empty_folder_text(accounts):
    with pytest.raises(ValueError):
        read_account_text(accounts / "acc-02")


def test_receipt_format(tmp_path):
    receipt = write_receipt(tmp_path, "offer-9", when=datetime(2024, 5, 1, 12, 30, 5))
    assert receipt.name == "offer-9.txt"
    assert receipt.read_text() == "Offer ID: offer-9\nListed at: 2024-05-01 12:30:05\nStatus: Live\n"
    assert is_receipt(receipt)


def test_images(accounts):
    assert [p.name for p in account_images(accounts / "acc-01")] == ["shot.PNG"]


# ---- champion usage ----

def test_usage_rotation(tmp_path):
    store = ChampionUsageStore(tmp_path / "usage.json")
    store.track(["Ahri", "Zed"])
    store.track(["Ahri"])

    assert dict(store.stats())["Ahri"] == 2
    assert store.sort_by_usage(["Ahri", "Zed", "Lux"]) == ["Lux", "Zed", "Ahri"]
    assert store.stats() == [("Zed", 1), ("Ahri", 2)]

    store.clear()
    assert store.stats() == []
