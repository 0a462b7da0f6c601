import json
import stat

import pytest

from rri_client.storage import Environment, EnvironmentStore, EnvironmentStoreError


def test_save_and_load_roundtrip(tmp_path):
    store = EnvironmentStore(tmp_path / "envs")
    env = Environment(address="rri.denic.de:51131", user="DENIC-1000011-RRI", password="s3cret")
    store.save("prod", env)

    assert store.names() == ["prod"]
    assert store.exists("prod")
    assert store.load("prod") == env
    assert EnvironmentStore(tmp_path / "envs").load("prod").password == "s3cret"


def test_password_is_encrypted_at_rest(tmp_path):
    store = EnvironmentStore(tmp_path)
    store.save("prod", Environment(address="host:700", user="u", password="s3cret"))

    raw = (tmp_path / "prod.json").read_text(encoding="utf-8")
    data = json.loads(raw)
    assert "s3cret" not in raw
    assert data["address"] == "host:700"
    assert data["pass"]
    assert stat.S_IMODE((tmp_path / ".key").stat().st_mode) == 0o600


def test_environment_without_password(tmp_path):
    store = EnvironmentStore(tmp_path)
    store.save("anon", Environment(address="host:700"))
    env = store.load("anon")
    assert env.password == ""
    assert not env.has_credentials()
    assert not (tmp_path / ".key").exists()


def test_load_credentials(tmp_path):
    env = Environment(address="host:700", user="u", password="p")
    assert env.load_credentials() == ("host:700", "u", "p")
    assert env.has_credentials()


def test_title(tmp_path):
    store = EnvironmentStore(tmp_path)
    store.save("prod", Environment(address="host:700", user="u", password="p"))
    store.save("test", Environment(address="test:700"))
    (tmp_path / "broken.json").write_text("{", encoding="utf-8")

    assert store.title("prod") == "prod (u@host:700)"
    assert store.title("test") == "test (test:700)"
    assert store.title("broken") == "broken"


def test_missing_environment(tmp_path):
    with pytest.raises(EnvironmentStoreError):
        EnvironmentStore(tmp_path).load("nope")


def test_malformed_environment_file(tmp_path):
    (tmp_path / "bad.json").write_text(json.dumps({"address": 700}), encoding="utf-8")
    with pytest.raises(EnvironmentStoreError) as excinfo:
        EnvironmentStore(tmp_path).load("bad")
    assert "malformed" in str(excinfo.value)


def test_wrong_key_cannot_decrypt(tmp_path):
    store = EnvironmentStore(tmp_path)
    store.save("prod", Environment(address="host:700", user="u", password="p"))
    (tmp_path / ".key").unlink()
    with pytest.raises(EnvironmentStoreError):
        EnvironmentStore(tmp_path).load("prod")


@pytest.mark.parametrize("name", ["", ".key", "../etc", "a/b"])
def test_invalid_names(tmp_path, name):
    with pytest.raises(EnvironmentStoreError):
        EnvironmentStore(tmp_path).save(name, Environment(address="host:700"))


def test_delete(tmp_path):
    store = EnvironmentStore(tmp_path)
    store.save("prod", Environment(address="host:700"))
    store.delete("prod")
    assert store.names() == []
    with pytest.raises(EnvironmentStoreError):
        store.delete("prod")
