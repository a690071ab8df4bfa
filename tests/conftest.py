import os
import tempfile

import pytest

_import_dir = tempfile.mkdtemp(prefix="events-api-")
os.environ.setdefault("EVENTS_DB_FILE", os.path.join(_import_dir, "events.json"))
os.environ.setdefault("EVENTS_PROFILES_FILE", os.path.join(_import_dir, "profiles.json"))
os.environ.setdefault("EVENTS_TRAIL_FILE", os.path.join(_import_dir, "validation-output.json"))

import app as app_module  # noqa: E402
import store  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from store import JsonCollection  # noqa: E402


@pytest.fixture()
def profiles(tmp_path):
    return JsonCollection(str(tmp_path / "profiles.json"))


@pytest.fixture()
def events(tmp_path):
    return JsonCollection(str(tmp_path / "events.json"))


@pytest.fixture()
def client(monkeypatch, tmp_path, profiles, events):
    monkeypatch.setattr(app_module, "profiles", profiles)
    monkeypatch.setattr(app_module, "events", events)
    monkeypatch.setattr(store, "TRAIL_FILE", str(tmp_path / "validation-output.json"))
    return TestClient(app_module.app)
