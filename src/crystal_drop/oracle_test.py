import textwrap

import pytest
import requests

from crystal_drop.oracle import (
    PluginLoadError,
    PluginSignatureError,
    fetch_building,
    http_oracle,
    load_oracle_fn,
    threshold_oracle,
)


def write_plugin(tmp_path, body: str) -> str:
    path = tmp_path / "plugin.py"
    path.write_text(textwrap.dedent(body))
    return str(path)


class TestThresholdOracle:

    def test_threshold(self):
        breaks = threshold_oracle(3)
        assert [breaks(floor) for floor in range(6)] == [False, False, False, True, True, True]


class TestLoadOracleFn:
    """Test suite for loading user defined oracles"""

    def test_loads_breaks(self, tmp_path):
        path = write_plugin(tmp_path, """
            def breaks(floor):
                return floor >= 12
        """)
        breaks = load_oracle_fn(path)
        assert not breaks(11)
        assert breaks(12)

    def test_missing_function(self, tmp_path):
        path = write_plugin(tmp_path, """
            def something_else(floor):
                return True
        """)
        with pytest.raises(PluginLoadError, match="breaks"):
            load_oracle_fn(path)

    def test_wrong_signature(self, tmp_path):
        path = write_plugin(tmp_path, """
            def breaks(floor, extra):
                return True
        """)
        with pytest.raises(PluginSignatureError):
            load_oracle_fn(path)

    def test_keyword_only_rejected(self, tmp_path):
        path = write_plugin(tmp_path, """
            def breaks(*, floor):
                return True
        """)
        with pytest.raises(PluginSignatureError):
            load_oracle_fn(path)


class FakeResponse:

    def __init__(self, status_code: int, payload: dict):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}")


class TestHttpOracle:
    """Test suite for the demo API oracle with requests patched out"""

    def test_fetch_building(self, monkeypatch):
        calls = []

        def fake_get(url, timeout):
            calls.append(url)
            return FakeResponse(200, {"floors": 42})

        monkeypatch.setattr(requests, "get", fake_get)
        assert fetch_building("http://demo/api") == 42
        assert calls == ["http://demo/api/building"]

    def test_fetch_building_error(self, monkeypatch):
        monkeypatch.setattr(requests, "get", lambda url, timeout: FakeResponse(500, {}))
        with pytest.raises(ValueError, match="500"):
            fetch_building("http://demo/api")

    def test_drop(self, monkeypatch):
        posted = []

        def fake_post(self, url, json, timeout):
            posted.append((url, json))
            return FakeResponse(200, {"floor": json["floor"], "broke": json["floor"] >= 5})

        monkeypatch.setattr(requests.Session, "post", fake_post)
        breaks = http_oracle("http://demo/api")
        assert breaks(5) is True
        assert breaks(4) is False
        assert posted[0] == ("http://demo/api/drop", {"floor": 5})

    def test_drop_error_propagates(self, monkeypatch):
        monkeypatch.setattr(requests.Session, "post", lambda self, url, json, timeout: FakeResponse(400, {}))
        breaks = http_oracle("http://demo/api")
        with pytest.raises(requests.HTTPError):
            breaks(99)
