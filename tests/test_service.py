"""
HTTP service tests using FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from influence_graph.service.app import create_app
from influence_graph.settings import settings


@pytest.fixture
def client(wiki, make_builder):
    wiki.add_artist("Alpha", influences=["Gamma"], influenced=["Beta"])
    wiki.add_artist("Beta")
    wiki.add_artist("Gamma")
    return TestClient(create_app(make_builder()))


class TestGraphEndpoint:
    def test_graph(self, client):
        r = client.get("/v1/graph", params={"slug": "Alpha", "depth": 1})

        assert r.status_code == 200
        body = r.json()
        assert {n["id"]: n["depth"] for n in body["nodes"]} == {"Alpha": 0, "Beta": 1, "Gamma": 1}
        assert {(l["source"], l["target"]) for l in body["links"]} == {("Alpha", "Beta"), ("Gamma", "Alpha")}
        assert {l["relation_kind"] for l in body["links"]} == {"influenced", "influenced_by"}
        assert body["truncated"] is False

    def test_missing_slug(self, client):
        r = client.get("/v1/graph")
        assert r.status_code == 400

    def test_unknown_root_is_empty(self, client):
        r = client.get("/v1/graph", params={"slug": "Nobody"})

        assert r.status_code == 200
        assert r.json() == {"nodes": [], "links": [], "truncated": False}

    def test_bad_depth_uses_default(self, client):
        r = client.get("/v1/graph", params={"slug": "Alpha", "depth": "deep"})
        assert r.status_code == 200

    def test_build_error_is_500(self, client, wiki):
        async def explode(title):
            raise RuntimeError("boom")

        wiki.fetch_page = explode
        r = client.get("/v1/graph", params={"slug": "Omega"})

        assert r.status_code == 500
        assert r.json() == {"detail": "internal server error"}


class TestArtistEndpoint:
    def test_known(self, client):
        r = client.get("/v1/artists/Alpha")

        assert r.status_code == 200
        assert r.json()["status"] == "validated"

    def test_unknown(self, client):
        assert client.get("/v1/artists/Nobody").status_code == 404


class TestAuth:
    def test_api_key_required_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "api_key", "sekrit")

        assert client.get("/v1/graph", params={"slug": "Alpha"}).status_code == 401
        ok = client.get("/v1/graph", params={"slug": "Alpha"}, headers={"X-API-Key": "sekrit"})
        assert ok.status_code == 200

    def test_health_is_open(self, client, monkeypatch):
        monkeypatch.setattr(settings, "api_key", "sekrit")
        assert client.get("/health").json()["ok"] is True

    def test_wrong_key_rejected_on_artist_lookup(self, client, monkeypatch):
        monkeypatch.setattr(settings, "api_key", "sekrit")

        assert client.get("/v1/artists/Alpha", headers={"X-API-Key": "nope"}).status_code == 401
        assert client.get("/v1/artists/Alpha", headers={"X-API-Key": "sekrit"}).status_code == 200

    def test_open_when_no_key_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "api_key", None)
        assert client.get("/v1/artists/Alpha").status_code == 200
