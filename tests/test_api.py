"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from api.index import app, get_normalizer
from cut_lens.exceptions import StoreTimeoutError
from cut_lens.normalization import CutNormalizer


@pytest.fixture
def normalizer(seeded_store):
    return CutNormalizer(seeded_store)


@pytest.fixture
def client(normalizer):
    app.dependency_overrides[get_normalizer] = lambda: normalizer
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_suggest_returns_camel_case_candidates(client):
    response = client.get("/cuts/suggest/אנטרקוט", params={"limit": 3})

    assert response.status_code == 200
    body = response.json()
    assert body["query"] == "אנטרקוט"
    assert body["hasExactMatch"] is True
    assert body["suggestions"][0]["matchType"] == "variation"
    assert body["suggestions"][0]["cut"]["name"] == "אנטריקוט"
    assert len(body["suggestions"]) <= 3


def test_suggest_rejects_out_of_range_confidence(client):
    response = client.get("/cuts/suggest/אנטרקוט", params={"minConfidence": 2})

    assert response.status_code == 400


def test_suggest_degrades_on_store_failure(client, normalizer, mocker):
    mocker.patch.object(normalizer, "suggest", side_effect=StoreTimeoutError("slow"))

    response = client.get("/cuts/suggest/אנטרקוט")

    assert response.status_code == 200
    assert response.json()["suggestions"] == []
    assert response.json()["hasExactMatch"] is False


def test_normalize_attaches_with_actor(client):
    response = client.post("/cuts/normalize", json={"cutName": "חזה עוף"}, headers={"X-Actor-Id": "9"})

    assert response.status_code == 200
    body = response.json()
    assert body["outcome"] == "attached"
    assert body["isNewCut"] is False
    assert body["confidence"] == 1.0
    assert body["variation"]["verified"] is True
    assert body["variation"]["createdBy"] == 9


def test_normalize_force_create_with_english_category(client):
    response = client.post(
        "/cuts/normalize",
        json={"cutName": "כתף טלה", "forceCreate": True, "category": "lamb"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["isNewCut"] is True
    assert body["normalizedCut"]["category"] == "טלה"


def test_normalize_force_create_without_category_is_400(client):
    response = client.post("/cuts/normalize", json={"cutName": "פילה חדש", "forceCreate": True})

    assert response.status_code == 400
    assert "category" in response.json()["detail"]


def test_normalize_unknown_category_is_400(client):
    response = client.post("/cuts/normalize", json={"cutName": "x", "category": "goat"})

    assert response.status_code == 400


def test_normalize_timeout_is_503(client, normalizer, mocker):
    mocker.patch.object(normalizer, "normalize", side_effect=StoreTimeoutError("slow"))

    response = client.post("/cuts/normalize", json={"cutName": "חזה עוף"})

    assert response.status_code == 503


def test_normalize_unexpected_error_is_500(client, normalizer, mocker):
    mocker.patch.object(normalizer, "normalize", side_effect=RuntimeError("boom"))

    response = client.post("/cuts/normalize", json={"cutName": "חזה עוף"})

    assert response.status_code == 500
    assert response.json()["detail"] == "internal_error"


def test_analyze(client):
    response = client.post("/cuts/analyze", json={"cutName": "חזה עוף אורגני"})

    assert response.status_code == 200
    body = response.json()
    assert body["suggestedCategory"] == "עוף"
    assert body["suggestedCutType"] == "חזה"
    assert body["isPremium"] is True
    assert body["possibleMatches"][0]["normalizedCut"]["name"] == "חזה עוף"


def test_analyze_degrades_on_failure(client, normalizer, mocker):
    mocker.patch.object(normalizer, "analyze", side_effect=StoreTimeoutError("slow"))

    response = client.post("/cuts/analyze", json={"cutName": " חזה  עוף "})

    assert response.status_code == 200
    body = response.json()
    assert body["suggestedNormalizedName"] == "חזה עוף"
    assert body["possibleMatches"] == []


def test_bulk_import_dry_run(client):
    response = client.post(
        "/cuts/bulk-import",
        json={
            "cuts": [{"originalName": "אנטרקוט"}, {"originalName": "כתף טלה", "category": "טלה"}],
            "options": {"dryRun": True},
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["dryRun"] is True
    assert body["processed"] == 2
    assert [r["action"] for r in body["results"]] == ["skipped", "created"]

    lamb = client.get("/cuts", params={"category": "טלה"}).json()
    assert "כתף טלה" not in [cut["name"] for cut in lamb]


def test_stats(client):
    response = client.get("/cuts/stats")

    assert response.status_code == 200
    categories = {item["category"] for item in response.json()}
    assert {"בקר", "עוף", "טלה", "חזיר", "דגים"} <= categories
    assert all("normalizedCutsCount" in item for item in response.json())


def test_cut_crud(client):
    created = client.post("/cuts", json={"name": "סינטה", "category": "beef", "cutType": "steak"})
    assert created.status_code == 201
    cut_id = created.json()["id"]

    assert client.post("/cuts", json={"name": "סינטה", "category": "בקר"}).status_code == 409
    assert client.get(f"/cuts/{cut_id}").json()["cutType"] == "סטייק"
    assert client.get("/cuts/99999").status_code == 404

    updated = client.put(f"/cuts/{cut_id}", json={"description": "מהגב"})
    assert updated.status_code == 200
    assert updated.json()["description"] == "מהגב"
    assert client.put(f"/cuts/{cut_id}", json={}).status_code == 400

    assert client.delete(f"/cuts/{cut_id}").status_code == 204
    assert client.delete(f"/cuts/{cut_id}").status_code == 404


def test_update_cut_with_null_required_field_is_400(client, seeded_store):
    cut = seeded_store.find_cut("אנטריקוט")

    for body in [{"isPremium": None}, {"name": None}, {"cookingMethods": None}]:
        response = client.put(f"/cuts/{cut.id}", json=body)
        assert response.status_code == 400
        assert "cannot be null" in response.json()["detail"]

    assert client.get(f"/cuts/{cut.id}").json()["name"] == "אנטריקוט"


def test_delete_referenced_cut_is_409(client, seeded_store):
    cut = seeded_store.find_cut("אנטריקוט")

    response = client.delete(f"/cuts/{cut.id}")

    assert response.status_code == 409


def test_variation_management(client, seeded_store):
    source = seeded_store.find_cut("אנטריקוט")
    target = seeded_store.find_cut("פרימיום רוסט")
    variation = seeded_store.find_variation("ribeye")

    listed = client.get("/cuts/variations", params={"normalizedCutId": source.id}).json()
    assert variation.id in [item["id"] for item in listed]
    assert all(item["normalizedCutId"] == source.id for item in listed)

    unverified = client.put(f"/cuts/variations/{variation.id}", json={"verified": False})
    assert unverified.json()["verified"] is False
    assert client.get("/cuts/variations", params={"verified": False}).json()[0]["id"] == variation.id

    moved = client.put(f"/cuts/variations/{variation.id}", json={"normalizedCutId": target.id})
    assert moved.status_code == 200
    assert moved.json()["normalizedCutId"] == target.id
    assert moved.json()["verified"] is False

    assert client.put(f"/cuts/variations/{variation.id}", json={"normalizedCutId": 99999}).status_code == 404
    assert client.put(f"/cuts/variations/{variation.id}", json={}).status_code == 400
    assert client.put("/cuts/variations/99999", json={"verified": True}).status_code == 404

    assert client.delete(f"/cuts/variations/{variation.id}").status_code == 204
    assert client.delete(f"/cuts/variations/{variation.id}").status_code == 404
