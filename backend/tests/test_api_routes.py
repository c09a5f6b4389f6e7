"""Tests for the HTTP API."""
import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def scenario_a():
    return [
        {"id": "a", "startTime": "0:10", "endTime": "0:12", "category": "false_start",
         "confidence": 0.8, "reason": "restart"},
        {"id": "b", "startTime": "0:14", "endTime": "0:16", "category": "pause",
         "confidence": 0.6, "reason": "ok"},
    ]


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["api"] == "/api"


class TestClusterRoutes:
    """Tests for cluster detection and winner selection."""

    def test_detect(self, client, scenario_a):
        response = client.post("/api/clusters/detect", json={"segments": scenario_a})

        assert response.status_code == 200
        data = response.json()
        clusters = {c["id"]: c for c in data["clusters"]}
        assert set(clusters) == {"cluster-consecutive-1", "cluster-retake-1"}

        retake = clusters["cluster-retake-1"]
        assert retake["name"] == "Opening Statement"
        assert retake["winner"]["startTime"] == "00:16.00"
        assert retake["winner"]["endTime"] == "00:31.00"
        assert retake["winner"]["isGap"] is True
        assert retake["confidence"] == pytest.approx(0.7)
        assert [a["id"] for a in retake["attempts"]] == ["a", "b"]

        assert all(s["selectedWinner"] == "gap" for s in data["selections"])

    def test_detect_empty(self, client):
        response = client.post("/api/clusters/detect", json={"segments": []})

        assert response.json() == {"clusters": [], "selections": []}

    def test_detect_requires_segments(self, client):
        response = client.post("/api/clusters/detect", json={})

        assert response.status_code == 422

    def test_select_attempt(self, client, scenario_a):
        response = client.post(
            "/api/clusters/cluster-retake-1/select",
            json={"segments": scenario_a, "winner": 0},
        )

        assert response.status_code == 200
        assert response.json() == {
            "clusterId": "cluster-retake-1",
            "selectedWinner": 0,
            "removedSegments": ["b"],
            "keptSegments": ["a"],
        }

    def test_select_gap(self, client, scenario_a):
        response = client.post(
            "/api/clusters/cluster-retake-1/select",
            json={"segments": scenario_a, "winner": "gap"},
        )

        assert response.json()["removedSegments"] == ["a", "b"]

    def test_select_unknown_cluster(self, client, scenario_a):
        response = client.post(
            "/api/clusters/cluster-retake-9/select",
            json={"segments": scenario_a, "winner": "gap"},
        )

        assert response.status_code == 404

    def test_select_index_out_of_range(self, client, scenario_a):
        response = client.post(
            "/api/clusters/cluster-retake-1/select",
            json={"segments": scenario_a, "winner": 5},
        )

        assert response.status_code == 400


class TestOverlapRoutes:
    """Tests for overlap endpoints."""

    def test_resolve(self, client):
        segments = [
            {"id": "A", "startTime": "0:00", "endTime": "0:10", "category": "tangent",
             "confidence": 0.9, "reason": "long ramble"},
            {"id": "B", "startTime": "0:05", "endTime": "0:07", "category": "filler_words",
             "confidence": 0.9, "reason": "um"},
        ]

        response = client.post("/api/segments/resolve", json={"segments": segments})

        data = response.json()
        assert [s["id"] for s in data["primary"]] == ["A"]
        assert data["secondary"][0]["segmentId"] == "B"
        assert data["secondary"][0]["coveredBy"]["type"] == "segment"

    def test_find_overlaps(self, client, scenario_a):
        segments = scenario_a + [
            {"id": "y", "startTime": "0:15", "endTime": "0:17", "category": "technical",
             "confidence": 0.9, "reason": "mic bump"},
        ]
        selection = {
            "clusterId": "cluster-retake-1",
            "selectedWinner": "gap",
            "removedSegments": ["a", "b"],
        }

        response = client.post(
            "/api/segments/overlaps",
            json={"segments": segments, "selections": [selection]},
        )

        assert response.status_code == 200
        data = response.json()
        hidden = {h["segmentId"]: h for h in data["hidden"]}
        assert data["visible"] == []
        assert hidden["y"]["coveredBy"]["id"] == "cluster-retake-1"
        assert hidden["y"]["coveredBy"]["timeRange"] == {"start": "00:14.00", "end": "00:16.00"}
        assert hidden["y"]["reason"] == 'Covered by cluster "Opening Statement" - ok'


class TestEditPlanRoute:
    """Tests for the edit planning endpoint."""

    def test_plan_defaults(self, client, scenario_a):
        response = client.post(
            "/api/edit/plan",
            json={"segments": scenario_a, "videoDuration": 60},
        )

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data["cuts"]] == ["a", "b"]
        assert data["summary"]["timeRemoved"] == pytest.approx(4.0)
        assert data["summary"]["finalDuration"] == pytest.approx(56.0)
        assert data["keepRanges"] == [
            {"start": "00:00.00", "end": "00:10.00"},
            {"start": "00:12.00", "end": "00:14.00"},
            {"start": "00:16.00", "end": "01:00.00"},
        ]

    def test_plan_with_selection(self, client, scenario_a):
        selection = {
            "clusterId": "cluster-retake-1",
            "selectedWinner": 0,
            "removedSegments": ["b"],
            "keptSegments": ["a"],
        }

        response = client.post(
            "/api/edit/plan",
            json={"segments": scenario_a, "selections": [selection]},
        )

        data = response.json()
        assert [c["id"] for c in data["cuts"]] == ["b"]
        assert [s["id"] for s in data["kept"]] == ["a"]
        assert data["summary"]["finalDuration"] is None

    def test_plan_with_filters(self, client, scenario_a):
        segments = scenario_a + [
            {"id": "lonely", "startTime": "8:20", "endTime": "8:32", "category": "pause",
             "confidence": 0.5, "reason": "long silence"},
        ]

        response = client.post(
            "/api/edit/plan",
            json={"segments": segments, "filters": {"minConfidence": 0.7}},
        )

        assert [c["id"] for c in response.json()["cuts"]] == ["a", "b"]

    def test_plan_rejects_bad_duration(self, client, scenario_a):
        response = client.post(
            "/api/edit/plan",
            json={"segments": scenario_a, "videoDuration": -5},
        )

        assert response.status_code == 422

    def test_plan_with_refinement(self, client, scenario_a):
        response = client.post(
            "/api/edit/plan",
            json={"segments": scenario_a, "videoDuration": 60, "refine": True},
        )

        data = response.json()
        assert data["cuts"][0]["startTime"] == "00:09.85"
        assert data["cuts"][1]["endTime"] == "00:16.15"
        assert data["validation"] == {"valid": True, "errors": [], "warnings": []}
        assert data["merged"] == {}
