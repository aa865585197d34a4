import pytest
from fastapi.testclient import TestClient

from chartsync.domain.models import parse_timestamp
from chartsync.web_api import configure_api, web_api


@pytest.fixture
def client():
    configure_api(latency=0)
    yield TestClient(web_api)
    configure_api(latency=0.2)


@pytest.mark.parametrize(
    "token,count", [("1h", 60), ("1d", 24), ("7d", 7), ("30d", 30), ("90d", 90), ("3m", 90), ("weird", 90)]
)
def test_metrics_cardinality(client, token, count):
    response = client.get("/api/metrics", params={"timeRange": token})
    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data) == count
    assert all(item["balance"] >= 40000 for item in data)


def test_metrics_default_range_is_quarter(client):
    response = client.get("/api/metrics")
    assert response.status_code == 200
    assert len(response.json()["data"]) == 90


def test_metrics_timestamps_increase(client):
    data = client.get("/api/metrics", params={"timeRange": "1d"}).json()["data"]
    stamps = [parse_timestamp(item["date"]) for item in data]
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == len(stamps)
    assert data[0]["date"].endswith("Z")


def test_metrics_traffic_profile(client):
    data = client.get("/api/metrics", params={"timeRange": "7d", "profile": "traffic"}).json()["data"]
    assert len(data) == 7
    for item in data:
        assert set(item) == {"date", "desktop", "mobile"}
        assert 100 <= item["desktop"] <= 500
        assert 100 <= item["mobile"] <= 400


def test_metrics_unknown_profile(client):
    response = client.get("/api/metrics", params={"profile": "weather"})
    assert response.status_code == 400


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_configure_api_rejects_negative_latency():
    with pytest.raises(ValueError):
        configure_api(latency=-1)
