import json
import logging

import httpx
from fastapi.testclient import TestClient
from sqlmodel import Session

from student_api.database import get_session, make_engine
from student_api.main import app, get_k8s_client_factory
from student_api.schemas import SystemInfo
from student_api.utils.k8s_client import KubernetesApiClient

client = TestClient(app)


def _fake_cluster(service_account):
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/pods"):
            return httpx.Response(200, json={"items": [
                {"metadata": {"name": "webapi-1"}, "status": {"phase": "Running", "podIP": "10.0.0.5"}, "spec": {"nodeName": "node-a"}},
            ]})
        if path.endswith("/services"):
            return httpx.Response(200, json={"items": [{"metadata": {"name": "webapi-service"}, "spec": {"type": "ClusterIP", "ports": []}}]})
        if path == "/api/v1/nodes":
            return httpx.Response(403, json={"message": "forbidden"})
        return httpx.Response(200, json={"items": []})

    return lambda: KubernetesApiClient(
        base_url="https://k8s.test",
        service_account_dir=service_account,
        transport=httpx.MockTransport(handler),
    )


def test_systeminfo_outside_kubernetes_omits_cluster_info():
    r = client.get("/api/systeminfo")
    assert r.status_code == 200
    data = r.json()
    assert "cluster_info" not in data
    assert data["pod_name"] == "Not in Kubernetes"
    assert data["service_port"] == "5052"
    assert data["environment"] == "Unknown"
    assert data["database_status"] == "Connected"
    assert data["database_version"]
    assert data["app_version"] == "1.0.0"
    assert "X-Request-ID" in r.headers


def test_systeminfo_inside_kubernetes(monkeypatch, service_account):
    monkeypatch.setenv("POD_NAME", "webapi-1")
    monkeypatch.setenv("POD_NAMESPACE", "school")
    monkeypatch.setenv("POD_IP", "10.0.0.5")
    app.dependency_overrides[get_k8s_client_factory] = lambda: _fake_cluster(service_account)
    try:
        r = client.get("/api/systeminfo")
    finally:
        app.dependency_overrides.pop(get_k8s_client_factory, None)
    assert r.status_code == 200
    data = r.json()
    assert data["pod_name"] == "webapi-1"
    assert data["pod_ip"] == "10.0.0.5"
    cluster = data["cluster_info"]
    assert cluster["total_pods"] == 1
    assert cluster["running_pods"] == 1
    assert cluster["services"][0]["port"] == 0
    assert cluster["total_nodes"] == 0
    assert cluster["error"] is None
    assert cluster["complete"] is True


def test_systeminfo_with_missing_service_account(monkeypatch, tmp_path):
    monkeypatch.setenv("POD_NAME", "webapi-1")
    app.dependency_overrides[get_k8s_client_factory] = lambda: (
        lambda: KubernetesApiClient(service_account_dir=tmp_path / "nope")
    )
    try:
        r = client.get("/api/systeminfo")
    finally:
        app.dependency_overrides.pop(get_k8s_client_factory, None)
    assert r.status_code == 200
    cluster = r.json()["cluster_info"]
    assert cluster["error"]
    assert cluster["total_pods"] == 0
    assert cluster["total_services"] == 0
    assert cluster["total_nodes"] == 0
    assert cluster["total_deployments"] == 0


def test_systeminfo_with_unreachable_database(monkeypatch, tmp_path):
    bad_engine = make_engine(f"sqlite:///{tmp_path / 'no' / 'such' / 'dir' / 'x.db'}")

    def broken_session():
        with Session(bad_engine) as session:
            yield session

    monkeypatch.setenv("SERVICE_NAME", "webapi-service-blue")
    app.dependency_overrides[get_session] = broken_session
    try:
        r = client.get("/api/systeminfo")
    finally:
        app.dependency_overrides.pop(get_session, None)
    assert r.status_code == 200
    data = r.json()
    assert "Disconnected" in data["database_status"] or "Error" in data["database_status"]
    assert data["student_count"] == 0
    assert data["service_name"] == "webapi-service-blue"
    assert data["host_name"]


def test_systeminfo_round_trip(monkeypatch, service_account):
    monkeypatch.setenv("POD_NAME", "webapi-1")
    app.dependency_overrides[get_k8s_client_factory] = lambda: _fake_cluster(service_account)
    try:
        data = client.get("/api/systeminfo").json()
    finally:
        app.dependency_overrides.pop(get_k8s_client_factory, None)
    info = SystemInfo.model_validate(data)
    assert info.cluster_info.pods[0].name == "webapi-1"
    assert info.model_dump(mode="json") == data


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_systeminfo_with_malformed_api_url_still_answers(monkeypatch, service_account):
    monkeypatch.setenv("POD_NAME", "webapi-1")
    app.dependency_overrides[get_k8s_client_factory] = lambda: (
        lambda: KubernetesApiClient(base_url="https://k8s.test:notaport", service_account_dir=service_account)
    )
    try:
        r = TestClient(app, raise_server_exceptions=False).get("/api/systeminfo")
    finally:
        app.dependency_overrides.pop(get_k8s_client_factory, None)
    assert r.status_code == 200
    cluster = r.json()["cluster_info"]
    assert cluster["error"]
    assert cluster["complete"] is False


def test_api_requests_are_logged_with_request_id(caplog):
    with caplog.at_level(logging.INFO, logger="student_api.api"):
        r = client.get("/api/departments", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"
    records = [rec.getMessage() for rec in caplog.records if rec.name == "student_api.api"]
    done = [m for m in records if m.startswith("request_done ")]
    assert done
    payload = json.loads(done[-1].split(" ", 1)[1])
    assert payload["request_id"] == "req-123"
    assert payload["path"] == "/api/departments"
    assert payload["status_code"] == 200
