import socket

import pytest

from student_api.utils import environment


@pytest.mark.parametrize("key,expected", [
    ("POD_NAME", "Not in Kubernetes"),
    ("POD_NAMESPACE", "Not in Kubernetes"),
    ("NODE_NAME", "Not in Kubernetes"),
    ("SERVICE_NAME", "webapi-service"),
    ("WEBAPI_SERVICE_SERVICE_HOST", "localhost"),
    ("WEBAPI_SERVICE_SERVICE_PORT", "5052"),
    ("ENV", "Unknown"),
    ("DB_SERVER", "Unknown"),
    ("DB_NAME", "Unknown"),
    ("DB_USER", "Unknown"),
])
def test_unset_variables_fall_back(key, expected):
    assert environment.get_env(key) == expected


def test_empty_variable_counts_as_unset(monkeypatch):
    monkeypatch.setenv("SERVICE_NAME", "")
    assert environment.get_env("SERVICE_NAME") == "webapi-service"


def test_set_variable_wins(monkeypatch):
    monkeypatch.setenv("POD_NAME", "webapi-7d9c")
    assert environment.get_env("POD_NAME") == "webapi-7d9c"
    assert environment.in_kubernetes() is True


def test_explicit_default_and_unknown_key():
    assert environment.get_env("SOME_UNSET_KEY_FOR_TESTS") == ""
    assert environment.get_env("SOME_UNSET_KEY_FOR_TESTS", "fallback") == "fallback"


def test_container_flag(monkeypatch):
    assert environment.is_running_in_container() is False
    monkeypatch.setenv("DOTNET_RUNNING_IN_CONTAINER", "TRUE")
    assert environment.is_running_in_container() is False
    monkeypatch.setenv("DOTNET_RUNNING_IN_CONTAINER", "true")
    assert environment.is_running_in_container() is True


def test_local_ip_picks_first_ipv4(monkeypatch):
    monkeypatch.setattr(socket, "getaddrinfo", lambda *_a, **_k: [
        (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("::1", 0, 0, 0)),
        (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.1.2.3", 0)),
        (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.9.9.9", 0)),
    ])
    assert environment.get_local_ip_address() == "10.1.2.3"


def test_local_ip_without_ipv4(monkeypatch):
    monkeypatch.setattr(socket, "getaddrinfo", lambda *_a, **_k: [
        (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("::1", 0, 0, 0)),
    ])
    assert environment.get_local_ip_address() == environment.NO_IP_FOUND


def test_local_ip_lookup_failure(monkeypatch):
    def boom(*_a, **_k):
        raise socket.gaierror("name resolution failed")
    monkeypatch.setattr(socket, "getaddrinfo", boom)
    assert environment.get_local_ip_address() == environment.IP_LOOKUP_FAILED


def test_pod_ip_prefers_environment(monkeypatch):
    monkeypatch.setenv("POD_IP", "10.244.0.12")
    assert environment.get_pod_ip() == "10.244.0.12"


def test_container_name_defaults_to_host_name(monkeypatch):
    monkeypatch.delenv("HOSTNAME", raising=False)
    assert environment.get_container_name() == socket.gethostname()
    monkeypatch.setenv("HOSTNAME", "webapi-7d9c")
    assert environment.get_container_name() == "webapi-7d9c"
