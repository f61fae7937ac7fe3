"""Process environment helpers for the diagnostics endpoint.

Every lookup falls back to a fixed literal when the variable is unset or
empty, so callers never have to handle a missing value.
"""

import os
import socket
from typing import Optional

NOT_IN_KUBERNETES = "Not in Kubernetes"
NO_IP_FOUND = "No IP found"
IP_LOOKUP_FAILED = "Unable to get IP"
UNKNOWN = "Unknown"

ENV_DEFAULTS = {
    "POD_NAME": NOT_IN_KUBERNETES,
    "POD_NAMESPACE": NOT_IN_KUBERNETES,
    "NODE_NAME": NOT_IN_KUBERNETES,
    "SERVICE_NAME": "webapi-service",
    "WEBAPI_SERVICE_SERVICE_HOST": "localhost",
    "WEBAPI_SERVICE_SERVICE_PORT": "5052",
    "ENV": UNKNOWN,
    "DB_SERVER": UNKNOWN,
    "DB_NAME": UNKNOWN,
    "DB_USER": UNKNOWN,
}


def get_env(key: str, default: Optional[str] = None) -> str:
    """Return `key` from the environment or its documented fallback.

    An explicit `default` wins over the table above; unknown keys without
    a default fall back to an empty string.
    """
    value = os.getenv(key)
    if value:
        return value
    if default is not None:
        return default
    return ENV_DEFAULTS.get(key, "")


def in_kubernetes() -> bool:
    """True when the orchestrator injected a pod identity."""
    return bool(os.getenv("POD_NAME"))


def is_running_in_container() -> bool:
    return os.getenv("DOTNET_RUNNING_IN_CONTAINER") == "true"


def get_local_ip_address() -> str:
    """Return the first IPv4 address of the local host name.

    Returns `NO_IP_FOUND` when the name resolves without any IPv4 entry
    and `IP_LOOKUP_FAILED` when the lookup itself fails.
    """
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None)
    except (OSError, UnicodeError):
        return IP_LOOKUP_FAILED
    for family, _type, _proto, _canon, sockaddr in infos:
        if family == socket.AF_INET:
            return sockaddr[0]
    return NO_IP_FOUND


def get_pod_ip() -> str:
    return os.getenv("POD_IP") or get_local_ip_address()


def get_host_name() -> str:
    return socket.gethostname()


def get_container_name() -> str:
    return get_env("HOSTNAME", get_host_name())
