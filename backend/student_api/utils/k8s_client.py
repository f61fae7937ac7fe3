"""Minimal read-only client for the in-cluster Kubernetes API.

The client authenticates with the pod's service-account token and talks
to the API server over plain REST via httpx. Credentials are read from
the mounted service-account directory on every call; nothing is cached
between requests.
"""

from __future__ import annotations

import ssl
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import httpx

from ..config import settings


class KubernetesApiClient:
    """List pods, services, nodes and deployments for one namespace.

    TLS is verified against the mounted `ca.crt`; if that file is absent
    the system trust store is used. Verification is skipped only when
    `insecure` is set explicitly.
    """

    def __init__(
        self,
        base_url: str = "https://kubernetes.default.svc",
        service_account_dir: str | Path = "/var/run/secrets/kubernetes.io/serviceaccount",
        timeout: float = 5.0,
        insecure: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_account_dir = Path(service_account_dir)
        self.timeout = timeout
        self.insecure = insecure
        self._transport = transport

    @classmethod
    def from_settings(cls, cfg=None) -> "KubernetesApiClient":
        cfg = cfg or settings
        return cls(
            base_url=cfg.K8S_API_URL,
            service_account_dir=cfg.K8S_SERVICE_ACCOUNT_DIR,
            timeout=cfg.K8S_API_TIMEOUT_SECONDS,
            insecure=cfg.K8S_INSECURE_SKIP_TLS_VERIFY,
        )

    @property
    def token_path(self) -> Path:
        return self.service_account_dir / "token"

    @property
    def namespace_path(self) -> Path:
        return self.service_account_dir / "namespace"

    @property
    def ca_cert_path(self) -> Path:
        return self.service_account_dir / "ca.crt"

    def read_credentials(self) -> tuple[str, str]:
        """Return `(token, namespace)` from the service-account mount.

        Raises OSError when either file cannot be read and ValueError when
        one of them is empty.
        """
        token = self.token_path.read_text(encoding="utf-8").strip()
        namespace = self.namespace_path.read_text(encoding="utf-8").strip()
        if not token:
            raise ValueError(f"service account token at {self.token_path} is empty")
        if not namespace:
            raise ValueError(f"service account namespace at {self.namespace_path} is empty")
        return token, namespace

    def _verify(self):
        if self.insecure:
            return False
        if self.ca_cert_path.exists():
            return ssl.create_default_context(cafile=str(self.ca_cert_path))
        return True

    @contextmanager
    def session(self, token: str) -> Iterator[httpx.Client]:
        """Open an authenticated HTTP client for a batch of list calls."""
        with httpx.Client(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            timeout=self.timeout,
            verify=self._verify(),
            transport=self._transport,
        ) as client:
            yield client

    def list_items(self, client: httpx.Client, path: str) -> list:
        """GET a Kubernetes list endpoint and return its `items` array.

        Raises httpx.HTTPStatusError on a non-2xx response and ValueError
        when the body is not JSON or not a list object.
        """
        response = client.get(path)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"unexpected response from {path}: expected a JSON object")
        items = payload.get("items") or []
        if not isinstance(items, list):
            raise ValueError(f"unexpected response from {path}: 'items' is not a list")
        return items

    def list_pods(self, client: httpx.Client, namespace: str) -> list:
        return self.list_items(client, f"/api/v1/namespaces/{namespace}/pods")

    def list_services(self, client: httpx.Client, namespace: str) -> list:
        return self.list_items(client, f"/api/v1/namespaces/{namespace}/services")

    def list_nodes(self, client: httpx.Client) -> list:
        return self.list_items(client, "/api/v1/nodes")

    def list_deployments(self, client: httpx.Client, namespace: str) -> list:
        return self.list_items(client, f"/apis/apps/v1/namespaces/{namespace}/deployments")
