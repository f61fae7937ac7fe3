"""Turn raw Kubernetes list responses into a `ClusterInfo` snapshot.

The `*_from_item` helpers are the only place where defaults for missing
or malformed fields are applied; everything downstream works with the
typed summaries from `schemas`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from ..schemas import ClusterInfo, DeploymentInfo, NodeInfo, NodeReadiness, PodInfo, ServiceInfo
from .k8s_client import KubernetesApiClient

_LOGGER = logging.getLogger("student_api.k8s")

# InvalidURL is not an HTTPError; a bad base URL or namespace raises it
_API_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)


def _obj(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _str(value: Any, default: str | None) -> str | None:
    return value if isinstance(value, str) and value else default


def _int(value: Any) -> int:
    # bool is an int subclass but never a valid count here
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def pod_from_item(item: Any) -> PodInfo:
    item = _obj(item)
    status = _obj(item.get("status"))
    return PodInfo(
        name=_str(_obj(item.get("metadata")).get("name"), ""),
        status=_str(status.get("phase"), "Unknown"),
        pod_ip=_str(status.get("podIP"), None),
        node_name=_str(_obj(item.get("spec")).get("nodeName"), None),
    )


def service_from_item(item: Any) -> ServiceInfo:
    item = _obj(item)
    spec = _obj(item.get("spec"))
    ports = spec.get("ports")
    port = 0
    if isinstance(ports, list) and ports:
        port = _int(_obj(ports[0]).get("port"))
    return ServiceInfo(
        name=_str(_obj(item.get("metadata")).get("name"), ""),
        type=_str(spec.get("type"), "ClusterIP"),
        cluster_ip=_str(spec.get("clusterIP"), None),
        port=port,
    )


def node_from_item(item: Any) -> NodeInfo:
    item = _obj(item)
    status = _obj(item.get("status"))
    conditions = status.get("conditions")
    readiness = NodeReadiness.NOT_READY
    for cond in conditions if isinstance(conditions, list) else []:
        cond = _obj(cond)
        if cond.get("type") == "Ready":
            if cond.get("status") == "True":
                readiness = NodeReadiness.READY
            break
    node_info = _obj(status.get("nodeInfo"))
    return NodeInfo(
        name=_str(_obj(item.get("metadata")).get("name"), ""),
        status=readiness,
        kubernetes_version=_str(node_info.get("kubeletVersion"), "Unknown"),
        os_image=_str(node_info.get("osImage"), "Unknown"),
    )


def deployment_from_item(item: Any) -> DeploymentInfo:
    item = _obj(item)
    return DeploymentInfo(
        name=_str(_obj(item.get("metadata")).get("name"), ""),
        replicas=_int(_obj(item.get("spec")).get("replicas")),
        ready_replicas=_int(_obj(item.get("status")).get("readyReplicas")),
    )


def apply_pods(info: ClusterInfo, items: Iterable[Any]) -> None:
    """Fill pod list and phase counters; unrecognised phases only count in the total."""
    pods = [pod_from_item(i) for i in items]
    info.pods = pods
    info.total_pods = len(pods)
    info.running_pods = sum(1 for p in pods if p.status == "Running")
    info.pending_pods = sum(1 for p in pods if p.status == "Pending")
    info.failed_pods = sum(1 for p in pods if p.status == "Failed")


def apply_services(info: ClusterInfo, items: Iterable[Any]) -> None:
    info.services = [service_from_item(i) for i in items]
    info.total_services = len(info.services)


def apply_nodes(info: ClusterInfo, items: Iterable[Any]) -> None:
    info.nodes = [node_from_item(i) for i in items]
    info.total_nodes = len(info.nodes)


def apply_deployments(info: ClusterInfo, items: Iterable[Any]) -> None:
    info.deployments = [deployment_from_item(i) for i in items]
    info.total_deployments = len(info.deployments)


def collect_cluster_info(client: KubernetesApiClient) -> ClusterInfo:
    """Query the API server and build a snapshot; never raises.

    Calls run in order pods, services, nodes, deployments. A failing node
    list is recorded as zero nodes. Any other failure stops the sequence
    and is stored in `error`, keeping whatever was filled in before it.
    """
    info = ClusterInfo()
    try:
        token, namespace = client.read_credentials()
    except (OSError, ValueError) as exc:
        _LOGGER.warning("cluster_info credentials unavailable: %s", exc)
        info.error = f"Failed to read service account credentials: {exc}"
        return info

    try:
        with client.session(token) as http:
            apply_pods(info, client.list_pods(http, namespace))
            apply_services(info, client.list_services(http, namespace))
            try:
                apply_nodes(info, client.list_nodes(http))
            except _API_ERRORS as exc:
                # nodes are cluster-scoped and often forbidden for namespaced accounts
                _LOGGER.warning("cluster_info node list unavailable: %s", exc)
                info.nodes = []
                info.total_nodes = 0
            apply_deployments(info, client.list_deployments(http, namespace))
    except _API_ERRORS + (OSError,) as exc:
        _LOGGER.warning("cluster_info query failed: %s", exc)
        info.error = f"Kubernetes API error: {exc}"
        return info

    info.complete = True
    return info
