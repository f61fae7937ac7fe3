"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable. The diagnostics models at
the bottom (`SystemInfo`, `ClusterInfo` and the per-resource summaries)
are built fresh for each `/api/systeminfo` request and never persisted.
"""

from datetime import date, datetime
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional

from .models import EnrollmentStatus


class StudentIn(BaseModel):
    """Payload for creating or replacing a student."""
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: str = Field(max_length=200)
    date_of_birth: date
    enrollment_date: date
    phone_number: Optional[str] = None
    address: Optional[str] = None


class CourseIn(BaseModel):
    """Payload for creating or replacing a course."""
    course_name: str = Field(max_length=200)
    course_code: str = Field(max_length=20)
    credits: int = 0
    description: Optional[str] = None


class DepartmentIn(BaseModel):
    department_name: str = Field(max_length=100)
    department_code: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = None
    head_of_department: Optional[str] = None


class EnrollmentIn(BaseModel):
    """Payload for enrolling a student in a course.

    `status` is free-form; `EnrollmentStatus` lists the usual values.
    """
    student_id: int
    course_id: int
    enrollment_date: date
    grade: Optional[str] = Field(default=None, max_length=2)
    status: str = EnrollmentStatus.ACTIVE.value


class NodeReadiness(str, Enum):
    READY = "Ready"
    NOT_READY = "NotReady"


class PodInfo(BaseModel):
    name: str = ""
    status: str = "Unknown"
    pod_ip: Optional[str] = None
    node_name: Optional[str] = None


class ServiceInfo(BaseModel):
    name: str = ""
    type: str = "ClusterIP"
    cluster_ip: Optional[str] = None
    port: int = 0


class NodeInfo(BaseModel):
    name: str = ""
    status: NodeReadiness = NodeReadiness.NOT_READY
    kubernetes_version: str = "Unknown"
    os_image: str = "Unknown"


class DeploymentInfo(BaseModel):
    name: str = ""
    replicas: int = 0
    ready_replicas: int = 0


class ClusterInfo(BaseModel):
    """Point-in-time summary of the namespace the service runs in.

    When `error` is set the snapshot may be partial: lists filled before
    the failing call are kept and `complete` is False.
    """
    total_pods: int = 0
    running_pods: int = 0
    pending_pods: int = 0
    failed_pods: int = 0
    total_services: int = 0
    total_nodes: int = 0
    total_deployments: int = 0
    pods: List[PodInfo] = Field(default_factory=list)
    services: List[ServiceInfo] = Field(default_factory=list)
    nodes: List[NodeInfo] = Field(default_factory=list)
    deployments: List[DeploymentInfo] = Field(default_factory=list)
    error: Optional[str] = None
    complete: bool = False


class SystemInfo(BaseModel):
    """Diagnostics payload returned by `GET /api/systeminfo`."""
    pod_name: str = ""
    pod_namespace: str = ""
    pod_ip: str = ""
    node_name: str = ""
    service_name: str = ""
    service_host: str = ""
    service_port: str = ""
    host_name: str = ""
    environment: str = ""
    app_version: str = ""
    framework: str = ""
    database_server: str = ""
    database_name: str = ""
    database_user: str = ""
    database_status: str = ""
    database_version: Optional[str] = None
    student_count: int = 0
    course_count: int = 0
    enrollment_count: int = 0
    department_count: int = 0
    container_name: str = ""
    is_running_in_container: bool = False
    server_time: Optional[datetime] = None
    server_time_zone: str = ""
    cluster_info: Optional[ClusterInfo] = None
