"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and auxiliary helpers. The CRUD services check uniqueness and foreign
references before writing; `DiagnosticsService` assembles the
`/api/systeminfo` payload and converts every failure into a field of
the response instead of raising.
"""

import logging
import platform
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlmodel import Session

from . import __version__, models, repositories
from .schemas import ClusterInfo, CourseIn, DepartmentIn, EnrollmentIn, StudentIn, SystemInfo
from .utils import environment
from .utils.cluster_info import collect_cluster_info
from .utils.k8s_client import KubernetesApiClient

logger = logging.getLogger("student_api.diagnostics")


class DuplicateError(ValueError):
    """A unique column (student email, course code) already holds the value."""


class StudentService:
    """Create and update students while keeping emails unique."""
    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.StudentRepository(session)

    def _check_email(self, email: str, student_id: Optional[int] = None):
        existing = self.repo.get_by_email(email)
        if existing and existing.id != student_id:
            raise DuplicateError(f"a student with email {email} already exists")

    def create(self, payload: StudentIn) -> models.Student:
        self._check_email(payload.email)
        return self.repo.create(models.Student(**payload.model_dump()))

    def update(self, student: models.Student, payload: StudentIn) -> models.Student:
        self._check_email(payload.email, student.id)
        return self.repo.update(student, payload.model_dump())


class CourseService:
    """Create and update courses while keeping course codes unique."""
    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.CourseRepository(session)

    def _check_code(self, course_code: str, course_id: Optional[int] = None):
        existing = self.repo.get_by_code(course_code)
        if existing and existing.id != course_id:
            raise DuplicateError(f"a course with code {course_code} already exists")

    def create(self, payload: CourseIn) -> models.Course:
        self._check_code(payload.course_code)
        return self.repo.create(models.Course(**payload.model_dump()))

    def update(self, course: models.Course, payload: CourseIn) -> models.Course:
        self._check_code(payload.course_code, course.id)
        return self.repo.update(course, payload.model_dump())


class EnrollmentService:
    """Create and update enrollments that point at existing rows."""
    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.EnrollmentRepository(session)

    def _check_references(self, payload: EnrollmentIn):
        if not repositories.StudentRepository(self.session).get(payload.student_id):
            raise ValueError(f"student not found: {payload.student_id}")
        if not repositories.CourseRepository(self.session).get(payload.course_id):
            raise ValueError(f"course not found: {payload.course_id}")

    def create(self, payload: EnrollmentIn) -> models.Enrollment:
        self._check_references(payload)
        return self.repo.create(models.Enrollment(**payload.model_dump()))

    def update(self, enrollment: models.Enrollment, payload: EnrollmentIn) -> models.Enrollment:
        self._check_references(payload)
        return self.repo.update(enrollment, payload.model_dump())


class DepartmentService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.DepartmentRepository(session)

    def create(self, payload: DepartmentIn) -> models.Department:
        return self.repo.create(models.Department(**payload.model_dump()))

    def update(self, department: models.Department, payload: DepartmentIn) -> models.Department:
        return self.repo.update(department, payload.model_dump())


class DatabaseProbe:
    """Connectivity check plus row counts; never raises."""
    def __init__(self, session: Session):
        self.session = session
        self.stats = repositories.StatsRepository(session)

    def probe(self) -> dict:
        """Return `database_status`, `database_version` and table counts.

        `database_status` is "Connected", "Disconnected" when the ping
        cannot reach the database, or "Error: <message>" for any other
        failure. Counts stay at zero unless every query succeeds.
        """
        result = {
            "database_status": "Disconnected",
            "database_version": None,
            "student_count": 0,
            "course_count": 0,
            "enrollment_count": 0,
            "department_count": 0,
        }
        try:
            self.stats.ping()
        except DBAPIError as exc:
            logger.warning("database ping failed: %s", exc)
            self.session.rollback()
            return result
        except Exception as exc:
            logger.warning("database ping error: %s", exc)
            result["database_status"] = f"Error: {exc}"
            return result
        try:
            result["database_version"] = self.stats.server_version()
            counts = self.stats.table_counts()
        except Exception as exc:
            logger.warning("database count query failed: %s", exc)
            if isinstance(exc, SQLAlchemyError):
                self.session.rollback()
            result["database_status"] = f"Error: {exc}"
            return result
        result.update(counts)
        result["database_status"] = "Connected"
        return result


class DiagnosticsService:
    """Assemble the `SystemInfo` payload for one request."""
    def __init__(self, session: Session, k8s_client_factory: Callable[[], KubernetesApiClient] = KubernetesApiClient.from_settings):
        self.session = session
        self.k8s_client_factory = k8s_client_factory

    def environment_fields(self) -> dict:
        return {
            "pod_name": environment.get_env("POD_NAME"),
            "pod_namespace": environment.get_env("POD_NAMESPACE"),
            "pod_ip": environment.get_pod_ip(),
            "node_name": environment.get_env("NODE_NAME"),
            "service_name": environment.get_env("SERVICE_NAME"),
            "service_host": environment.get_env("WEBAPI_SERVICE_SERVICE_HOST"),
            "service_port": environment.get_env("WEBAPI_SERVICE_SERVICE_PORT"),
            "host_name": environment.get_host_name(),
            "environment": environment.get_env("ENV"),
            "app_version": __version__,
            "framework": f"Python {platform.python_version()}",
            "database_server": environment.get_env("DB_SERVER"),
            "database_name": environment.get_env("DB_NAME"),
            "database_user": environment.get_env("DB_USER"),
            "container_name": environment.get_container_name(),
            "is_running_in_container": environment.is_running_in_container(),
            "server_time": datetime.now(timezone.utc),
            "server_time_zone": datetime.now().astimezone().tzname() or "UTC",
        }

    def cluster_info(self) -> Optional[ClusterInfo]:
        """Return a cluster snapshot, or None outside Kubernetes."""
        if not environment.in_kubernetes():
            return None
        return collect_cluster_info(self.k8s_client_factory())

    def build_system_info(self) -> SystemInfo:
        fields = self.environment_fields()
        fields["cluster_info"] = self.cluster_info()
        fields.update(DatabaseProbe(self.session).probe())
        return SystemInfo(**fields)
