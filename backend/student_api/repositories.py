"""Repository classes encapsulating database operations.

Each repository is small and focused on a single table (students,
courses, enrollments, departments). Repositories return SQLModel objects
and perform commits/refreshes where appropriate. `StatsRepository`
holds the read-only queries used by the diagnostics probe.
"""

from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import func, text
from . import models


class _TableRepository:
    """Shared CRUD helpers; subclasses set `model`."""
    model = None

    def __init__(self, session: Session):
        self.session = session

    def list(self) -> list:
        """Return all rows ordered by primary key."""
        stmt = select(self.model).order_by(self.model.id)
        return self.session.exec(stmt).all()

    def get(self, row_id: int):
        """Get a row by primary key or `None`."""
        return self.session.get(self.model, row_id)

    def create(self, row):
        """Persist a new row and return the managed instance."""
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row

    def update(self, row, values: dict):
        """Copy `values` onto `row` and commit."""
        for key, value in values.items():
            setattr(row, key, value)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row

    def delete(self, row) -> None:
        self.session.delete(row)
        self.session.commit()


class StudentRepository(_TableRepository):
    """CRUD operations for `Student` objects."""
    model = models.Student

    def get_by_email(self, email: str) -> Optional[models.Student]:
        """Return a `Student` by email or `None` if not found."""
        stmt = select(models.Student).where(models.Student.email == email)
        return self.session.exec(stmt).first()


class CourseRepository(_TableRepository):
    """CRUD operations for `Course` objects."""
    model = models.Course

    def get_by_code(self, course_code: str) -> Optional[models.Course]:
        stmt = select(models.Course).where(models.Course.course_code == course_code)
        return self.session.exec(stmt).first()


class EnrollmentRepository(_TableRepository):
    """CRUD operations for `Enrollment` objects."""
    model = models.Enrollment

    def list_for_student(self, student_id: int) -> List[models.Enrollment]:
        """List all enrollments for the provided `student_id`."""
        stmt = select(models.Enrollment).where(models.Enrollment.student_id == student_id).order_by(models.Enrollment.id)
        return self.session.exec(stmt).all()


class DepartmentRepository(_TableRepository):
    model = models.Department


class StatsRepository:
    """Connectivity check and row counts for the diagnostics probe."""
    def __init__(self, session: Session):
        self.session = session

    def ping(self) -> None:
        """Run a trivial query; raises if the database is unreachable."""
        self.session.connection().execute(text("SELECT 1"))

    def server_version(self) -> Optional[str]:
        """Return the backend's reported version string, if known."""
        info = self.session.connection().dialect.server_version_info
        if not info:
            return None
        return ".".join(str(part) for part in info)

    def count(self, model) -> int:
        stmt = select(func.count()).select_from(model)
        return int(self.session.exec(stmt).one())

    def table_counts(self) -> dict:
        """Return independent row counts for the four domain tables."""
        return {
            "student_count": self.count(models.Student),
            "course_count": self.count(models.Course),
            "enrollment_count": self.count(models.Enrollment),
            "department_count": self.count(models.Department),
        }
