"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Students and courses own enrollments; removing either parent removes
its enrollments both through the ORM cascade and the `ON DELETE CASCADE`
foreign keys.
"""

from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
from datetime import date
from enum import Enum
from typing import List


class EnrollmentStatus(str, Enum):
    """Known enrollment statuses.

    The `status` column itself stays a free-form string so that values
    outside this list are stored and returned unchanged.
    """
    ACTIVE = "Active"
    COMPLETED = "Completed"
    DROPPED = "Dropped"


class Student(SQLModel, table=True):
    """A student record.

    Fields:
    - `email`: unique contact address
    - `enrollment_date`: date the student joined the institution
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str = Field(max_length=100, nullable=False)
    last_name: str = Field(max_length=100, nullable=False)
    email: str = Field(max_length=200, index=True, unique=True, nullable=False)
    date_of_birth: date
    enrollment_date: date
    phone_number: Optional[str] = None
    address: Optional[str] = None
    enrollments: List['Enrollment'] = Relationship(
        back_populates='student',
        sa_relationship_kwargs={'cascade': 'all, delete'},
    )


class Course(SQLModel, table=True):
    """A course offered to students, identified by a unique `course_code`."""
    id: Optional[int] = Field(default=None, primary_key=True)
    course_name: str = Field(max_length=200, nullable=False)
    course_code: str = Field(max_length=20, index=True, unique=True, nullable=False)
    credits: int = 0
    description: Optional[str] = None
    enrollments: List['Enrollment'] = Relationship(
        back_populates='course',
        sa_relationship_kwargs={'cascade': 'all, delete'},
    )


class Enrollment(SQLModel, table=True):
    """Links one `Student` to one `Course` with an optional letter grade."""
    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key='student.id', ondelete='CASCADE', index=True)
    course_id: int = Field(foreign_key='course.id', ondelete='CASCADE', index=True)
    enrollment_date: date
    grade: Optional[str] = Field(default=None, max_length=2)
    status: str = EnrollmentStatus.ACTIVE.value
    student: Optional[Student] = Relationship(back_populates='enrollments')
    course: Optional[Course] = Relationship(back_populates='enrollments')


class Department(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    department_name: str = Field(max_length=100, nullable=False)
    department_code: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = None
    head_of_department: Optional[str] = None
