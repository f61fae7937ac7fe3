"""Demo data inserted into an empty database on startup."""

from datetime import date

from sqlmodel import Session, select

from . import models

COURSES = [
    {"course_name": "Computer Science", "course_code": "CS101", "credits": 3},
    {"course_name": "Mathematics", "course_code": "MATH101", "credits": 4},
    {"course_name": "Physics", "course_code": "PHY101", "credits": 3},
]

DEPARTMENTS = [
    {"department_name": "Computer Science", "department_code": "CS", "location": "Building A", "head_of_department": "Dr. Smith"},
    {"department_name": "Mathematics", "department_code": "MATH", "location": "Building B", "head_of_department": "Dr. Johnson"},
    {"department_name": "Physics", "department_code": "PHY", "location": "Building C", "head_of_department": "Dr. Williams"},
    {"department_name": "Engineering", "department_code": "ENG", "location": "Building D", "head_of_department": "Dr. Brown"},
]

STUDENTS = [
    {"first_name": "John", "last_name": "Doe", "email": "john.doe@university.com",
     "date_of_birth": date(2000, 5, 15), "enrollment_date": date(2024, 9, 1),
     "phone_number": "555-0101", "address": "123 Main St, City, State"},
    {"first_name": "Jane", "last_name": "Smith", "email": "jane.smith@university.com",
     "date_of_birth": date(2001, 3, 22), "enrollment_date": date(2024, 9, 1),
     "phone_number": "555-0102", "address": "456 Oak Ave, City, State"},
    {"first_name": "Mike", "last_name": "Johnson", "email": "mike.johnson@university.com",
     "date_of_birth": date(1999, 11, 8), "enrollment_date": date(2023, 9, 1),
     "phone_number": "555-0103", "address": "789 Pine Rd, City, State"},
    {"first_name": "Emily", "last_name": "Davis", "email": "emily.davis@university.com",
     "date_of_birth": date(2002, 7, 30), "enrollment_date": date(2024, 9, 1),
     "phone_number": "555-0104", "address": "321 Elm St, City, State"},
]

# (student email, course code, enrollment date, grade, status)
ENROLLMENTS = [
    ("john.doe@university.com", "CS101", date(2024, 9, 1), "A", "Active"),
    ("john.doe@university.com", "MATH101", date(2024, 9, 1), "B+", "Active"),
    ("jane.smith@university.com", "CS101", date(2024, 9, 1), "A-", "Active"),
    ("jane.smith@university.com", "PHY101", date(2024, 9, 1), "B", "Active"),
    ("mike.johnson@university.com", "MATH101", date(2023, 9, 1), "A", "Completed"),
    ("mike.johnson@university.com", "PHY101", date(2024, 1, 15), None, "Active"),
    ("emily.davis@university.com", "CS101", date(2024, 9, 1), None, "Active"),
    ("emily.davis@university.com", "MATH101", date(2024, 9, 1), None, "Active"),
]


def seed_initial_data(session: Session) -> bool:
    """Insert the demo dataset unless any course already exists.

    Returns True when rows were inserted.
    """
    if session.exec(select(models.Course.id)).first() is not None:
        return False
    courses = {c["course_code"]: models.Course(**c) for c in COURSES}
    students = {s["email"]: models.Student(**s) for s in STUDENTS}
    session.add_all(list(courses.values()))
    session.add_all(list(students.values()))
    session.add_all([models.Department(**d) for d in DEPARTMENTS])
    for email, code, enrolled_on, grade, status in ENROLLMENTS:
        session.add(models.Enrollment(
            student=students[email],
            course=courses[code],
            enrollment_date=enrolled_on,
            grade=grade,
            status=status,
        ))
    session.commit()
    return True
