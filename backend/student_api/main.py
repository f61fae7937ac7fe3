"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the student records backend.
Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses.

Endpoints implemented:
- GET/POST /api/students, GET/PUT/DELETE /api/students/{id}
- GET /api/students/{id}/enrollments
- GET/POST /api/courses, GET/PUT/DELETE /api/courses/{id}
- GET/POST /api/enrollments, GET/PUT/DELETE /api/enrollments/{id}
- GET/POST /api/departments, GET/PUT/DELETE /api/departments/{id}
- GET /api/systeminfo
- GET /health
"""

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
import os
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from . import __version__, services, repositories, models
from .schemas import CourseIn, DepartmentIn, EnrollmentIn, StudentIn
from .utils.k8s_client import KubernetesApiClient
from .config import settings

app = FastAPI(title="Student Records API", version=__version__)
logger = logging.getLogger("student_api.api")
if not logger.handlers:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

# Wide-open CORS mirrors the permissive policy the service has always shipped with.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


def _request_record(request: Request, req_id: str, started: float, status_code=None) -> str:
    """Single-line JSON summary of an `/api` request for the access log."""
    record = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        "client": request.client.host if request.client else "unknown",
    }
    if status_code is not None:
        record["status_code"] = status_code
    return json.dumps(record, ensure_ascii=True)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Tag every response with `X-Request-ID` and log `/api` traffic."""
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    logged = request.url.path.startswith("/api")
    try:
        response = await call_next(request)
    except Exception:
        if logged:
            logger.exception("request_failed %s", _request_record(request, req_id, started))
        raise
    response.headers["X-Request-ID"] = req_id
    if logged:
        logger.info("request_done %s", _request_record(request, req_id, started, response.status_code))
    return response


def get_k8s_client_factory():
    """Dependency returning a callable that builds the Kubernetes client."""
    return KubernetesApiClient.from_settings


def _or_404(row, what: str):
    if row is None:
        raise HTTPException(status_code=404, detail=f'{what} not found')
    return row


def _enrollment_out(e: models.Enrollment) -> dict:
    student = e.student
    course = e.course
    return {
        'id': e.id,
        'student_id': e.student_id,
        'course_id': e.course_id,
        'enrollment_date': e.enrollment_date.isoformat(),
        'grade': e.grade,
        'status': e.status,
        'student': {
            'id': student.id,
            'first_name': student.first_name,
            'last_name': student.last_name,
            'email': student.email,
        } if student else None,
        'course': {
            'id': course.id,
            'course_code': course.course_code,
            'course_name': course.course_name,
        } if course else None,
    }


# -- students ---------------------------------------------------------------

@app.get('/api/students')
def list_students(db: Session = Depends(get_session)):
    return repositories.StudentRepository(db).list()


@app.get('/api/students/{student_id}')
def get_student(student_id: int, db: Session = Depends(get_session)):
    return _or_404(repositories.StudentRepository(db).get(student_id), 'student')


@app.get('/api/students/{student_id}/enrollments')
def list_student_enrollments(student_id: int, db: Session = Depends(get_session)):
    """List the enrollments of one student, each with its course summary."""
    _or_404(repositories.StudentRepository(db).get(student_id), 'student')
    return [_enrollment_out(e) for e in repositories.EnrollmentRepository(db).list_for_student(student_id)]


@app.post('/api/students', status_code=201)
def create_student(payload: StudentIn, db: Session = Depends(get_session)):
    """Create a student. Returns 409 when the email is already taken."""
    try:
        return services.StudentService(db).create(payload)
    except services.DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.put('/api/students/{student_id}')
def update_student(student_id: int, payload: StudentIn, db: Session = Depends(get_session)):
    student = _or_404(repositories.StudentRepository(db).get(student_id), 'student')
    try:
        return services.StudentService(db).update(student, payload)
    except services.DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.delete('/api/students/{student_id}', status_code=204)
def delete_student(student_id: int, db: Session = Depends(get_session)):
    """Delete a student together with all of their enrollments."""
    repo = repositories.StudentRepository(db)
    repo.delete(_or_404(repo.get(student_id), 'student'))
    return Response(status_code=204)


# -- courses ----------------------------------------------------------------

@app.get('/api/courses')
def list_courses(db: Session = Depends(get_session)):
    return repositories.CourseRepository(db).list()


@app.get('/api/courses/{course_id}')
def get_course(course_id: int, db: Session = Depends(get_session)):
    return _or_404(repositories.CourseRepository(db).get(course_id), 'course')


@app.post('/api/courses', status_code=201)
def create_course(payload: CourseIn, db: Session = Depends(get_session)):
    try:
        return services.CourseService(db).create(payload)
    except services.DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.put('/api/courses/{course_id}')
def update_course(course_id: int, payload: CourseIn, db: Session = Depends(get_session)):
    course = _or_404(repositories.CourseRepository(db).get(course_id), 'course')
    try:
        return services.CourseService(db).update(course, payload)
    except services.DuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.delete('/api/courses/{course_id}', status_code=204)
def delete_course(course_id: int, db: Session = Depends(get_session)):
    repo = repositories.CourseRepository(db)
    repo.delete(_or_404(repo.get(course_id), 'course'))
    return Response(status_code=204)


# -- enrollments ------------------------------------------------------------

@app.get('/api/enrollments')
def list_enrollments(db: Session = Depends(get_session)):
    """List enrollments with embedded student and course summaries."""
    return [_enrollment_out(e) for e in repositories.EnrollmentRepository(db).list()]


@app.get('/api/enrollments/{enrollment_id}')
def get_enrollment(enrollment_id: int, db: Session = Depends(get_session)):
    return _enrollment_out(_or_404(repositories.EnrollmentRepository(db).get(enrollment_id), 'enrollment'))


@app.post('/api/enrollments', status_code=201)
def create_enrollment(payload: EnrollmentIn, db: Session = Depends(get_session)):
    """Enroll a student in a course.

    Both `student_id` and `course_id` must reference existing rows;
    otherwise the request is rejected with 400.
    """
    try:
        e = services.EnrollmentService(db).create(payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _enrollment_out(e)


@app.put('/api/enrollments/{enrollment_id}')
def update_enrollment(enrollment_id: int, payload: EnrollmentIn, db: Session = Depends(get_session)):
    enrollment = _or_404(repositories.EnrollmentRepository(db).get(enrollment_id), 'enrollment')
    try:
        e = services.EnrollmentService(db).update(enrollment, payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _enrollment_out(e)


@app.delete('/api/enrollments/{enrollment_id}', status_code=204)
def delete_enrollment(enrollment_id: int, db: Session = Depends(get_session)):
    repo = repositories.EnrollmentRepository(db)
    repo.delete(_or_404(repo.get(enrollment_id), 'enrollment'))
    return Response(status_code=204)


# -- departments ------------------------------------------------------------

@app.get('/api/departments')
def list_departments(db: Session = Depends(get_session)):
    return repositories.DepartmentRepository(db).list()


@app.get('/api/departments/{department_id}')
def get_department(department_id: int, db: Session = Depends(get_session)):
    return _or_404(repositories.DepartmentRepository(db).get(department_id), 'department')


@app.post('/api/departments', status_code=201)
def create_department(payload: DepartmentIn, db: Session = Depends(get_session)):
    return services.DepartmentService(db).create(payload)


@app.put('/api/departments/{department_id}')
def update_department(department_id: int, payload: DepartmentIn, db: Session = Depends(get_session)):
    department = _or_404(repositories.DepartmentRepository(db).get(department_id), 'department')
    return services.DepartmentService(db).update(department, payload)


@app.delete('/api/departments/{department_id}', status_code=204)
def delete_department(department_id: int, db: Session = Depends(get_session)):
    repo = repositories.DepartmentRepository(db)
    repo.delete(_or_404(repo.get(department_id), 'department'))
    return Response(status_code=204)


# -- diagnostics ------------------------------------------------------------

@app.get('/api/systeminfo')
def system_info(db: Session = Depends(get_session), k8s_client_factory=Depends(get_k8s_client_factory)):
    """Report pod, environment, database and cluster metadata.

    Always answers 200: database and cluster failures are reported in
    `database_status` and `cluster_info.error`. `cluster_info` is left
    out of the body entirely when the process is not running in a pod.
    """
    info = services.DiagnosticsService(db, k8s_client_factory).build_system_info()
    content = info.model_dump(mode="json")
    if info.cluster_info is None:
        content.pop("cluster_info")
    return JSONResponse(status_code=200, content=content)


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
