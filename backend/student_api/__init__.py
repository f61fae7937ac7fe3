"""Application package for the student records backend.

This package exposes the service, repository and model modules used by
the FastAPI application, plus the diagnostics helpers under `utils`.
Individual modules contain the concrete implementations and documentation.
"""

__version__ = "1.0.0"
