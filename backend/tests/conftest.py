from pathlib import Path
import os
import shutil
import tempfile
import pytest

# Must be set before `student_api` is imported: the engine and settings
# are created at import time.
_DB_DIR = Path(tempfile.mkdtemp(prefix="student_api_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["SEED_DATA"] = "false"
os.environ["DB_INIT_RETRY_SECONDS"] = "0"


@pytest.fixture(scope="session", autouse=True)
def reset_db():
    """Remove the throwaway SQLite database once the session ends."""
    yield
    shutil.rmtree(_DB_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def no_pod_identity(monkeypatch):
    """Start every test outside Kubernetes; tests opt in with setenv."""
    for key in ("POD_NAME", "POD_NAMESPACE", "POD_IP", "NODE_NAME", "SERVICE_NAME",
                "WEBAPI_SERVICE_SERVICE_HOST", "WEBAPI_SERVICE_SERVICE_PORT",
                "DOTNET_RUNNING_IN_CONTAINER", "ENV", "DB_SERVER", "DB_NAME", "DB_USER"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def service_account(tmp_path):
    """A fake service-account mount with token and namespace files."""
    sa = tmp_path / "serviceaccount"
    sa.mkdir()
    (sa / "token").write_text("test-token\n", encoding="utf-8")
    (sa / "namespace").write_text("school\n", encoding="utf-8")
    return sa
