import os, sys
import pytest
from fastapi.testclient import TestClient

# Ensure package import path
backend_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if backend_root not in sys.path:
    sys.path.insert(0, backend_root)

from votegrid.main import app  # noqa: E402
from votegrid.api.sessions import get_editing_service  # noqa: E402


@pytest.fixture(scope="function")
def client():
    # Fresh session store per test
    get_editing_service().store.clear()
    app.dependency_overrides.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()
