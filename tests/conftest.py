import pytest
from fastapi.testclient import TestClient

from contract_analyzer.main import create_app


@pytest.fixture
def make_client():
    def _make(service):
        return TestClient(create_app(extraction_service=service))
    return _make
