from fastapi.testclient import TestClient

from jobportal.config import Settings
from jobportal.main import create_app


def _client_with_failing_route(settings, database):
    app = create_app(settings, database)

    @app.get("/boom")
    def boom():
        raise RuntimeError("store exploded")

    return TestClient(app, raise_server_exceptions=False)


def test_unexpected_error_detail_only_in_development(database):
    settings = Settings(_env_file=None, ENVIRONMENT="development", DB_INIT_MODE="create_all")
    with _client_with_failing_route(settings, database) as client:
        response = client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "store exploded"}


def test_unexpected_error_hidden_in_production(database):
    settings = Settings(_env_file=None, ENVIRONMENT="production", DB_INIT_MODE="create_all")
    with _client_with_failing_route(settings, database) as client:
        response = client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "An unexpected error occurred"}
