"""Test full workflow integration"""
import json

import pytest
from click.testing import CliRunner
from fastapi.testclient import TestClient

from contactme.api.app import create_app
from contactme.cli import main
from contactme.config import SettingsLoader


class TestFullWorkflow:
    """Test complete workflows"""

    def test_init_serve_and_persist(self, temp_project_dir, valid_form, monkeypatch):
        """Initialize a project, run the app twice and keep contacts in between"""
        runner = CliRunner()
        monkeypatch.chdir(temp_project_dir)

        # Step 1: Initialize project
        result = runner.invoke(main, ["init", "--project-dir", str(temp_project_dir)])
        assert result.exit_code == 0

        # Step 2: Load config programmatically
        settings = SettingsLoader(temp_project_dir, environ={}).load()
        assert settings.config_file is not None
        assert settings.storage.backend == "file"
        settings.logging.directory = None

        # Step 3: Submit through the API
        with TestClient(create_app(settings)) as client:
            response = client.post("/api/v1/contact", json=valid_form)
            assert response.status_code == 201
            contact_id = response.json()["data"]["contact"]["id"]

        assert (temp_project_dir / ".contactme" / "contacts" / f"{contact_id}.json").exists()

        # Step 4: A new app instance sees the stored contact
        with TestClient(create_app(settings)) as client:
            response = client.get(f"/api/v1/contact/{contact_id}")
            assert response.status_code == 200
            assert response.json()["data"]["email"] == "jane@example.com"

    @pytest.mark.parametrize("backend", ["sqlite", "memory"])
    def test_backend_from_environment(self, temp_project_dir, valid_form, monkeypatch, backend):
        monkeypatch.chdir(temp_project_dir)
        environ = {
            "CONTACTME_STORAGE_BACKEND": backend,
            "CONTACTME_STORAGE_PATH": str(temp_project_dir / "data"),
            "CONTACTME_LOG_LEVEL": "WARNING",
        }
        settings = SettingsLoader(temp_project_dir, environ=environ).load()
        settings.logging.directory = None

        with TestClient(create_app(settings)) as client:
            assert client.post("/api/v1/contact", json=valid_form).status_code == 201
            health = client.get("/health/db").json()["data"]
            stats = client.get("/api/v1/contact/stats").json()["data"]

        assert health["backend"] == backend
        assert stats["total"] == 1
        if backend == "sqlite":
            assert (temp_project_dir / "data" / "contacts.db").exists()

    def test_check_matches_api(self, client, temp_project_dir, valid_form):
        """The check command and the API agree on a submission"""
        valid_form["email"] = "jane@example"
        path = temp_project_dir / "submission.json"
        path.write_text(json.dumps(valid_form))

        runner = CliRunner()
        result = runner.invoke(main, ["check", str(path), "--json-output"])
        report = json.loads(result.output)

        response = client.post("/api/v1/contact", json=valid_form)

        assert result.exit_code == 1
        assert response.status_code == 422
        assert response.json()["errors"] == report["validation"]["errors"]
