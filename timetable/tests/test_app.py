import base64
import unittest
from urllib.parse import quote

from fastapi.testclient import TestClient

from timetable.app import create_app
from timetable.config import Settings, get_settings
from timetable.context import AppContext
from timetable.db import InMemoryStructuredStore
from timetable.dependencies import get_app_context
from timetable.dialogs import AUTH_ERROR, SCHEDULE_CREATE_FAILED
from timetable.records import Collection
from timetable.storage import InMemoryKeyValueStore

PASSPHRASE = "bombakapitana"
AUTH = {"X-Admin-Passphrase": PASSPHRASE}
PDF_BYTES = b"%PDF-1.4 test"

SCHEDULE = {
    "train_number": "IC 5103",
    "route": "Warszawa - Kraków",
    "departure": "08:30",
    "arrival": "11:45",
}


class _ApiTestCase(unittest.TestCase):
    remote_configured = False

    def setUp(self):
        self.remote = InMemoryStructuredStore()
        if self.remote_configured:
            self.settings = Settings(
                _env_file=None,
                database_url="postgresql://db.example/timetable",
                database_key="secret",
                admin_passphrase=PASSPHRASE,
            )
        else:
            self.settings = Settings(_env_file=None, database_url=None, admin_passphrase=PASSPHRASE)
        self.local = InMemoryKeyValueStore()
        self.context = AppContext(
            self.settings,
            local_store=self.local,
            store_factory=lambda url, key: self.remote,
        )
        self.context.initialize()

        app = create_app()
        app.dependency_overrides[get_settings] = lambda: self.settings
        app.dependency_overrides[get_app_context] = lambda: self.context
        self.client = TestClient(app)


class LocalModeApiTests(_ApiTestCase):
    def test_status(self):
        response = self.client.get("/api/status")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["mode"], "local")
        self.assertEqual(payload["banner"]["kind"], "info")
        self.assertEqual(payload["banner"]["title"], "Tryb lokalny")

    def test_create_requires_passphrase(self):
        response = self.client.post("/api/schedules", json=SCHEDULE)
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], AUTH_ERROR)

        response = self.client.post(
            "/api/schedules", json=SCHEDULE, headers={"X-Admin-Passphrase": "wrong"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.context.schedules, [])

    def test_create_and_list_newest_first(self):
        first = self.client.post("/api/schedules", json=SCHEDULE, headers=AUTH)
        self.assertEqual(first.status_code, 201)
        self.assertFalse(first.json()["has_document"])

        second = self.client.post(
            "/api/schedules", json={**SCHEDULE, "train_number": "TLK 1"}, headers=AUTH
        )
        self.assertEqual(second.status_code, 201)

        listing = self.client.get("/api/schedules")
        self.assertEqual(listing.status_code, 200)
        trains = [s["train_number"] for s in listing.json()["schedules"]]
        self.assertEqual(trains, ["TLK 1", "IC 5103"])
        self.assertIn("trainSchedules", self.local.slots)

    def test_missing_required_field_is_rejected(self):
        response = self.client.post(
            "/api/schedules", json={**SCHEDULE, "arrival": ""}, headers=AUTH
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.context.schedules, [])

    def test_long_train_number_is_accepted(self):
        response = self.client.post(
            "/api/schedules", json={**SCHEDULE, "train_number": "X" * 65}, headers=AUTH
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.context.schedules[0].train_number, "X" * 65)

    def test_invalid_document_is_rejected(self):
        response = self.client.post(
            "/api/schedules", json={**SCHEDULE, "pdf_file": "not base64!"}, headers=AUTH
        )
        self.assertEqual(response.status_code, 422)

    def test_document_download(self):
        pdf = "data:application/pdf;base64," + base64.b64encode(PDF_BYTES).decode("ascii")
        created = self.client.post(
            "/api/schedules", json={**SCHEDULE, "pdf_file": pdf}, headers=AUTH
        ).json()
        self.assertTrue(created["has_document"])

        response = self.client.get(f"/api/schedules/{created['id']}/document")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, PDF_BYTES)
        self.assertEqual(response.headers["content-type"], "application/pdf")
        self.assertIn(quote("rozkład-IC 5103.pdf"), response.headers["content-disposition"])

    def test_document_missing(self):
        created = self.client.post("/api/schedules", json=SCHEDULE, headers=AUTH).json()
        response = self.client.get(f"/api/schedules/{created['id']}/document")
        self.assertEqual(response.status_code, 404)
        response = self.client.get("/api/schedules/unknown/document")
        self.assertEqual(response.status_code, 404)

    def test_delete_schedule(self):
        created = self.client.post("/api/schedules", json=SCHEDULE, headers=AUTH).json()
        self.assertEqual(self.client.delete(f"/api/schedules/{created['id']}").status_code, 401)

        response = self.client.delete(f"/api/schedules/{created['id']}", headers=AUTH)
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get("/api/schedules").json()["schedules"], [])

        response = self.client.delete(f"/api/schedules/{created['id']}", headers=AUTH)
        self.assertEqual(response.status_code, 404)

    def test_server_links(self):
        link = {"name": "Server #1", "url": "https://www.roblox.com/games/1"}
        self.assertEqual(self.client.post("/api/server-links", json=link).status_code, 401)

        created = self.client.post("/api/server-links", json=link, headers=AUTH)
        self.assertEqual(created.status_code, 201)
        link_id = created.json()["id"]

        listing = self.client.get("/api/server-links").json()["server_links"]
        self.assertEqual([item["name"] for item in listing], ["Server #1"])

        response = self.client.delete(f"/api/server-links/{link_id}", headers=AUTH)
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get("/api/server-links").json()["server_links"], [])


class RemoteModeApiTests(_ApiTestCase):
    remote_configured = True

    def test_status_ready(self):
        payload = self.client.get("/api/status").json()
        self.assertEqual(payload["mode"], "ready")
        self.assertEqual(payload["banner"]["kind"], "success")

    def test_create_returns_store_id(self):
        created = self.client.post("/api/schedules", json=SCHEDULE, headers=AUTH)
        self.assertEqual(created.status_code, 201)
        self.assertIn(created.json()["id"], self.remote.rows[Collection.SCHEDULES])

    def test_write_failure_is_503(self):
        self.remote.fail_writes = True
        response = self.client.post("/api/schedules", json=SCHEDULE, headers=AUTH)
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["detail"], SCHEDULE_CREATE_FAILED)
        self.assertEqual(self.client.get("/api/schedules").json()["schedules"], [])


class MissingSchemaApiTests(_ApiTestCase):
    remote_configured = True

    def setUp(self):
        super().setUp()
        self.context = AppContext(
            self.settings,
            local_store=InMemoryKeyValueStore(),
            store_factory=lambda url, key: InMemoryStructuredStore(missing={Collection.SCHEDULES}),
        )
        self.context.initialize()

    def test_status_missing(self):
        payload = self.client.get("/api/status").json()
        self.assertEqual(payload["mode"], "missing")
        self.assertEqual(payload["banner"]["kind"], "warning")

    def test_writes_go_to_local_storage(self):
        created = self.client.post("/api/schedules", json=SCHEDULE, headers=AUTH)
        self.assertEqual(created.status_code, 201)
        self.assertTrue(created.json()["id"].isdigit())


if __name__ == "__main__":
    unittest.main()
