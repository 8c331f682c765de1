import os
import tempfile
import unittest

from fastapi.testclient import TestClient

from greenfund.app import create_app
from greenfund.config import Settings
from greenfund.errors import StoreError
from greenfund.store import CAMPAIGNS, DONATIONS, USERS, InMemoryJsonStore


class _ReadOnlyStore(InMemoryJsonStore):
    def save(self, name, value):
        raise StoreError(f"Failed to write {name}")


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        settings = Settings(
            _env_file=None,
            data_dir=os.path.join(self.tmp.name, "data"),
            uploads_dir=os.path.join(self.tmp.name, "uploads"),
            use_in_memory_backends=False,
        )
        self.app = create_app(settings)
        self.store = self.app.state.json_store
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def test_health(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertIn("time", response.json())

    def test_startup_seeds_data_dir(self):
        for name in ("campaigns.json", "donations.json", "users.json", "admins.json", "settings.json"):
            self.assertIsNotNone(self.store.load(name), name)

    def test_public_listing_hides_pending(self):
        self.client.post("/api/campaigns", data={"campaignTitle": "Pending one"})

        public = self.client.get("/api/campaigns").json()
        self.assertEqual([c["id"] for c in public], [1, 2, 3])
        pending = self.client.get("/api/campaigns", params={"status": "pending"}).json()
        self.assertEqual([c["title"] for c in pending], ["Pending one"])
        self.assertEqual(len(self.client.get("/api/admin/campaigns").json()), 4)
        self.assertEqual(
            self.client.get("/api/admin/pending-count").json(), {"pendingCount": 1}
        )

    def test_get_campaign(self):
        response = self.client.get("/api/campaigns/2")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["title"], "Portable Solar Power Bank")

        missing = self.client.get("/api/campaigns/999")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json(), {"message": "Not found"})

    def test_create_campaign_with_uploads_and_serve_them(self):
        response = self.client.post(
            "/api/campaigns",
            data={
                "campaignTitle": "Solar School",
                "campaignDescription": "Panels for a rural school",
                "fundingGoal": "75000",
                "campaignDuration": "60",
                "location": "Jaipur",
                "category": "Education",
            },
            files=[
                ("campaignImage", ("cover.png", b"cover-bytes", "image/png")),
                ("additionalImages", ("one.jpg", b"one", "image/jpeg")),
                ("additionalImages", ("two.jpg", b"two", "image/jpeg")),
            ],
        )
        self.assertEqual(response.status_code, 201)
        campaign = response.json()
        self.assertEqual(campaign["id"], 4)
        self.assertEqual(campaign["status"], "pending")
        self.assertEqual(campaign["goal"], 75000)
        self.assertEqual(campaign["daysLeft"], 60)
        self.assertEqual(len(campaign["additionalImages"]), 2)

        served = self.client.get(campaign["image"])
        self.assertEqual(served.status_code, 200)
        self.assertEqual(served.content, b"cover-bytes")

    def test_create_campaign_rejects_too_many_images(self):
        files = [
            ("additionalImages", (f"{i}.jpg", b"x", "image/jpeg")) for i in range(6)
        ]
        response = self.client.post("/api/campaigns", data={"campaignTitle": "Big"}, files=files)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(len(self.store.load(CAMPAIGNS)), 3)

    def test_review_campaign(self):
        created = self.client.post("/api/campaigns", data={"campaignTitle": "Review me"}).json()

        bad = self.client.put(
            f"/api/admin/campaigns/{created['id']}/status", json={"status": "archived"}
        )
        self.assertEqual(bad.status_code, 400)
        self.assertEqual(
            bad.json(), {"message": "Invalid status. Must be approved or rejected"}
        )

        missing = self.client.put("/api/admin/campaigns/999/status", json={"status": "approved"})
        self.assertEqual(missing.status_code, 404)

        ok = self.client.put(
            f"/api/admin/campaigns/{created['id']}/status", json={"status": "approved"}
        )
        self.assertEqual(ok.status_code, 200)
        self.assertTrue(ok.json()["success"])
        self.assertEqual(ok.json()["campaign"]["status"], "approved")
        public_ids = [c["id"] for c in self.client.get("/api/campaigns").json()]
        self.assertIn(created["id"], public_ids)

    def test_donation(self):
        before = self.client.get("/api/campaigns/1").json()
        response = self.client.post(
            "/api/campaigns/1/donations",
            json={"amount": "500", "donorName": "Kiran", "donorEmail": "kiran@example.test"},
        )
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["donation"]["amount"], 500)
        self.assertEqual(payload["donation"]["campaignId"], 1)
        self.assertEqual(payload["campaign"]["raised"], before["raised"] + 500)
        self.assertEqual(payload["campaign"]["backers"], before["backers"] + 1)
        self.assertEqual(len(self.store.load(DONATIONS)), 1)

    def test_invalid_donation(self):
        campaigns = self.store.load(CAMPAIGNS)
        for body in ({"amount": 0}, {"amount": -10}, {"amount": "lots"}, {}):
            response = self.client.post("/api/campaigns/1/donations", json=body)
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json(), {"message": "Invalid amount"})
        self.assertEqual(self.store.load(CAMPAIGNS), campaigns)
        self.assertEqual(self.store.load(DONATIONS), [])

        missing = self.client.post("/api/campaigns/999/donations", json={"amount": 5})
        self.assertEqual(missing.status_code, 404)

    def test_storage_failure_is_an_internal_error(self):
        self.app.state.json_store = _ReadOnlyStore()
        with self.assertLogs("greenfund.errors", level="ERROR"):
            response = self.client.post(
                "/api/auth/register",
                json={"email": "ana@example.test", "password": "secret"},
            )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Internal server error"})

    def test_corrupt_campaigns_document_lists_nothing(self):
        with open(os.path.join(self.tmp.name, "data", "campaigns.json"), "w") as f:
            f.write("{}")
        response = self.client.get("/api/campaigns")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])

    def test_malformed_json_is_a_client_error(self):
        response = self.client.post(
            "/api/auth/login",
            content=b"{broken",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Invalid request"})

    def test_register_login_flow(self):
        body = {
            "firstName": "Ana",
            "lastName": "Das",
            "email": "ana@example.test",
            "phone": "555",
            "password": "secret",
        }
        created = self.client.post("/api/auth/register", json=body)
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json(), {"id": 1, "email": "ana@example.test"})

        duplicate = self.client.post("/api/auth/register", json=body)
        self.assertEqual(duplicate.status_code, 409)
        self.assertEqual(len(self.store.load(USERS)), 1)

        missing = self.client.post("/api/auth/register", json={"email": "x@example.test"})
        self.assertEqual(missing.status_code, 400)

        login = self.client.post(
            "/api/auth/login", json={"email": "ana@example.test", "password": "secret"}
        )
        self.assertEqual(login.status_code, 200)
        self.assertEqual(login.json()["name"], "Ana Das")
        self.assertTrue(login.json()["token"].startswith("user_"))

        wrong = self.client.post(
            "/api/auth/login", json={"email": "ana@example.test", "password": "nope"}
        )
        self.assertEqual(wrong.status_code, 401)

    def test_admin_login(self):
        ok = self.client.post(
            "/api/admin/login",
            json={"username": "admin", "password": "admin123", "code": "GREENFUND2024"},
        )
        self.assertEqual(ok.status_code, 200)
        self.assertTrue(ok.json()["token"].startswith("admin_"))

        bad = self.client.post(
            "/api/admin/login", json={"username": "admin", "password": "admin123"}
        )
        self.assertEqual(bad.status_code, 401)
        self.assertEqual(bad.json(), {"message": "Invalid credentials"})

    def test_kyc_submission(self):
        response = self.client.post(
            "/api/kyc",
            data={"aadhaarNumber": "1234", "fullName": "Meera", "panNumber": "ABCDE1234F"},
            files={
                "aadhaarFront": ("front.jpg", b"front", "image/jpeg"),
                "panPhoto": ("pan.jpg", b"pan", "image/jpeg"),
            },
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json(), {"success": True, "status": "pending"})

        records = self.store.load("kyc.json")
        self.assertEqual(len(records), 1)
        self.assertEqual(set(records[0]["files"]), {"aadhaarFront", "panPhoto"})
        pan = self.client.get(f"/uploads/{records[0]['files']['panPhoto']}")
        self.assertEqual(pan.content, b"pan")

    def test_contact(self):
        ok = self.client.post(
            "/api/contact",
            json={"firstName": "Sam", "email": "sam@example.test", "subject": "Hi", "message": "Hello"},
        )
        self.assertEqual(ok.status_code, 201)
        self.assertEqual(ok.json(), {"success": True})

        bad = self.client.post("/api/contact", json={"firstName": "Sam"})
        self.assertEqual(bad.status_code, 400)
        self.assertEqual(len(self.store.load("messages.json")), 1)


class InMemoryBackendTests(unittest.TestCase):
    def test_in_memory_backends(self):
        app = create_app(Settings(_env_file=None, use_in_memory_backends=True))
        with TestClient(app) as client:
            created = client.post(
                "/api/campaigns",
                data={"campaignTitle": "Memory"},
                files={"campaignImage": ("c.png", b"png", "image/png")},
            )
            self.assertEqual(created.status_code, 201)
            self.assertEqual(created.json()["id"], 4)
            storage = app.state.upload_storage
            self.assertEqual(list(storage.stored_files.values()), [b"png"])


class FrontendMountTests(unittest.TestCase):
    def test_serves_index_alongside_api(self):
        with tempfile.TemporaryDirectory() as tmp:
            frontend = os.path.join(tmp, "site")
            os.makedirs(frontend)
            with open(os.path.join(frontend, "index.html"), "w", encoding="utf-8") as f:
                f.write("<h1>GreenFund</h1>")
            settings = Settings(
                _env_file=None,
                data_dir=os.path.join(tmp, "data"),
                uploads_dir=os.path.join(tmp, "uploads"),
                frontend_dir=frontend,
            )
            with TestClient(create_app(settings)) as client:
                index = client.get("/")
                self.assertEqual(index.status_code, 200)
                self.assertIn("<h1>GreenFund</h1>", index.text)
                self.assertEqual(client.get("/api/health").status_code, 200)


if __name__ == "__main__":
    unittest.main()
