import unittest
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from portal.app.config import Settings
from portal.app.exceptions import IntakeServiceError
from portal.app.main import create_app
from portal.app.services.session_service import SessionStore
from portal.tests.fakes import InMemoryApplicantStore, intake_success

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "secret123"


class TestPortalApi(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryApplicantStore()
        self.intake_client = AsyncMock()
        self.intake_client.upload.return_value = intake_success()
        app_settings = Settings(
            CORS_ORIGINS="http://localhost:3000",
            PORTAL_PUBLIC_URL="https://portal.example.site",
            FILE_BASE_URL="https://files.example.site",
        )
        app = create_app(
            app_settings,
            store=self.store,
            intake_client=self.intake_client,
            session_store=SessionStore(ttl_minutes=60, admin_email=ADMIN_EMAIL, admin_password=ADMIN_PASSWORD),
        )
        self.client = TestClient(app)

    def login(self):
        response = self.client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        self.assertEqual(response.status_code, 200)
        return {"Authorization": f"Bearer {response.json()['token']}"}

    def create_applicant(self, headers, password="open-sesame"):
        return self.client.post(
            "/api/v1/applicants",
            data={"name": "Jane Doe", "passportNumber": "AB123456", "docPassword": password},
            files={"file": ("passport.pdf", b"%PDF-1.4", "application/pdf")},
            headers=headers,
        )

    def test_login_validation_and_failure(self):
        response = self.client.post("/api/v1/auth/login", json={"email": "not-an-email", "password": "123"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()["errors"]), {"email", "password"})

        response = self.client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong-password"})
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()["success"])

    def test_admin_routes_need_a_session(self):
        self.assertEqual(self.client.get("/api/v1/applicants").status_code, 401)
        self.assertEqual(self.client.get("/api/v1/auth/session").status_code, 401)
        self.assertEqual(
            self.client.get("/api/v1/applicants", headers={"Authorization": "Bearer made-up"}).status_code,
            401,
        )

    def test_logout_ends_the_session(self):
        headers = self.login()
        self.assertEqual(self.client.get("/api/v1/auth/session", headers=headers).json()["email"], ADMIN_EMAIL)

        self.client.post("/api/v1/auth/logout", headers=headers)

        self.assertEqual(self.client.get("/api/v1/auth/session", headers=headers).status_code, 401)

    def test_create_list_edit_delete(self):
        headers = self.login()

        created = self.create_applicant(headers)
        self.assertEqual(created.status_code, 200)
        body = created.json()
        applicant_id = body["applicant"]["id"]
        self.assertEqual(body["applicant"]["filePath"], "/uploads/AB123456/passport_1700000000000.pdf")
        self.assertEqual(body["applicationUrl"], f"https://portal.example.site/employer/document/{applicant_id}")

        listing = self.client.get("/api/v1/applicants", params={"search": "jane"}, headers=headers).json()
        self.assertEqual(listing["count"], 1)
        self.assertEqual(listing["stats"]["approved"], 1)

        edited = self.client.put(
            f"/api/v1/applicants/{applicant_id}",
            json={"name": "Jane Smith", "passportNumber": "AB123456", "docPassword": "new-pass", "status": "Pending"},
            headers=headers,
        )
        self.assertEqual(edited.status_code, 200)
        self.assertEqual(edited.json()["searchableName"], "jane smith")
        self.assertEqual(edited.json()["status"], "Pending")

        deleted = self.client.delete(f"/api/v1/applicants/{applicant_id}", headers=headers)
        self.assertEqual(deleted.json(), {"success": True, "message": "Applicant deleted successfully!", "errors": None})
        self.assertEqual(self.client.get(f"/api/v1/applicants/{applicant_id}", headers=headers).status_code, 404)

    def test_create_requires_every_field(self):
        headers = self.login()
        response = self.client.post(
            "/api/v1/applicants",
            data={"name": "Jane Doe", "passportNumber": "AB123456"},
            files={"file": ("passport.pdf", b"%PDF-1.4", "application/pdf")},
            headers=headers,
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Please fill all fields and select a file")
        self.intake_client.upload.assert_not_awaited()

    def test_rejected_upload_creates_no_record(self):
        headers = self.login()
        self.intake_client.upload.side_effect = IntakeServiceError("Invalid file type. Only JPG, PNG, PDF allowed.")

        response = self.create_applicant(headers)

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["message"], "Invalid file type. Only JPG, PNG, PDF allowed.")
        self.assertEqual(self.store.documents, {})

    def test_employer_views_hide_secrets(self):
        headers = self.login()
        applicant_id = self.create_applicant(headers).json()["applicant"]["id"]

        listing = self.client.get("/api/v1/employer/applicants").json()
        self.assertEqual(listing["count"], 1)
        entry = listing["applicants"][0]
        for hidden in ("docPassword", "filePath", "fileUrl"):
            self.assertNotIn(hidden, entry)

        summary = self.client.get(f"/api/v1/documents/{applicant_id}").json()
        self.assertEqual(summary, {
            "id": applicant_id,
            "name": "Jane Doe",
            "passportNumber": "AB123456",
            "status": "Approved"
        })

    def test_document_access_flow(self):
        headers = self.login()
        applicant_id = self.create_applicant(headers, password="Open-Sesame").json()["applicant"]["id"]
        access_url = f"/api/v1/documents/{applicant_id}/access"

        empty = self.client.post(access_url, json={"password": ""})
        self.assertEqual(empty.status_code, 400)
        self.assertEqual(empty.json()["message"], "Please enter the document password")

        wrong = self.client.post(access_url, json={"password": "open-sesame"})
        self.assertEqual(wrong.status_code, 200)
        self.assertFalse(wrong.json()["granted"])
        self.assertIsNone(wrong.json()["applicant"])

        right = self.client.post(access_url, json={"password": "Open-Sesame"})
        body = right.json()
        self.assertTrue(body["granted"])
        self.assertEqual(
            body["applicant"]["fileUrl"],
            "https://files.example.site/uploads/AB123456/passport_1700000000000.pdf",
        )
        self.assertEqual(body["applicant"]["fileKind"], "pdf")
        self.assertNotIn("docPassword", body["applicant"])

    def test_malformed_requests_use_the_error_envelope(self):
        headers = self.login()
        applicant_id = self.create_applicant(headers).json()["applicant"]["id"]

        edited = self.client.put(f"/api/v1/applicants/{applicant_id}", json={"name": "Jane"}, headers=headers)
        self.assertEqual(edited.status_code, 400)
        self.assertFalse(edited.json()["success"])
        self.assertIn("passportNumber", edited.json()["errors"])
        self.assertIn("docPassword", edited.json()["errors"])

        bad_status = self.client.put(
            f"/api/v1/applicants/{applicant_id}",
            json={"name": "Jane", "passportNumber": "AB1", "docPassword": "pw", "status": "review"},
            headers=headers,
        )
        self.assertEqual(bad_status.status_code, 400)
        self.assertIn("status", bad_status.json()["errors"])

        no_body = self.client.post(f"/api/v1/documents/{applicant_id}/access")
        self.assertEqual(no_body.status_code, 400)
        self.assertFalse(no_body.json()["success"])

        bad_json = self.client.post(
            "/api/v1/auth/login",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(bad_json.status_code, 400)
        self.assertFalse(bad_json.json()["success"])

        bad_sort = self.client.get("/api/v1/employer/applicants", params={"sort": "bogus"})
        self.assertEqual(bad_sort.status_code, 400)
        self.assertIn("sort", bad_sort.json()["errors"])

    def test_unknown_documents(self):
        for applicant_id in ("64b7f0000000000000000000", "not-an-id"):
            with self.subTest(applicant_id=applicant_id):
                response = self.client.get(f"/api/v1/documents/{applicant_id}")
                self.assertEqual(response.status_code, 404)
                self.assertEqual(response.json(), {"success": False, "message": "Document not found"})

                response = self.client.post(f"/api/v1/documents/{applicant_id}/access", json={"password": "x"})
                self.assertEqual(response.status_code, 404)

    def test_health_and_root(self):
        self.assertEqual(self.client.get("/api/v1/health").json()["status"], "healthy")
        self.assertIn("endpoints", self.client.get("/").json())


if __name__ == '__main__':
    unittest.main()
