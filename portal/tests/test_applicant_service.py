import asyncio
import io
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from portal.app.exceptions import ApplicantNotFoundError, IntakeServiceError
from portal.app.models.schemas import ApplicantStatus, ApplicantUpdate
from portal.app.services.access_gate import AccessDecision
from portal.app.services.applicant_service import ApplicantService, file_kind
from portal.tests.fakes import InMemoryApplicantStore, intake_success


class TestApplicantService(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryApplicantStore()
        self.intake_client = AsyncMock()
        self.intake_client.upload.return_value = intake_success()
        self.service = ApplicantService(
            store=self.store,
            intake_client=self.intake_client,
            file_base_url="https://files.example.site",
            portal_public_url="https://portal.example.site/",
        )

    def create(self, name="Jane Doe", passport_number="AB-123 456", password="open-sesame"):
        return asyncio.run(self.service.create_applicant(
            name=name,
            passport_number=passport_number,
            doc_password=password,
            file_obj=io.BytesIO(b"%PDF"),
            filename="passport.pdf",
            content_type="application/pdf",
            created_by="admin@example.com",
        ))

    def seed(self, name, passport_number, status, uploaded_at):
        return self.store.save_document({
            "name": name,
            "passportNumber": passport_number,
            "docPassword": "pw",
            "status": status,
            "uploadedAt": uploaded_at,
        })

    def test_create_records_confirmed_file_address(self):
        record, url = self.create()

        self.intake_client.upload.assert_awaited_once()
        args = self.intake_client.upload.await_args.args
        self.assertEqual(args[1:], ("passport.pdf", "application/pdf", "AB-123 456"))

        self.assertEqual(record.filePath, "/uploads/AB123456/passport_1700000000000.pdf")
        self.assertEqual(record.fileUrl, "https://files.example.site/uploads/AB123456/passport_1700000000000.pdf")
        self.assertEqual(record.fileName, "passport.pdf")
        self.assertEqual(record.fileSize, 2048)
        self.assertEqual(record.status, ApplicantStatus.APPROVED)
        self.assertEqual(record.createdBy, "admin@example.com")
        self.assertEqual(record.searchableName, "jane doe")
        self.assertEqual(record.searchablePassport, "ab-123 456")
        self.assertEqual(url, f"https://portal.example.site/employer/document/{record.id}")

        stored = self.store.get_document(record.id)
        self.assertEqual(stored["docPassword"], "open-sesame")

    def test_failed_upload_writes_no_record(self):
        self.intake_client.upload.side_effect = IntakeServiceError("Invalid file type. Only JPG, PNG, PDF allowed.")

        with self.assertRaises(IntakeServiceError):
            self.create()
        self.assertEqual(self.store.documents, {})

    def test_list_filters_sorts_and_counts(self):
        now = datetime(2026, 3, 1, tzinfo=timezone.utc)
        self.seed("Charlie", "ZZ999", "Pending", now - timedelta(days=2))
        self.seed("alice", "AB123", "Approved", now - timedelta(days=1))
        self.seed("Bob", "CD456", "Rejected", now)

        records, stats = self.service.list_applicants()
        self.assertEqual([r.name for r in records], ["Bob", "alice", "Charlie"])
        self.assertEqual((stats.total, stats.approved, stats.pending, stats.rejected), (3, 1, 1, 1))

        records, _ = self.service.list_applicants(sort="oldest")
        self.assertEqual([r.name for r in records], ["Charlie", "alice", "Bob"])

        records, _ = self.service.list_applicants(sort="name")
        self.assertEqual([r.name for r in records], ["alice", "Bob", "Charlie"])

        records, stats = self.service.list_applicants(search="ab1")
        self.assertEqual([r.name for r in records], ["alice"])
        self.assertEqual(stats.total, 3)

        records, _ = self.service.list_applicants(search="CHAR")
        self.assertEqual([r.name for r in records], ["Charlie"])

        records, _ = self.service.list_applicants(status="pending")
        self.assertEqual([r.name for r in records], ["Charlie"])

        records, _ = self.service.list_applicants(status="all")
        self.assertEqual(len(records), 3)

    def test_update_refreshes_mirror_fields(self):
        record, _ = self.create()

        updated = self.service.update_applicant(
            record.id,
            ApplicantUpdate(name="Janet DOE", passportNumber="XY777", docPassword="new-pass",
                            status=ApplicantStatus.REJECTED),
            updated_by="admin@example.com",
        )

        self.assertEqual(updated.name, "Janet DOE")
        self.assertEqual(updated.searchableName, "janet doe")
        self.assertEqual(updated.searchablePassport, "xy777")
        self.assertEqual(updated.status, ApplicantStatus.REJECTED)
        self.assertIsNotNone(updated.updatedAt)
        self.assertEqual(updated.filePath, record.filePath)

    def test_update_and_delete_unknown_record(self):
        update = ApplicantUpdate(name="a", passportNumber="b", docPassword="c")
        with self.assertRaises(ApplicantNotFoundError):
            self.service.update_applicant("64b7f0000000000000000000", update, updated_by="admin")
        with self.assertRaises(ApplicantNotFoundError):
            self.service.delete_applicant("not-an-object-id", deleted_by="admin")

    def test_delete_removes_only_the_record(self):
        record, _ = self.create()

        self.service.delete_applicant(record.id, deleted_by="admin@example.com")

        with self.assertRaises(ApplicantNotFoundError):
            self.service.get_applicant(record.id)

    def test_unlock_document(self):
        record, _ = self.create(password="Open-Sesame")

        decision, details = self.service.unlock_document(record.id, "open-sesame")
        self.assertEqual(decision, AccessDecision.DENIED)
        self.assertIsNone(details)

        decision, details = self.service.unlock_document(record.id, "Open-Sesame")
        self.assertEqual(decision, AccessDecision.GRANTED)
        self.assertEqual(details.fileUrl, record.fileUrl)
        self.assertEqual(details.fileKind, "pdf")
        self.assertNotIn("docPassword", details.model_dump())

    def test_unknown_status_reads_as_pending(self):
        applicant_id = self.seed("Dana", "EF1", "review", None)
        self.assertEqual(self.service.get_applicant(applicant_id).status, ApplicantStatus.PENDING)


class TestFileKind(unittest.TestCase):

    def test_kinds(self):
        self.assertEqual(file_kind("scan.PDF"), "pdf")
        self.assertEqual(file_kind("photo.jpeg"), "image")
        self.assertEqual(file_kind("photo.png"), "image")
        self.assertEqual(file_kind("letter.docx"), "document")
        self.assertEqual(file_kind(None), "document")


if __name__ == '__main__':
    unittest.main()
