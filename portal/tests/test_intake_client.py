import asyncio
import io
import unittest
from unittest.mock import MagicMock

import requests

from portal.app.exceptions import IntakeServiceError
from portal.app.services.intake_client import IntakeClient
from portal.tests.fakes import intake_success


def json_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.headers = {"content-type": "application/json; charset=utf-8"}
    response.json.return_value = payload
    return response


class TestIntakeClient(unittest.TestCase):

    def setUp(self):
        self.session = MagicMock()
        self.client = IntakeClient(base_url="http://intake.local:3000/", timeout=5, session=self.session)

    def upload(self):
        return asyncio.run(self.client.upload(io.BytesIO(b"%PDF"), "passport.pdf", "application/pdf", "AB123456"))

    def test_posts_multipart_to_the_upload_endpoint(self):
        self.session.post.return_value = json_response(intake_success())

        result = self.upload()

        self.assertEqual(result["filePath"], "/uploads/AB123456/passport_1700000000000.pdf")
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "http://intake.local:3000/upload")
        self.assertEqual(kwargs["data"], {"passportNumber": "AB123456"})
        self.assertEqual(kwargs["files"]["file"][0], "passport.pdf")
        self.assertEqual(kwargs["files"]["file"][2], "application/pdf")
        self.assertEqual(kwargs["timeout"], 5)

    def test_rejection_message_is_passed_through(self):
        self.session.post.return_value = json_response(
            {"success": False, "message": "Invalid file type. Only JPG, PNG, PDF allowed."},
            status_code=400,
        )

        with self.assertRaises(IntakeServiceError) as ctx:
            self.upload()
        self.assertEqual(ctx.exception.message, "Invalid file type. Only JPG, PNG, PDF allowed.")
        self.assertEqual(ctx.exception.status_code, 502)

    def test_success_without_file_path_is_not_trusted(self):
        self.session.post.return_value = json_response({"success": True})

        with self.assertRaises(IntakeServiceError):
            self.upload()

    def test_non_json_response(self):
        response = MagicMock()
        response.status_code = 502
        response.headers = {"content-type": "text/html"}
        response.text = "<html>Bad Gateway</html>"
        self.session.post.return_value = response

        with self.assertRaises(IntakeServiceError) as ctx:
            self.upload()
        self.assertIn("non-JSON", ctx.exception.message)

    def test_malformed_json_body(self):
        response = json_response(None, status_code=200)
        response.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
        self.session.post.return_value = response

        with self.assertRaises(IntakeServiceError) as ctx:
            self.upload()
        self.assertIn("malformed JSON", ctx.exception.message)
        self.assertEqual(ctx.exception.status_code, 502)

    def test_timeout(self):
        self.session.post.side_effect = requests.exceptions.Timeout()

        with self.assertRaises(IntakeServiceError) as ctx:
            self.upload()
        self.assertEqual(ctx.exception.message, "Upload timeout - server took too long to respond")

    def test_connection_error(self):
        self.session.post.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(IntakeServiceError) as ctx:
            self.upload()
        self.assertIn("Failed to upload file", ctx.exception.message)


if __name__ == '__main__':
    unittest.main()
