from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from demoday.tests.helpers import make_demoday, make_user, schedule_with_open_phase


class HealthCheckTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_ok_without_active_demoday(self):
        resp = self.client.get("/api/health/")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "ok")
        self.assertTrue(body["db"])
        self.assertIsNone(body["active_demoday"])
        self.assertIsNone(body["current_phase"])

    def test_reports_active_demoday_phase(self):
        admin = make_user("admin", role="admin")
        demoday = make_demoday(admin, phases=schedule_with_open_phase(3))

        body = self.client.get("/api/health/").json()
        self.assertEqual(body["active_demoday"]["id"], demoday.id)
        self.assertEqual(body["current_phase"], 3)

    def test_database_down_is_degraded(self):
        with mock.patch("core.views._database_ok", return_value=False):
            resp = self.client.get("/api/health/")
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["status"], "degraded")
        self.assertNotIn("active_demoday", resp.json())
