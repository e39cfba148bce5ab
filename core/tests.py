from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from core.models import AuditLog


class AuditLogApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def _create_vendor(self, email, **headers):
        return self.client.post(
            "/api/vendors/",
            {"vendor_name": "Apex", "contact_person": "Ravi", "phone": "1", "email": email},
            format="json",
            **headers,
        )

    def test_mutations_are_audited_with_request_id(self):
        response = self._create_vendor("apex@example.com", HTTP_X_REQUEST_ID="req-123")

        self.assertEqual(response["X-Request-ID"], "req-123")
        vendor_id = response.json()["data"]["id"]
        self.client.patch(f"/api/vendors/{vendor_id}/status/", {"status": "inactive"}, format="json")

        log = AuditLog.objects.get(action="vendor.create")
        self.assertEqual(log.entity, "vendor")
        self.assertEqual(str(log.entity_id), vendor_id)
        self.assertEqual(log.request_id, "req-123")
        self.assertEqual(log.after_snapshot["vendor_code"], "VEN001")
        self.assertIsNone(log.actor)

        status_log = AuditLog.objects.get(action="vendor.status")
        self.assertEqual(status_log.before_snapshot, {"status": "active"})
        self.assertEqual(status_log.after_snapshot, {"status": "inactive"})

    def test_list_filters_by_entity(self):
        first = self._create_vendor("one@example.com").json()["data"]["id"]
        self._create_vendor("two@example.com")

        body = self.client.get(f"/api/audit-logs/?entity=vendor&entity_id={first}").json()
        self.assertTrue(body["success"])
        self.assertEqual(body["total"], 1)
        self.assertEqual(body["data"][0]["action"], "vendor.create")

        self.assertEqual(self.client.get("/api/audit-logs/?entity=invoice").json()["total"], 0)
        self.assertEqual(self.client.get("/api/audit-logs/?entity_id=abc").status_code, 400)

        detail = self.client.get(f"/api/audit-logs/{body['data'][0]['id']}/").json()
        self.assertEqual(detail["data"]["entity"], "vendor")

    def test_export_csv(self):
        self._create_vendor("apex@example.com")

        response = self.client.get("/api/audit-logs/export/")

        self.assertEqual(response.status_code, 200)
        self.assertIn("vendor.create", response.content.decode())

    def test_authenticated_actor_is_recorded(self):
        user = get_user_model().objects.create_user(username="clerk", password="pass1234")
        self.client.force_authenticate(user=user)

        self._create_vendor("apex@example.com")

        self.assertEqual(AuditLog.objects.get(action="vendor.create").actor, user)


class TokenApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        get_user_model().objects.create_user(username="clerk", password="pass1234")

    def test_obtain_and_use_token(self):
        response = self.client.post("/api/token/", {"username": "clerk", "password": "pass1234"}, format="json")

        self.assertEqual(response.status_code, 200)
        access = response.json()["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        self.assertEqual(self.client.get("/api/vendors/").status_code, 200)

        refreshed = self.client.post("/api/token/refresh/", {"refresh": response.json()["refresh"]}, format="json")
        self.assertEqual(refreshed.status_code, 200)

    def test_bad_credentials_use_error_envelope(self):
        response = self.client.post("/api/token/", {"username": "clerk", "password": "wrong"}, format="json")

        self.assertEqual(response.status_code, 401)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["code"], "authentication_failed")
