import uuid
from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from billing import services
from billing.models import Invoice, InvoiceItem
from core.models import AuditLog
from inventory.services import create_product, create_purchase_order, create_vendor


class InvoiceApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.vendor = create_vendor(
            {
                "vendor_name": "Apex Sports",
                "contact_person": "Ravi",
                "phone": "9800000001",
                "email": "apex@example.com",
                "address": "12 Stadium Road",
                "gst": "29ABCDE1234F1Z5",
            }
        )
        self.ball = create_product({"product_name": "Football", "category": "Equipment", "unit": "pcs", "min_stock": 5})
        self.net = create_product({"product_name": "Goal Net", "category": "Equipment", "unit": "pcs", "min_stock": 1})
        self.po = create_purchase_order(
            vendor_id=self.vendor.id,
            expected_delivery="2026-11-01",
            items=[
                {"product_id": self.ball.id, "quantity": 10, "rate": Decimal("100.00")},
                {"product_id": self.net.id, "quantity": 2, "rate": Decimal("37.25")},
            ],
        )

    def _create(self, **overrides):
        payload = {
            "vendor_id": str(self.vendor.id),
            "invoice_date": "2026-10-19",
            "amount": "1074.50",
        }
        payload.update(overrides)
        return self.client.post("/api/invoices/", payload, format="json")

    def test_invoice_from_purchase_order_copies_items(self):
        response = self._create(po_id=str(self.po.id))

        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["invoice_number"], "INV001")
        self.assertEqual(data["payment_status"], "pending")
        self.assertEqual(data["status"], "active")
        self.assertEqual(data["po_reference"], self.po.po_code)
        self.assertEqual(data["purchase_order"]["po_code"], self.po.po_code)
        self.assertEqual(len(data["items"]), 2)

        items = {item["product_name"]: item for item in data["items"]}
        self.assertEqual(items["Football"]["quantity"], 10)
        self.assertEqual(items["Football"]["unit_price"], "100.00")
        self.assertEqual(items["Goal Net"]["total"], "74.50")
        self.assertEqual(items["Goal Net"]["tax"], "0.00")
        self.assertEqual(items["Goal Net"]["discount"], "0.00")

        total = sum(Decimal(item["total"]) for item in data["items"])
        self.assertEqual(total, self.po.total_amount)

    def test_explicit_po_reference_is_kept(self):
        data = self._create(po_id=str(self.po.id), po_reference="Vendor ref 77").json()["data"]

        self.assertEqual(data["po_reference"], "Vendor ref 77")

    def test_invoice_without_purchase_order(self):
        data = self._create(invoice_document="invoices/apex-001.pdf").json()["data"]

        self.assertIsNone(data["purchase_order"])
        self.assertEqual(data["items"], [])
        self.assertEqual(data["invoice_document"], "invoices/apex-001.pdf")
        self.assertEqual(self._create().json()["data"]["invoice_number"], "INV002")

    def test_required_fields(self):
        response = self.client.post("/api/invoices/", {"vendor_id": str(self.vendor.id)}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Required fields missing")

    def test_unknown_purchase_order_creates_nothing(self):
        response = self._create(po_id=str(uuid.uuid4()))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(Invoice.all_objects.count(), 0)
        self.assertEqual(InvoiceItem.objects.count(), 0)

    def test_failure_while_copying_items_rolls_back_invoice(self):
        with mock.patch.object(InvoiceItem.objects, "bulk_create", side_effect=DatabaseError("write failed")):
            with self.assertRaises(DatabaseError):
                services.create_invoice(
                    vendor_id=self.vendor.id,
                    invoice_date="2026-10-19",
                    amount="1074.50",
                    po_id=self.po.id,
                )

        self.assertEqual(Invoice.all_objects.count(), 0)
        self.assertEqual(InvoiceItem.objects.count(), 0)

    def test_invalid_payment_status_leaves_invoice_unchanged(self):
        invoice_id = self._create(po_id=str(self.po.id)).json()["data"]["id"]

        response = self.client.patch(f"/api/invoices/{invoice_id}/payment-status/", {"payment_status": "refunded"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid payment status")
        self.assertEqual(Invoice.objects.get(id=invoice_id).payment_status, Invoice.PaymentStatus.PENDING)

    def test_payment_status_returns_full_invoice(self):
        invoice_id = self._create(po_id=str(self.po.id)).json()["data"]["id"]

        response = self.client.patch(f"/api/invoices/{invoice_id}/payment-status/", {"payment_status": "paid"}, format="json")

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["payment_status"], "paid")
        self.assertEqual(data["vendor"]["email"], "apex@example.com")
        self.assertEqual(data["vendor"]["gst"], "29ABCDE1234F1Z5")
        self.assertEqual(data["purchase_order"]["total_amount"], "1074.50")
        self.assertEqual(len(data["items"]), 2)

        missing = self.client.patch(f"/api/invoices/{uuid.uuid4()}/payment-status/", {"payment_status": "paid"}, format="json")
        self.assertEqual(missing.status_code, 404)

    def test_list_search_and_filter(self):
        services.create_invoice(vendor_id=self.vendor.id, invoice_date="2026-10-01", amount="10.00", po_reference="ALPHA-9")
        paid = services.create_invoice(vendor_id=self.vendor.id, invoice_date="2026-10-02", amount="20.00")
        services.update_payment_status(paid.id, "paid")

        listing = self.client.get("/api/invoices/").json()
        self.assertEqual(listing["total"], 2)
        self.assertEqual([row["invoice_number"] for row in listing["data"]], ["INV002", "INV001"])

        self.assertEqual(self.client.get("/api/invoices/?search=alpha").json()["total"], 1)
        self.assertEqual(self.client.get("/api/invoices/?search=inv002").json()["total"], 1)
        self.assertEqual(self.client.get("/api/invoices/?payment_status=paid").json()["total"], 1)
        self.assertEqual(self.client.get("/api/invoices/?payment_status=refunded").status_code, 400)

    def test_soft_delete_and_status_toggle(self):
        invoice_id = self._create().json()["data"]["id"]

        toggle = self.client.patch(f"/api/invoices/{invoice_id}/status/", {"status": "inactive"}, format="json")
        self.assertEqual(toggle.status_code, 200)
        self.assertEqual(toggle.json()["data"], {"id": invoice_id, "status": "inactive"})

        self.assertEqual(self.client.delete(f"/api/invoices/{invoice_id}/").status_code, 200)
        self.assertEqual(self.client.get("/api/invoices/").json()["total"], 0)
        self.assertEqual(self.client.get(f"/api/invoices/{invoice_id}/").status_code, 404)
        self.assertTrue(Invoice.all_objects.get(id=invoice_id).is_deleted)

        again = self.client.delete(f"/api/invoices/{invoice_id}/")
        self.assertEqual(again.status_code, 404)
        self.assertEqual(again.json()["message"], "Invoice not found or already deleted")

    def test_status_changes_are_audited_with_previous_values(self):
        invoice_id = self._create().json()["data"]["id"]

        malformed = self.client.patch(f"/api/invoices/{invoice_id}/payment-status/", ["paid"], format="json")
        self.assertEqual(malformed.status_code, 400)
        self.assertEqual(malformed.json()["code"], "validation_error")

        self.client.patch(f"/api/invoices/{invoice_id}/payment-status/", {"payment_status": "paid"}, format="json")
        self.client.patch(f"/api/invoices/{invoice_id}/status/", {"status": "inactive"}, format="json")

        payment_log = AuditLog.objects.get(action="invoice.payment_status")
        self.assertEqual(payment_log.before_snapshot, {"payment_status": "pending"})
        self.assertEqual(payment_log.after_snapshot, {"payment_status": "paid"})

        status_log = AuditLog.objects.get(action="invoice.status")
        self.assertEqual(status_log.before_snapshot, {"status": "active"})
        self.assertEqual(status_log.after_snapshot, {"status": "inactive"})
