import uuid
from datetime import date, timedelta
from decimal import Decimal

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.exceptions import NotFound
from rest_framework.test import APIClient

from billing.models import Invoice
from core.models import AuditLog
from inventory import services
from inventory.models import GoodsReceipt, GoodsReceiptItem, Product, PurchaseOrder, PurchaseOrderItem, Vendor


def make_vendor(**overrides):
    data = {
        "vendor_name": "Apex Sports",
        "contact_person": "Ravi",
        "phone": "9800000001",
        "email": f"vendor-{uuid.uuid4().hex[:8]}@example.com",
    }
    data.update(overrides)
    return services.create_vendor(data)


def make_product(**overrides):
    data = {"product_name": "Football", "category": "Equipment", "unit": "pcs", "min_stock": 5}
    data.update(overrides)
    return services.create_product(data)


def make_po(vendor, lines, expected_delivery=None):
    return services.create_purchase_order(
        vendor_id=vendor.id,
        expected_delivery=expected_delivery or date.today() + timedelta(days=7),
        items=[{"product_id": product.id, "quantity": qty, "rate": Decimal(rate)} for product, qty, rate in lines],
    )


class VendorApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def _payload(self, **overrides):
        payload = {
            "vendor_name": "Apex Sports",
            "contact_person": "Ravi",
            "phone": "9800000001",
            "email": "apex@example.com",
            "categories": ["Equipment"],
        }
        payload.update(overrides)
        return payload

    def test_create_vendor_allocates_sequential_codes(self):
        first = self.client.post("/api/vendors/", self._payload(), format="json")
        second = self.client.post("/api/vendors/", self._payload(email="other@example.com"), format="json")

        self.assertEqual(first.status_code, 201)
        body = first.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Vendor created successfully")
        self.assertEqual(body["data"]["vendor_code"], "VEN001")
        self.assertEqual(body["data"]["status"], "active")
        self.assertEqual(body["data"]["categories"], ["Equipment"])
        self.assertEqual(second.json()["data"]["vendor_code"], "VEN002")
        self.assertTrue(AuditLog.objects.filter(action="vendor.create", entity_id=body["data"]["id"]).exists())

    def test_missing_required_fields(self):
        response = self.client.post("/api/vendors/", {"vendor_name": "Only name"}, format="json")

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["code"], "validation_error")
        self.assertEqual(body["message"], "Required fields missing")
        self.assertIn("email", body["errors"])

    def test_invalid_email_format(self):
        response = self.client.post("/api/vendors/", self._payload(email="not-an-email"), format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid email format")

    def test_duplicate_email_conflicts(self):
        self.client.post("/api/vendors/", self._payload(), format="json")
        response = self.client.post("/api/vendors/", self._payload(vendor_name="Copy"), format="json")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "conflict")
        self.assertEqual(response.json()["message"], "Vendor already exists")
        self.assertEqual(Vendor.all_objects.count(), 1)

    def test_email_check_is_case_sensitive(self):
        self.client.post("/api/vendors/", self._payload(), format="json")
        response = self.client.post("/api/vendors/", self._payload(email="APEX@example.com"), format="json")

        self.assertEqual(response.status_code, 201)

    def test_duplicate_email_of_soft_deleted_vendor_conflicts(self):
        vendor = make_vendor(email="gone@example.com")
        services.delete_vendor(vendor.id)

        response = self.client.post("/api/vendors/", self._payload(email="gone@example.com"), format="json")

        self.assertEqual(response.status_code, 409)

    def test_update_rejects_email_in_use(self):
        make_vendor(email="taken@example.com")
        vendor = make_vendor(email="mine@example.com")

        response = self.client.put(f"/api/vendors/{vendor.id}/", {"email": "taken@example.com"}, format="json")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["message"], "Email already in use")

        same = self.client.put(f"/api/vendors/{vendor.id}/", {"email": "mine@example.com", "phone": "111"}, format="json")
        self.assertEqual(same.status_code, 200)
        self.assertEqual(same.json()["data"]["phone"], "111")

    def test_soft_deleted_vendor_hidden_but_resolvable(self):
        vendor = make_vendor()
        product = make_product()
        po = make_po(vendor, [(product, 2, "10.00")])

        response = self.client.delete(f"/api/vendors/{vendor.id}/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Vendor deleted successfully")

        listing = self.client.get("/api/vendors/").json()
        self.assertEqual(listing["total"], 0)
        self.assertEqual(listing["data"], [])

        self.assertFalse(Vendor.objects.filter(id=vendor.id).exists())
        stored = Vendor.all_objects.get(id=vendor.id)
        self.assertTrue(stored.is_deleted)
        self.assertIsNotNone(stored.deleted_at)

        self.assertEqual(self.client.get(f"/api/vendors/{vendor.id}/").status_code, 404)
        detail = self.client.get(f"/api/vendors/{vendor.id}/?include_deleted=true")
        self.assertEqual(detail.status_code, 200)
        self.assertTrue(detail.json()["data"]["is_deleted"])

        po_detail = self.client.get(f"/api/purchase-orders/{po.id}/").json()["data"]
        self.assertEqual(po_detail["vendor_name"], vendor.vendor_name)

    def test_delete_twice_is_not_found(self):
        vendor = make_vendor()
        self.client.delete(f"/api/vendors/{vendor.id}/")

        response = self.client.delete(f"/api/vendors/{vendor.id}/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Vendor not found or already deleted")

    def test_status_toggle(self):
        vendor = make_vendor()

        response = self.client.patch(f"/api/vendors/{vendor.id}/status/", {"status": "inactive"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"], {"id": str(vendor.id), "status": "inactive"})
        vendor.refresh_from_db()
        self.assertIsNotNone(vendor.status_updated_at)

        invalid = self.client.patch(f"/api/vendors/{vendor.id}/status/", {"status": "archived"}, format="json")
        self.assertEqual(invalid.status_code, 400)
        self.assertEqual(invalid.json()["message"], "Invalid status value")

    def test_list_search_sort_and_pagination(self):
        make_vendor(vendor_name="Zeta Supplies", email="zeta@example.com")
        make_vendor(vendor_name="Alpha Gear", email="alpha@example.com")
        make_vendor(vendor_name="Mid Traders", email="mid@example.com", status="inactive")

        page = self.client.get("/api/vendors/?limit=2").json()
        self.assertEqual(page["total"], 3)
        self.assertEqual(page["page"], 1)
        self.assertEqual(page["total_pages"], 2)
        self.assertEqual(len(page["data"]), 2)

        search = self.client.get("/api/vendors/?search=ALPHA").json()
        self.assertEqual([row["vendor_name"] for row in search["data"]], ["Alpha Gear"])

        by_code = self.client.get("/api/vendors/?search=VEN003").json()
        self.assertEqual([row["vendor_name"] for row in by_code["data"]], ["Mid Traders"])

        ordered = self.client.get("/api/vendors/?sort_by=vendor_name&order=asc").json()
        self.assertEqual([row["vendor_name"] for row in ordered["data"]], ["Alpha Gear", "Mid Traders", "Zeta Supplies"])

        inactive = self.client.get("/api/vendors/?status=inactive").json()
        self.assertEqual(inactive["total"], 1)

        self.assertEqual(self.client.get("/api/vendors/?sort_by=password").status_code, 400)

    def test_empty_list_envelope(self):
        body = self.client.get("/api/vendors/").json()

        self.assertEqual(body, {"success": True, "total": 0, "page": 1, "total_pages": 0, "data": []})

    def test_malformed_id_returns_json_not_found(self):
        response = self.client.get("/api/vendors/not-a-uuid/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response["Content-Type"], "application/json")
        self.assertEqual(
            response.json(),
            {"success": False, "code": "not_found", "message": "Resource not found.", "errors": None},
        )


class ProductApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_create_product_starts_with_zero_stock(self):
        response = self.client.post(
            "/api/products/",
            {"product_name": "Shuttle Tube", "category": "Equipment", "unit": "box", "min_stock": 0, "current_stock": 50},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["product_code"], "PRD001")
        self.assertEqual(data["current_stock"], 0)
        self.assertEqual(data["min_stock"], 0)
        self.assertEqual(data["status"], "in-stock")
        self.assertTrue(data["is_active"])

    def test_create_product_requires_fields(self):
        response = self.client.post("/api/products/", {"product_name": "No category"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Required fields missing")

    def test_update_ignores_current_stock(self):
        product = make_product()

        response = self.client.put(
            f"/api/products/{product.id}/",
            {"product_name": "Football Pro", "current_stock": 99, "status": "Low Stock"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        product.refresh_from_db()
        self.assertEqual(product.product_name, "Football Pro")
        self.assertEqual(product.current_stock, 0)
        self.assertEqual(product.status, Product.StockStatus.LOW_STOCK)

    def test_list_filters(self):
        make_product(product_name="Football", sport="Football")
        make_product(product_name="Racket", category="Rackets", sport="Badminton", status="low-stock")
        make_product(product_name="Paint", category="Maintenance", facility="Court")

        by_category = self.client.get("/api/products/?category=rackets").json()
        self.assertEqual([row["product_name"] for row in by_category["data"]], ["Racket"])

        by_sport = self.client.get("/api/products/?sport=football").json()
        self.assertEqual(by_sport["total"], 1)

        by_label = self.client.get("/api/products/?status=Low Stock").json()
        self.assertEqual([row["product_name"] for row in by_label["data"]], ["Racket"])

        by_legacy = self.client.get("/api/products/?status=instock").json()
        self.assertEqual(by_legacy["total"], 2)

        self.assertEqual(self.client.get("/api/products/?status=sold-out").status_code, 400)

    def test_status_toggle_and_soft_delete(self):
        product = make_product()

        toggle = self.client.patch(f"/api/products/{product.id}/status/", {"status": "inactive"}, format="json")
        self.assertEqual(toggle.status_code, 200)
        self.assertEqual(toggle.json()["data"]["status"], "inactive")
        product.refresh_from_db()
        self.assertFalse(product.is_active)
        self.assertEqual(product.status, Product.StockStatus.IN_STOCK)

        self.assertEqual(self.client.delete(f"/api/products/{product.id}/").status_code, 200)
        self.assertEqual(self.client.get(f"/api/products/{product.id}/").status_code, 404)
        self.assertEqual(self.client.get(f"/api/products/{product.id}/?include_deleted=1").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/products/{product.id}/").status_code, 404)

    def test_status_toggle_audit_keeps_previous_value(self):
        product = make_product()

        malformed = self.client.patch(f"/api/products/{product.id}/status/", ["inactive"], format="json")
        self.assertEqual(malformed.status_code, 400)
        self.assertEqual(malformed.json()["code"], "validation_error")

        self.client.patch(f"/api/products/{product.id}/status/", {"status": "inactive"}, format="json")

        log = AuditLog.objects.get(action="product.status")
        self.assertEqual(log.before_snapshot, {"is_active": True})
        self.assertEqual(log.after_snapshot, {"is_active": False})


class PurchaseOrderTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.vendor = make_vendor()
        self.ball = make_product(product_name="Football")
        self.net = make_product(product_name="Goal Net")

    def test_create_purchase_order_computes_totals(self):
        response = self.client.post(
            "/api/purchase-orders/",
            {
                "vendor_id": str(self.vendor.id),
                "expected_delivery": "2026-11-01",
                "notes": "Season restock",
                "items": [
                    {"product_id": str(self.ball.id), "quantity": 10, "rate": "100.00"},
                    {"product_id": str(self.net.id), "quantity": 3, "rate": "25.50"},
                ],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["po_code"], "PO001")
        self.assertEqual(data["status"], "draft")
        self.assertEqual(data["total_items"], 13)
        self.assertEqual(data["total_amount"], "1076.50")
        self.assertEqual(data["vendor_name"], self.vendor.vendor_name)
        self.assertEqual(sorted(item["amount"] for item in data["items"]), ["1000.00", "76.50"])
        self.assertEqual({item["product_code"] for item in data["items"]}, {self.ball.product_code, self.net.product_code})

    def test_unknown_product_creates_nothing(self):
        with self.assertRaises(NotFound):
            make_po(self.vendor, [(self.ball, 1, "5.00"), (Product(id=uuid.uuid4()), 1, "5.00")])

        self.assertEqual(PurchaseOrder.objects.count(), 0)
        self.assertEqual(PurchaseOrderItem.objects.count(), 0)

    def test_unknown_vendor(self):
        response = self.client.post(
            "/api/purchase-orders/",
            {
                "vendor_id": str(uuid.uuid4()),
                "expected_delivery": "2026-11-01",
                "items": [{"product_id": str(self.ball.id), "quantity": 1, "rate": "1.00"}],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Vendor not found")

    def test_item_validation(self):
        empty = self.client.post(
            "/api/purchase-orders/",
            {"vendor_id": str(self.vendor.id), "expected_delivery": "2026-11-01", "items": []},
            format="json",
        )
        self.assertEqual(empty.status_code, 400)
        self.assertEqual(empty.json()["message"], "Required fields missing")

        zero_qty = self.client.post(
            "/api/purchase-orders/",
            {
                "vendor_id": str(self.vendor.id),
                "expected_delivery": "2026-11-01",
                "items": [{"product_id": str(self.ball.id), "quantity": 0, "rate": "1.00"}],
            },
            format="json",
        )
        self.assertEqual(zero_qty.status_code, 400)
        self.assertEqual(PurchaseOrder.objects.count(), 0)

    def test_status_transitions_are_permissive(self):
        po = make_po(self.vendor, [(self.ball, 1, "5.00")])

        for next_status in ("sent", "received", "cancelled", "draft"):
            response = self.client.patch(f"/api/purchase-orders/{po.id}/status/", {"status": next_status}, format="json")
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json()["data"]["status"], next_status)
            self.assertEqual(len(response.json()["data"]["items"]), 1)

        invalid = self.client.patch(f"/api/purchase-orders/{po.id}/status/", {"status": "shipped"}, format="json")
        self.assertEqual(invalid.status_code, 400)
        self.assertEqual(invalid.json()["message"], "Invalid status")

        missing = self.client.patch(f"/api/purchase-orders/{uuid.uuid4()}/status/", {"status": "sent"}, format="json")
        self.assertEqual(missing.status_code, 404)

    def test_status_body_must_be_an_object(self):
        po = make_po(self.vendor, [(self.ball, 1, "5.00")])

        listed = self.client.patch(f"/api/purchase-orders/{po.id}/status/", ["sent"], format="json")
        self.assertEqual(listed.status_code, 400)
        self.assertEqual(listed.json()["code"], "validation_error")

        empty = self.client.patch(f"/api/purchase-orders/{po.id}/status/", {}, format="json")
        self.assertEqual(empty.status_code, 400)
        self.assertEqual(empty.json()["message"], "Required fields missing")

        po.refresh_from_db()
        self.assertEqual(po.status, PurchaseOrder.Status.DRAFT)

    def test_service_accepts_string_ids(self):
        po = services.create_purchase_order(
            vendor_id=str(self.vendor.id),
            expected_delivery=date.today(),
            items=[{"product_id": str(self.ball.id), "quantity": 2, "rate": Decimal("3")}],
        )

        self.assertEqual(po.vendor, self.vendor)
        self.assertEqual(po.total_items, 2)
        self.assertEqual(po.total_amount, Decimal("6.00"))
        self.assertEqual(po.items.get().product, self.ball)

    def test_list_search_and_filters(self):
        make_po(self.vendor, [(self.ball, 1, "5.00")])
        second = make_po(self.vendor, [(self.net, 2, "5.00")])
        services.update_purchase_order_status(second.id, "sent")

        listing = self.client.get("/api/purchase-orders/").json()
        self.assertEqual([row["po_code"] for row in listing["data"]], ["PO002", "PO001"])

        self.assertEqual(self.client.get("/api/purchase-orders/?search=po001").json()["total"], 1)
        self.assertEqual(self.client.get("/api/purchase-orders/?status=sent").json()["total"], 1)
        self.assertEqual(self.client.get(f"/api/purchase-orders/?vendor={self.vendor.id}").json()["total"], 2)
        self.assertEqual(self.client.get("/api/purchase-orders/?vendor=nope").status_code, 400)


class GoodsReceiptTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_end_to_end_receipt_updates_stock_and_po(self):
        vendor = self.client.post(
            "/api/vendors/",
            {"vendor_name": "V1", "contact_person": "A", "phone": "1", "email": "v1@example.com"},
            format="json",
        ).json()["data"]
        product = self.client.post(
            "/api/products/",
            {"product_name": "PR1", "category": "Equipment", "unit": "pcs", "min_stock": 5},
            format="json",
        ).json()["data"]
        po = self.client.post(
            "/api/purchase-orders/",
            {
                "vendor_id": vendor["id"],
                "expected_delivery": "2026-11-01",
                "items": [{"product_id": product["id"], "quantity": 10, "rate": "100"}],
            },
            format="json",
        ).json()["data"]
        self.assertEqual(po["total_amount"], "1000.00")

        sent = self.client.patch(f"/api/purchase-orders/{po['id']}/status/", {"status": "sent"}, format="json")
        self.assertEqual(sent.json()["data"]["status"], "sent")

        response = self.client.post(
            "/api/goods-receipts/",
            {
                "po_id": po["id"],
                "vendor_id": vendor["id"],
                "items": [{"product_id": product["id"], "ordered_qty": 10, "received_qty": 8, "damaged_qty": 2}],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["message"], "GRN created successfully and stock updated")
        self.assertEqual(body["data"]["grn_code"], "GRN001")
        self.assertEqual(body["data"]["status"], "confirmed")
        self.assertEqual(body["data"]["po_code"], po["po_code"])
        self.assertEqual(body["data"]["received_date"], timezone.localdate().isoformat())
        self.assertEqual(body["data"]["items"][0]["status"], "partial")
        self.assertEqual(body["data"]["items"][0]["damaged_qty"], 2)

        self.assertEqual(Product.objects.get(id=product["id"]).current_stock, 8)
        self.assertEqual(PurchaseOrder.objects.get(id=po["id"]).status, PurchaseOrder.Status.RECEIVED)

    def test_item_status_boundaries(self):
        vendor = make_vendor()
        a, b, c = make_product(), make_product(), make_product()
        po = make_po(vendor, [(a, 5, "1.00"), (b, 10, "1.00"), (c, 10, "1.00")])

        grn = services.create_goods_receipt(
            po_id=po.id,
            vendor_id=vendor.id,
            items=[
                {"product_id": a.id, "ordered_qty": 5, "received_qty": 0},
                {"product_id": b.id, "ordered_qty": 10, "received_qty": 10},
                {"product_id": c.id, "ordered_qty": 10, "received_qty": 12},
            ],
        )

        statuses = {item.product_id: item.status for item in grn.items.all()}
        self.assertEqual(statuses[a.id], GoodsReceiptItem.Status.PARTIAL)
        self.assertEqual(statuses[b.id], GoodsReceiptItem.Status.COMPLETE)
        self.assertEqual(statuses[c.id], GoodsReceiptItem.Status.COMPLETE)
        a.refresh_from_db()
        c.refresh_from_db()
        self.assertEqual(a.current_stock, 0)
        self.assertEqual(c.current_stock, 12)

    def test_receipt_marks_cancelled_po_received(self):
        vendor = make_vendor()
        product = make_product()
        po = make_po(vendor, [(product, 1, "1.00")])
        services.update_purchase_order_status(po.id, "cancelled")

        services.create_goods_receipt(
            po_id=po.id,
            vendor_id=vendor.id,
            items=[{"product_id": product.id, "ordered_qty": 1, "received_qty": 1}],
        )

        po.refresh_from_db()
        self.assertEqual(po.status, PurchaseOrder.Status.RECEIVED)

    def test_one_unknown_product_rolls_back_everything(self):
        vendor = make_vendor()
        first, third = make_product(), make_product()
        po = make_po(vendor, [(first, 4, "1.00"), (third, 4, "1.00")])

        response = self.client.post(
            "/api/goods-receipts/",
            {
                "po_id": str(po.id),
                "vendor_id": str(vendor.id),
                "items": [
                    {"product_id": str(first.id), "ordered_qty": 4, "received_qty": 4},
                    {"product_id": str(uuid.uuid4()), "ordered_qty": 4, "received_qty": 4},
                    {"product_id": str(third.id), "ordered_qty": 4, "received_qty": 4},
                ],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "not_found")
        self.assertEqual(GoodsReceipt.objects.count(), 0)
        self.assertEqual(GoodsReceiptItem.objects.count(), 0)
        first.refresh_from_db()
        third.refresh_from_db()
        self.assertEqual(first.current_stock, 0)
        self.assertEqual(third.current_stock, 0)
        po.refresh_from_db()
        self.assertEqual(po.status, PurchaseOrder.Status.DRAFT)

    def test_unknown_purchase_order(self):
        vendor = make_vendor()
        product = make_product()

        with self.assertRaises(NotFound):
            services.create_goods_receipt(
                po_id=uuid.uuid4(),
                vendor_id=vendor.id,
                items=[{"product_id": product.id, "ordered_qty": 1, "received_qty": 1}],
            )
        self.assertEqual(GoodsReceipt.objects.count(), 0)

    def test_negative_received_quantity_rejected(self):
        response = self.client.post(
            "/api/goods-receipts/",
            {
                "po_id": str(uuid.uuid4()),
                "vendor_id": str(uuid.uuid4()),
                "items": [{"product_id": str(uuid.uuid4()), "ordered_qty": 1, "received_qty": -1}],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 400)

    def test_list_unpaginated_unless_requested(self):
        vendor = make_vendor()
        product = make_product()
        po = make_po(vendor, [(product, 2, "1.00")])
        for _ in range(2):
            services.create_goods_receipt(
                po_id=po.id,
                vendor_id=vendor.id,
                items=[{"product_id": product.id, "ordered_qty": 2, "received_qty": 1}],
            )

        plain = self.client.get("/api/goods-receipts/").json()
        self.assertNotIn("total", plain)
        self.assertEqual([row["grn_code"] for row in plain["data"]], ["GRN002", "GRN001"])
        self.assertEqual(plain["data"][0]["vendor_name"], vendor.vendor_name)

        paged = self.client.get("/api/goods-receipts/?limit=1").json()
        self.assertEqual(paged["total"], 2)
        self.assertEqual(paged["total_pages"], 2)
        self.assertEqual(len(paged["data"]), 1)

        detail = self.client.get(f"/api/goods-receipts/{plain['data'][0]['id']}/").json()["data"]
        self.assertEqual(detail["items"][0]["product_name"], product.product_name)

    def test_stock_status_left_alone_by_default(self):
        vendor = make_vendor()
        product = make_product(min_stock=10)
        po = make_po(vendor, [(product, 8, "1.00")])

        services.create_goods_receipt(
            po_id=po.id,
            vendor_id=vendor.id,
            items=[{"product_id": product.id, "ordered_qty": 8, "received_qty": 8}],
        )

        product.refresh_from_db()
        self.assertEqual(product.current_stock, 8)
        self.assertEqual(product.status, Product.StockStatus.IN_STOCK)

    @override_settings(PRODUCT_STATUS_AUTO_RECOMPUTE=True)
    def test_stock_status_recomputed_when_enabled(self):
        vendor = make_vendor()
        product = make_product(min_stock=10, status="out-of-stock")
        po = make_po(vendor, [(product, 8, "1.00")])

        services.create_goods_receipt(
            po_id=po.id,
            vendor_id=vendor.id,
            items=[{"product_id": product.id, "ordered_qty": 8, "received_qty": 8}],
        )

        product.refresh_from_db()
        self.assertEqual(product.status, Product.StockStatus.LOW_STOCK)


class ReportTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.apex = make_vendor(vendor_name="Apex")
        self.court = make_vendor(vendor_name="Courtline")
        self.ball = make_product(category="Equipment")
        self.paint = make_product(category="Maintenance", min_stock=3)

        make_po(self.apex, [(self.ball, 10, "100.00")])
        cancelled = make_po(self.apex, [(self.ball, 5, "100.00")])
        services.update_purchase_order_status(cancelled.id, "cancelled")
        make_po(self.court, [(self.paint, 4, "50.00")])

    def test_vendor_spend_excludes_cancelled_orders(self):
        body = self.client.get("/api/reports/vendor-spend/").json()

        self.assertTrue(body["success"])
        rows = body["data"]
        self.assertEqual([row["vendor_name"] for row in rows], ["Apex", "Courtline"])
        self.assertEqual(Decimal(str(rows[0]["total_spend"])), Decimal("1000.00"))
        self.assertEqual(rows[0]["orders"], 1)
        self.assertEqual(Decimal(str(rows[1]["avg_order_value"])), Decimal("200.00"))

    def test_vendor_spend_csv(self):
        response = self.client.get("/api/reports/vendor-spend/?format=csv")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "text/csv")
        content = response.content.decode()
        self.assertTrue(content.startswith("vendor_id,vendor_name,total_spend,orders,avg_order_value"))
        self.assertIn("Apex", content)

    def test_category_percentages(self):
        rows = self.client.get("/api/reports/category-purchases/").json()["data"]

        by_category = {row["category"]: row for row in rows}
        self.assertEqual(Decimal(str(by_category["Equipment"]["total_spend"])), Decimal("1000.00"))
        self.assertEqual(Decimal(str(by_category["Equipment"]["percentage"])), Decimal("83.33"))
        self.assertEqual(Decimal(str(by_category["Maintenance"]["percentage"])), Decimal("16.67"))

    def test_monthly_procurement(self):
        rows = self.client.get("/api/reports/monthly-procurement/").json()["data"]

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["total_orders"], 2)
        self.assertEqual(Decimal(str(rows[0]["total_amount"])), Decimal("1200.00"))

    def test_date_range_requires_both_bounds(self):
        response = self.client.get("/api/reports/vendor-spend/?date_from=2026-01-01")
        self.assertEqual(response.status_code, 400)

        empty = self.client.get("/api/reports/vendor-spend/?date_from=2000-01-01&date_to=2000-01-31").json()
        self.assertEqual(empty["data"], [])

    def test_stock_levels(self):
        rows = self.client.get("/api/reports/stock-levels/").json()["data"]

        self.assertEqual({row["product_id"] for row in rows}, {str(self.ball.id), str(self.paint.id)})
        self.assertTrue(all(row["suggested_status"] == "out-of-stock" for row in rows))


class SeedDemoDataCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_demo_data")
        call_command("seed_demo_data")

        self.assertEqual(Vendor.objects.count(), 2)
        self.assertEqual(PurchaseOrder.objects.count(), 1)
        self.assertEqual(GoodsReceipt.objects.count(), 1)
        self.assertEqual(Invoice.objects.count(), 1)
        football = Product.objects.get(product_name="Football Size 5")
        self.assertEqual(football.current_stock, 8)
