import json
import logging
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.db import IntegrityError
from django.test import SimpleTestCase, TestCase, override_settings

from common.exceptions import ConflictError
from common.logging import JsonFormatter
from common.sequences import (
    create_with_code,
    generate_grn_code,
    generate_invoice_code,
    generate_po_code,
    generate_product_code,
    generate_vendor_code,
    increment_code,
)
from inventory.models import Vendor


def vendor_builder(email):
    def build(code):
        return Vendor.objects.create(
            vendor_code=code,
            vendor_name="Apex",
            contact_person="Ravi",
            phone="1",
            email=email,
        )

    return build


class IncrementCodeTests(SimpleTestCase):
    def test_increments_and_pads(self):
        self.assertEqual(increment_code("VEN", "VEN007"), "VEN008")
        self.assertEqual(increment_code("PO", "PO099"), "PO100")
        self.assertEqual(increment_code("INV", "INV999"), "INV1000")

    def test_unparsable_codes_restart_at_one(self):
        self.assertEqual(increment_code("VEN", None), "VEN001")
        self.assertEqual(increment_code("VEN", "VENXYZ"), "VEN001")
        self.assertEqual(increment_code("VEN", "PRD004"), "VEN001")


class CodeGeneratorTests(TestCase):
    def test_first_code(self):
        self.assertEqual(generate_vendor_code(), "VEN001")
        self.assertEqual(generate_product_code(), "PRD001")
        self.assertEqual(generate_po_code(), "PO001")
        self.assertEqual(generate_grn_code(), "GRN001")
        self.assertEqual(generate_invoice_code(), "INV001")

    def test_follows_most_recent_row(self):
        vendor_builder("a@example.com")("VEN007")

        self.assertEqual(generate_vendor_code(), "VEN008")

    def test_soft_deleted_rows_keep_their_codes(self):
        vendor = vendor_builder("a@example.com")("VEN003")
        vendor.soft_delete()

        self.assertEqual(generate_vendor_code(), "VEN004")

    def test_collision_advances_to_next_code(self):
        vendor_builder("a@example.com")("VEN001")

        with mock.patch("common.sequences.next_code", return_value="VEN001"):
            vendor = create_with_code(Vendor, "vendor_code", "VEN", vendor_builder("b@example.com"))

        self.assertEqual(vendor.vendor_code, "VEN002")
        self.assertEqual(Vendor.all_objects.count(), 2)

    @override_settings(CODE_ALLOCATION_ATTEMPTS=1)
    def test_gives_up_after_configured_attempts(self):
        vendor_builder("a@example.com")("VEN001")

        with mock.patch("common.sequences.next_code", return_value="VEN001"):
            with self.assertRaises(ConflictError):
                create_with_code(Vendor, "vendor_code", "VEN", vendor_builder("b@example.com"))

        self.assertEqual(Vendor.all_objects.count(), 1)

    def test_other_integrity_errors_propagate(self):
        vendor_builder("a@example.com")("VEN001")

        with self.assertRaises(IntegrityError):
            create_with_code(Vendor, "vendor_code", "VEN", vendor_builder("a@example.com"))

        self.assertEqual(Vendor.all_objects.count(), 1)


class JsonFormatterTests(SimpleTestCase):
    def test_includes_context_fields(self):
        record = logging.LogRecord("inventory.services", logging.INFO, __file__, 1, "PO %s created", ("PO001",), None)
        record.entity = "purchase_order"
        record.code = "PO001"

        payload = json.loads(JsonFormatter().format(record))

        self.assertEqual(payload["message"], "PO PO001 created")
        self.assertEqual(payload["level"], "INFO")
        self.assertEqual(payload["entity"], "purchase_order")
        self.assertEqual(payload["code"], "PO001")
        self.assertNotIn("request_id", payload)


class MigrationStateTests(TestCase):
    def test_models_have_no_pending_migrations(self):
        out = StringIO()

        call_command("makemigrations", "--check", "--dry-run", stdout=out)

        self.assertIn("No changes detected", out.getvalue())
