from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from billing.services import create_invoice
from inventory import services
from inventory.models import Vendor

DEMO_VENDORS = [
    {
        "vendor_name": "Apex Sports Supply",
        "contact_person": "Ravi Menon",
        "phone": "9800000001",
        "email": "orders@apexsports.example.com",
        "address": "12 Stadium Road",
        "gst": "29ABCDE1234F1Z5",
        "categories": ["Equipment", "Apparel"],
    },
    {
        "vendor_name": "Courtline Facilities",
        "contact_person": "Meera Iyer",
        "phone": "9800000002",
        "email": "sales@courtline.example.com",
        "address": "4 Arena Lane",
        "gst": "29FGHIJ5678K1Z2",
        "categories": ["Maintenance"],
    },
]

DEMO_PRODUCTS = [
    {"product_name": "Football Size 5", "category": "Equipment", "unit": "pcs", "sport": "Football", "min_stock": 10},
    {"product_name": "Badminton Shuttle Tube", "category": "Equipment", "unit": "box", "sport": "Badminton", "min_stock": 20},
    {"product_name": "Court Line Paint", "category": "Maintenance", "unit": "litre", "facility": "Indoor Court", "min_stock": 5},
]


class Command(BaseCommand):
    help = "Seed demo vendors, products and one PO -> GRN -> invoice cycle for local development."

    def handle(self, *args, **options):
        User = get_user_model()
        admin_user, admin_created = User.objects.get_or_create(
            username="admin",
            defaults={"email": "admin@example.com", "is_staff": True, "is_superuser": True, "is_active": True},
        )
        if admin_created:
            admin_user.set_password("admin1234")
            admin_user.save(update_fields=["password"])

        if Vendor.all_objects.filter(email=DEMO_VENDORS[0]["email"]).exists():
            self.stdout.write(self.style.WARNING("Demo data already present, nothing to do."))
            return

        vendors = [services.create_vendor(data) for data in DEMO_VENDORS]
        products = [services.create_product(data) for data in DEMO_PRODUCTS]

        po = services.create_purchase_order(
            vendor_id=vendors[0].id,
            expected_delivery=timezone.localdate() + timedelta(days=7),
            items=[
                {"product_id": products[0].id, "quantity": 10, "rate": Decimal("100.00")},
                {"product_id": products[1].id, "quantity": 25, "rate": Decimal("45.50")},
            ],
            notes="Demo purchase order",
        )
        services.update_purchase_order_status(po.id, "sent")

        grn = services.create_goods_receipt(
            po_id=po.id,
            vendor_id=vendors[0].id,
            items=[
                {"product_id": products[0].id, "ordered_qty": 10, "received_qty": 8, "damaged_qty": 2},
                {"product_id": products[1].id, "ordered_qty": 25, "received_qty": 25},
            ],
        )

        invoice = create_invoice(
            vendor_id=vendors[0].id,
            invoice_date=timezone.localdate(),
            amount=po.total_amount,
            po_id=po.id,
        )

        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully."))
        self.stdout.write("Credentials: admin/admin1234")
        self.stdout.write(f"PO: {po.po_code} | GRN: {grn.grn_code} | Invoice: {invoice.invoice_number}")
