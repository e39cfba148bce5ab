from rest_framework import serializers

from billing.models import Invoice, InvoiceItem
from inventory.models import PurchaseOrder, Vendor


class InvoiceVendorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vendor
        fields = ["id", "vendor_code", "vendor_name", "email", "phone", "address", "gst"]
        read_only_fields = fields


class InvoicePurchaseOrderSerializer(serializers.ModelSerializer):
    class Meta:
        model = PurchaseOrder
        fields = ["id", "po_code", "total_amount"]
        read_only_fields = fields


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = ["id", "product", "product_name", "quantity", "unit_price", "tax", "discount", "total", "created_at"]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    vendor = InvoiceVendorSerializer(read_only=True)
    purchase_order = InvoicePurchaseOrderSerializer(read_only=True)
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "vendor",
            "purchase_order",
            "po_reference",
            "invoice_date",
            "amount",
            "payment_status",
            "invoice_document",
            "status",
            "status_updated_at",
            "is_deleted",
            "deleted_at",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class InvoiceInputSerializer(serializers.Serializer):
    vendor_id = serializers.UUIDField()
    invoice_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    po_id = serializers.UUIDField(required=False, allow_null=True)
    po_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    invoice_document = serializers.CharField(max_length=500, required=False, allow_blank=True)


class PaymentStatusInputSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(
        choices=Invoice.PaymentStatus.choices,
        error_messages={"invalid_choice": "Invalid payment status"},
    )
