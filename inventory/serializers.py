from rest_framework import serializers

from inventory.models import (
    GoodsReceipt,
    GoodsReceiptItem,
    Product,
    PurchaseOrder,
    PurchaseOrderItem,
    Vendor,
    normalize_stock_status,
)

INVALID_EMAIL_MESSAGE = "Invalid email format"


class VendorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vendor
        fields = [
            "id",
            "vendor_code",
            "vendor_name",
            "contact_person",
            "phone",
            "email",
            "address",
            "gst",
            "categories",
            "status",
            "status_updated_at",
            "notes",
            "is_deleted",
            "deleted_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class VendorInputSerializer(serializers.Serializer):
    vendor_name = serializers.CharField(max_length=255)
    contact_person = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=20)
    email = serializers.EmailField(max_length=255, error_messages={"invalid": INVALID_EMAIL_MESSAGE})
    address = serializers.CharField(required=False, allow_blank=True)
    gst = serializers.CharField(max_length=50, required=False, allow_blank=True)
    categories = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    status = serializers.ChoiceField(choices=Vendor.Status.choices, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "product_code",
            "product_name",
            "category",
            "unit",
            "sport",
            "facility",
            "current_stock",
            "min_stock",
            "status",
            "is_active",
            "status_updated_at",
            "notes",
            "is_deleted",
            "deleted_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductInputSerializer(serializers.Serializer):
    product_name = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=100)
    unit = serializers.CharField(max_length=50)
    min_stock = serializers.IntegerField(min_value=0)
    sport = serializers.CharField(max_length=100, required=False, allow_blank=True)
    facility = serializers.CharField(max_length=100, required=False, allow_blank=True)
    status = serializers.CharField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_status(self, value):
        status = normalize_stock_status(value)
        if status is None:
            raise serializers.ValidationError("Invalid stock status")
        return status


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.product_name", read_only=True)
    product_code = serializers.CharField(source="product.product_code", read_only=True)

    class Meta:
        model = PurchaseOrderItem
        fields = ["id", "product", "product_name", "product_code", "quantity", "rate", "amount", "created_at"]
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source="vendor.vendor_name", read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            "id",
            "po_code",
            "vendor",
            "vendor_name",
            "total_items",
            "total_amount",
            "expected_delivery",
            "notes",
            "status",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class PurchaseOrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    rate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class PurchaseOrderInputSerializer(serializers.Serializer):
    vendor_id = serializers.UUIDField()
    expected_delivery = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True)
    items = PurchaseOrderItemInputSerializer(many=True, allow_empty=False)


class GoodsReceiptItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.product_name", read_only=True)
    product_code = serializers.CharField(source="product.product_code", read_only=True)

    class Meta:
        model = GoodsReceiptItem
        fields = [
            "id",
            "product",
            "product_name",
            "product_code",
            "ordered_qty",
            "received_qty",
            "damaged_qty",
            "status",
            "created_at",
        ]
        read_only_fields = fields


class GoodsReceiptSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source="vendor.vendor_name", read_only=True)
    po_code = serializers.CharField(source="purchase_order.po_code", read_only=True)
    items = GoodsReceiptItemSerializer(many=True, read_only=True)

    class Meta:
        model = GoodsReceipt
        fields = [
            "id",
            "grn_code",
            "purchase_order",
            "po_code",
            "vendor",
            "vendor_name",
            "received_date",
            "status",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class GoodsReceiptItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    ordered_qty = serializers.IntegerField(min_value=1)
    received_qty = serializers.IntegerField(min_value=0)
    damaged_qty = serializers.IntegerField(min_value=0, required=False, default=0)


class GoodsReceiptInputSerializer(serializers.Serializer):
    po_id = serializers.UUIDField()
    vendor_id = serializers.UUIDField()
    received_date = serializers.DateField(required=False)
    items = GoodsReceiptItemInputSerializer(many=True, allow_empty=False)


class ToggleStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=Vendor.Status.choices,
        error_messages={"invalid_choice": "Invalid status value"},
    )


class PurchaseOrderStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=PurchaseOrder.Status.choices,
        error_messages={"invalid_choice": "Invalid status"},
    )
