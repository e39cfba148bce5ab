import uuid

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class ActiveManager(models.Manager):
    """Default scope: rows that have not been soft-deleted."""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class SoftDeleteModel(models.Model):
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = ActiveManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True
        base_manager_name = "all_objects"

    def soft_delete(self):
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.save(update_fields=["is_deleted", "deleted_at", "updated_at"])


class Vendor(SoftDeleteModel):
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor_code = models.CharField(max_length=50, unique=True)
    vendor_name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=255)
    phone = models.CharField(max_length=20)
    email = models.CharField(max_length=255, unique=True)
    address = models.TextField(blank=True, default="")
    gst = models.CharField(max_length=50, blank=True, default="")
    categories = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)
    status_updated_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(SoftDeleteModel.Meta):
        indexes = [
            models.Index(fields=["is_deleted", "status"], name="inv_vendor_status_idx"),
            models.Index(fields=["created_at"], name="inv_vendor_created_idx"),
        ]

    def __str__(self):
        return f"{self.vendor_code} {self.vendor_name}"


class Product(SoftDeleteModel):
    class StockStatus(models.TextChoices):
        IN_STOCK = "in-stock", "In Stock"
        LOW_STOCK = "low-stock", "Low Stock"
        OUT_OF_STOCK = "out-of-stock", "Out of Stock"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product_code = models.CharField(max_length=50, unique=True)
    product_name = models.CharField(max_length=255)
    category = models.CharField(max_length=100)
    unit = models.CharField(max_length=50)
    sport = models.CharField(max_length=100, blank=True, default="")
    facility = models.CharField(max_length=100, blank=True, default="")
    current_stock = models.PositiveIntegerField(default=0)
    min_stock = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=16, choices=StockStatus.choices, default=StockStatus.IN_STOCK)
    is_active = models.BooleanField(default=True)
    status_updated_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(SoftDeleteModel.Meta):
        indexes = [
            models.Index(fields=["is_deleted", "category"], name="inv_product_category_idx"),
            models.Index(fields=["is_deleted", "status"], name="inv_product_status_idx"),
            models.Index(fields=["created_at"], name="inv_product_created_idx"),
        ]

    def __str__(self):
        return f"{self.product_code} {self.product_name}"

    def computed_stock_status(self):
        if self.current_stock <= 0:
            return self.StockStatus.OUT_OF_STOCK
        if self.current_stock <= self.min_stock:
            return self.StockStatus.LOW_STOCK
        return self.StockStatus.IN_STOCK


class PurchaseOrder(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        SENT = "sent", "Sent"
        RECEIVED = "received", "Received"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    po_code = models.CharField(max_length=50, unique=True)
    vendor = models.ForeignKey(Vendor, on_delete=models.PROTECT, related_name="purchase_orders")
    total_items = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    expected_delivery = models.DateField()
    notes = models.TextField(blank=True, default="")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.DRAFT)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["status", "created_at"], name="inv_po_status_idx"),
            models.Index(fields=["vendor", "status"], name="inv_po_vendor_idx"),
        ]

    def __str__(self):
        return self.po_code


class PurchaseOrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.PROTECT, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="order_items")
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    rate = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["purchase_order"], name="inv_po_item_po_idx"),
            models.Index(fields=["product"], name="inv_po_item_product_idx"),
        ]


class GoodsReceipt(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    grn_code = models.CharField(max_length=50, unique=True)
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.PROTECT, related_name="goods_receipts")
    vendor = models.ForeignKey(Vendor, on_delete=models.PROTECT, related_name="goods_receipts")
    received_date = models.DateField(default=timezone.localdate)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["created_at"], name="inv_grn_created_idx"),
            models.Index(fields=["purchase_order"], name="inv_grn_po_idx"),
        ]

    def __str__(self):
        return self.grn_code


class GoodsReceiptItem(models.Model):
    class Status(models.TextChoices):
        COMPLETE = "complete", "Complete"
        PARTIAL = "partial", "Partial"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    goods_receipt = models.ForeignKey(GoodsReceipt, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="receipt_items")
    ordered_qty = models.PositiveIntegerField()
    received_qty = models.PositiveIntegerField()
    damaged_qty = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=16, choices=Status.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["goods_receipt"], name="inv_grn_item_grn_idx"),
            models.Index(fields=["product"], name="inv_grn_item_product_idx"),
        ]

    @classmethod
    def status_for(cls, ordered_qty, received_qty):
        return cls.Status.COMPLETE if received_qty >= ordered_qty else cls.Status.PARTIAL


STOCK_STATUS_ALIASES = {
    "instock": Product.StockStatus.IN_STOCK,
    "in stock": Product.StockStatus.IN_STOCK,
    "lowstock": Product.StockStatus.LOW_STOCK,
    "low stock": Product.StockStatus.LOW_STOCK,
    "outofstock": Product.StockStatus.OUT_OF_STOCK,
    "out of stock": Product.StockStatus.OUT_OF_STOCK,
}


def normalize_stock_status(value):
    """Map display labels ("In Stock") and legacy values ("instock") to stored ones."""
    if not value:
        return None
    key = str(value).strip().lower()
    if key in Product.StockStatus.values:
        return key
    return STOCK_STATUS_ALIASES.get(key)
