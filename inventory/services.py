import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from common.exceptions import REQUIRED_FIELDS_MESSAGE, ConflictError
from common.sequences import create_with_code
from inventory.models import GoodsReceipt, GoodsReceiptItem, Product, PurchaseOrder, PurchaseOrderItem, Vendor

logger = logging.getLogger(__name__)

MONEY_QUANT = Decimal("0.01")

VENDOR_EDITABLE_FIELDS = ("vendor_name", "contact_person", "phone", "email", "address", "gst", "categories", "status", "notes")
PRODUCT_EDITABLE_FIELDS = ("product_name", "category", "unit", "sport", "facility", "min_stock", "status", "notes")
TOGGLE_STATUSES = ("active", "inactive")


def to_money(value):
    return Decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def purchase_order_queryset():
    return PurchaseOrder.objects.select_related("vendor").prefetch_related("items__product")


def goods_receipt_queryset():
    return GoodsReceipt.objects.select_related("vendor", "purchase_order").prefetch_related("items__product")


# Vendors


def _ensure_vendor_email_free(email, exclude_id=None, message="Vendor already exists"):
    # Soft-deleted vendors keep their email; the unique index still covers them.
    qs = Vendor.all_objects.filter(email=email)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise ConflictError(message)


def create_vendor(data):
    _ensure_vendor_email_free(data["email"])

    fields = {name: data[name] for name in VENDOR_EDITABLE_FIELDS if data.get(name) is not None}
    fields.setdefault("status", Vendor.Status.ACTIVE)

    try:
        vendor = create_with_code(
            Vendor,
            "vendor_code",
            "VEN",
            lambda code: Vendor.objects.create(vendor_code=code, **fields),
        )
    except IntegrityError:
        raise ConflictError("Vendor code or email already exists")

    logger.info("Vendor created", extra={"entity": "vendor", "entity_id": str(vendor.id), "code": vendor.vendor_code})
    return vendor


def get_vendor(vendor_id, *, include_deleted=False):
    manager = Vendor.all_objects if include_deleted else Vendor.objects
    vendor = manager.filter(id=vendor_id).first()
    if vendor is None:
        raise NotFound("Vendor not found")
    return vendor


def update_vendor(vendor_id, data):
    vendor = get_vendor(vendor_id)
    if data.get("email"):
        _ensure_vendor_email_free(data["email"], exclude_id=vendor.id, message="Email already in use")

    changed = []
    for name in VENDOR_EDITABLE_FIELDS:
        if name in data and data[name] is not None:
            setattr(vendor, name, data[name])
            changed.append(name)

    if not changed:
        return vendor

    try:
        with transaction.atomic():
            vendor.save(update_fields=[*changed, "updated_at"])
    except IntegrityError:
        raise ConflictError("Email already in use")
    return vendor


def delete_vendor(vendor_id):
    vendor = Vendor.objects.filter(id=vendor_id).first()
    if vendor is None:
        raise NotFound("Vendor not found or already deleted")
    vendor.soft_delete()
    logger.info("Vendor soft-deleted", extra={"entity": "vendor", "entity_id": str(vendor.id)})
    return vendor


def set_vendor_status(vendor_id, status):
    if status not in TOGGLE_STATUSES:
        raise ValidationError("Invalid status value")

    vendor = get_vendor(vendor_id)
    vendor.status = status
    vendor.status_updated_at = timezone.now()
    vendor.save(update_fields=["status", "status_updated_at", "updated_at"])
    return vendor


# Products


def create_product(data):
    fields = {name: data[name] for name in PRODUCT_EDITABLE_FIELDS if data.get(name) is not None}
    fields.setdefault("status", Product.StockStatus.IN_STOCK)

    product = create_with_code(
        Product,
        "product_code",
        "PRD",
        lambda code: Product.objects.create(product_code=code, current_stock=0, **fields),
    )
    logger.info("Product created", extra={"entity": "product", "entity_id": str(product.id), "code": product.product_code})
    return product


def get_product(product_id, *, include_deleted=False):
    manager = Product.all_objects if include_deleted else Product.objects
    product = manager.filter(id=product_id).first()
    if product is None:
        raise NotFound("Product not found")
    return product


def update_product(product_id, data):
    product = get_product(product_id)

    changed = []
    for name in PRODUCT_EDITABLE_FIELDS:
        if name in data and data[name] is not None:
            setattr(product, name, data[name])
            changed.append(name)

    if changed:
        product.save(update_fields=[*changed, "updated_at"])
    return product


def delete_product(product_id):
    product = Product.objects.filter(id=product_id).first()
    if product is None:
        raise NotFound("Product not found")
    product.soft_delete()
    logger.info("Product soft-deleted", extra={"entity": "product", "entity_id": str(product.id)})
    return product


def set_product_status(product_id, status):
    if status not in TOGGLE_STATUSES:
        raise ValidationError("Invalid status value")

    product = get_product(product_id)
    product.is_active = status == "active"
    product.status_updated_at = timezone.now()
    product.save(update_fields=["is_active", "status_updated_at", "updated_at"])
    return product


# Purchase orders


def create_purchase_order(*, vendor_id, expected_delivery, items, notes=""):
    if not vendor_id or not expected_delivery or not items:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    vendor = Vendor.objects.filter(id=vendor_id).first()
    if vendor is None:
        raise NotFound("Vendor not found")

    with transaction.atomic():
        product_ids = [item["product_id"] for item in items]
        products = {str(pk): product for pk, product in Product.objects.in_bulk(product_ids).items()}

        lines = []
        total_items = 0
        total_amount = Decimal("0")
        for item in items:
            product = products.get(str(item["product_id"]))
            if product is None:
                raise NotFound(f"Product mapping failed for ID: {item['product_id']}")

            quantity = int(item["quantity"])
            rate = to_money(item["rate"])
            amount = to_money(quantity * rate)
            total_items += quantity
            total_amount += amount
            lines.append((product, quantity, rate, amount))

        po = create_with_code(
            PurchaseOrder,
            "po_code",
            "PO",
            lambda code: PurchaseOrder.objects.create(
                po_code=code,
                vendor=vendor,
                expected_delivery=expected_delivery,
                total_items=total_items,
                total_amount=to_money(total_amount),
                notes=notes or "",
                status=PurchaseOrder.Status.DRAFT,
            ),
        )

        PurchaseOrderItem.objects.bulk_create(
            [
                PurchaseOrderItem(purchase_order=po, product=product, quantity=quantity, rate=rate, amount=amount)
                for product, quantity, rate, amount in lines
            ]
        )

    logger.info(
        "Purchase order created with %s item(s), total %s",
        len(lines),
        po.total_amount,
        extra={"entity": "purchase_order", "entity_id": str(po.id), "code": po.po_code},
    )
    return purchase_order_queryset().get(pk=po.pk)


def get_purchase_order(po_id):
    po = purchase_order_queryset().filter(id=po_id).first()
    if po is None:
        raise NotFound("Purchase Order not found")
    return po


def update_purchase_order_status(po_id, status):
    """Move a PO to any allowed status.

    Transitions are deliberately not restricted: the dashboard only offers
    sensible next steps, but the API accepts any of the four statuses from
    any state (including un-cancelling).
    """
    if status not in PurchaseOrder.Status.values:
        raise ValidationError("Invalid status")

    po = PurchaseOrder.objects.filter(id=po_id).first()
    if po is None:
        raise NotFound("Purchase Order not found")

    previous = po.status
    po.status = status
    po.save(update_fields=["status", "updated_at"])
    logger.info(
        "Purchase order status %s -> %s",
        previous,
        status,
        extra={"entity": "purchase_order", "entity_id": str(po.id), "code": po.po_code},
    )
    return get_purchase_order(po.id)


# Goods receipts


def _refresh_stock_status(product_ids):
    for product in Product.all_objects.filter(id__in=product_ids):
        status = product.computed_stock_status()
        if product.status != status:
            product.status = status
            product.save(update_fields=["status", "updated_at"])


def create_goods_receipt(*, po_id, vendor_id, items, received_date=None):
    """Record goods received against a PO.

    Stock increments, the GRN, its items and the PO status change commit
    together or not at all. Stock grows by the received quantity only.
    """
    if not po_id or not vendor_id or not items:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    with transaction.atomic():
        po = PurchaseOrder.objects.select_for_update().filter(id=po_id).first()
        if po is None:
            raise NotFound("Purchase Order not found")

        vendor = Vendor.all_objects.filter(id=vendor_id).first()
        if vendor is None:
            raise NotFound("Vendor not found")

        grn = create_with_code(
            GoodsReceipt,
            "grn_code",
            "GRN",
            lambda code: GoodsReceipt.objects.create(
                grn_code=code,
                purchase_order=po,
                vendor=vendor,
                received_date=received_date or timezone.localdate(),
                status=GoodsReceipt.Status.CONFIRMED,
            ),
        )

        receipt_items = []
        for item in items:
            product_id = item["product_id"]
            if Product.objects.select_for_update().filter(id=product_id).first() is None:
                raise NotFound(f"Product with ID {product_id} not found")

            ordered_qty = int(item["ordered_qty"])
            received_qty = int(item["received_qty"])
            Product.all_objects.filter(id=product_id).update(
                current_stock=F("current_stock") + received_qty,
                updated_at=timezone.now(),
            )
            receipt_items.append(
                GoodsReceiptItem(
                    goods_receipt=grn,
                    product_id=product_id,
                    ordered_qty=ordered_qty,
                    received_qty=received_qty,
                    damaged_qty=int(item.get("damaged_qty") or 0),
                    status=GoodsReceiptItem.status_for(ordered_qty, received_qty),
                )
            )

        GoodsReceiptItem.objects.bulk_create(receipt_items)

        if getattr(settings, "PRODUCT_STATUS_AUTO_RECOMPUTE", False):
            _refresh_stock_status({item.product_id for item in receipt_items})

        PurchaseOrder.objects.filter(pk=po.pk).update(status=PurchaseOrder.Status.RECEIVED, updated_at=timezone.now())

    logger.info(
        "Goods receipt confirmed for %s with %s item(s)",
        po.po_code,
        len(receipt_items),
        extra={"entity": "goods_receipt", "entity_id": str(grn.id), "code": grn.grn_code},
    )
    return goods_receipt_queryset().get(pk=grn.pk)


def get_goods_receipt(grn_id):
    grn = goods_receipt_queryset().filter(id=grn_id).first()
    if grn is None:
        raise NotFound("Goods Receipt not found")
    return grn
