import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from billing.models import Invoice, InvoiceItem
from common.exceptions import REQUIRED_FIELDS_MESSAGE
from common.sequences import create_with_code
from inventory.models import PurchaseOrder, Vendor
from inventory.services import TOGGLE_STATUSES, to_money

logger = logging.getLogger(__name__)


def invoice_queryset():
    return Invoice.objects.select_related("vendor", "purchase_order").prefetch_related("items")


def create_invoice(*, vendor_id, invoice_date, amount, po_id=None, po_reference=None, invoice_document=None):
    """Create an invoice, copying the line items of `po_id` when one is given."""
    if not vendor_id or not invoice_date or amount is None:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    vendor = Vendor.all_objects.filter(id=vendor_id).first()
    if vendor is None:
        raise NotFound("Vendor not found")

    po = None
    if po_id:
        po = PurchaseOrder.objects.prefetch_related("items__product").filter(id=po_id).first()
        if po is None:
            raise NotFound("Purchase Order not found")

    with transaction.atomic():
        invoice = create_with_code(
            Invoice,
            "invoice_number",
            "INV",
            lambda code: Invoice.objects.create(
                invoice_number=code,
                vendor=vendor,
                purchase_order=po,
                po_reference=po_reference or (po.po_code if po else ""),
                invoice_date=invoice_date,
                amount=to_money(amount),
                invoice_document=invoice_document or "",
                payment_status=Invoice.PaymentStatus.PENDING,
                status=Invoice.Status.ACTIVE,
            ),
        )

        if po is not None:
            InvoiceItem.objects.bulk_create(
                [
                    InvoiceItem(
                        invoice=invoice,
                        product=item.product,
                        product_name=item.product.product_name,
                        quantity=item.quantity,
                        unit_price=item.rate,
                        tax=0,
                        discount=0,
                        total=item.amount,
                    )
                    for item in po.items.all()
                ]
            )

    logger.info(
        "Invoice created for %s",
        vendor.vendor_code,
        extra={"entity": "invoice", "entity_id": str(invoice.id), "code": invoice.invoice_number},
    )
    return invoice_queryset().get(pk=invoice.pk)


def get_invoice(invoice_id):
    invoice = invoice_queryset().filter(id=invoice_id).first()
    if invoice is None:
        raise NotFound("Invoice not found")
    return invoice


def update_payment_status(invoice_id, payment_status):
    if payment_status not in Invoice.PaymentStatus.values:
        raise ValidationError("Invalid payment status")

    invoice = Invoice.objects.filter(id=invoice_id).first()
    if invoice is None:
        raise NotFound("Invoice not found")

    previous = invoice.payment_status
    invoice.payment_status = payment_status
    invoice.save(update_fields=["payment_status", "updated_at"])
    logger.info(
        "Invoice payment status %s -> %s",
        previous,
        payment_status,
        extra={"entity": "invoice", "entity_id": str(invoice.id), "code": invoice.invoice_number},
    )
    return get_invoice(invoice.id)


def delete_invoice(invoice_id):
    invoice = Invoice.objects.filter(id=invoice_id).first()
    if invoice is None:
        raise NotFound("Invoice not found or already deleted")
    invoice.soft_delete()
    logger.info("Invoice soft-deleted", extra={"entity": "invoice", "entity_id": str(invoice.id)})
    return invoice


def set_invoice_status(invoice_id, status):
    if status not in TOGGLE_STATUSES:
        raise ValidationError("Invalid status value")

    invoice = Invoice.objects.filter(id=invoice_id).first()
    if invoice is None:
        raise NotFound("Invoice not found")
    invoice.status = status
    invoice.status_updated_at = timezone.now()
    invoice.save(update_fields=["status", "status_updated_at", "updated_at"])
    return invoice
