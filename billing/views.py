from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError

from billing import services
from billing.models import Invoice
from billing.serializers import InvoiceInputSerializer, InvoiceSerializer, PaymentStatusInputSerializer
from common.audit import AuditedMutationMixin
from common.pagination import envelope
from inventory.serializers import ToggleStatusInputSerializer


class InvoiceViewSet(AuditedMutationMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = InvoiceSerializer
    audit_entity = "invoice"
    lookup_value_regex = r"[0-9a-fA-F-]{36}"

    def get_queryset(self):
        params = self.request.query_params
        qs = services.invoice_queryset().order_by("-created_at", "-invoice_number")

        search = params.get("search", "").strip()
        if search:
            qs = qs.filter(Q(invoice_number__icontains=search) | Q(po_reference__icontains=search))

        payment_status = params.get("payment_status")
        if payment_status:
            if payment_status not in Invoice.PaymentStatus.values:
                raise ValidationError({"payment_status": "Invalid payment status"})
            qs = qs.filter(payment_status=payment_status)
        return qs

    def retrieve(self, request, pk=None):
        return envelope(InvoiceSerializer(services.get_invoice(pk)).data)

    def create(self, request):
        serializer = InvoiceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data
        invoice = services.create_invoice(
            vendor_id=payload["vendor_id"],
            invoice_date=payload["invoice_date"],
            amount=payload["amount"],
            po_id=payload.get("po_id"),
            po_reference=payload.get("po_reference"),
            invoice_document=payload.get("invoice_document"),
        )
        data = InvoiceSerializer(invoice).data
        self.audit("create", invoice, after_snapshot=data)
        return envelope(data, message="Invoice created successfully", status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        invoice = services.delete_invoice(pk)
        self.audit("delete", invoice, after_snapshot={"is_deleted": True, "deleted_at": invoice.deleted_at})
        return envelope(None, message="Invoice deleted successfully")

    @action(detail=True, methods=["patch"], url_path="payment-status")
    def payment_status(self, request, pk=None):
        serializer = PaymentStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        before = services.get_invoice(pk).payment_status
        invoice = services.update_payment_status(pk, serializer.validated_data["payment_status"])
        self.audit(
            "payment_status",
            invoice,
            before_snapshot={"payment_status": before},
            after_snapshot={"payment_status": invoice.payment_status},
        )
        return envelope(InvoiceSerializer(invoice).data, message="Payment status updated")

    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request, pk=None):
        serializer = ToggleStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        before = services.get_invoice(pk).status
        invoice = services.set_invoice_status(pk, serializer.validated_data["status"])
        self.audit("status", invoice, before_snapshot={"status": before}, after_snapshot={"status": invoice.status})
        return envelope({"id": str(invoice.id), "status": invoice.status}, message="Invoice status updated")
