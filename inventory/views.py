import uuid

from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError

from common.audit import AuditedMutationMixin
from common.pagination import envelope
from inventory import services
from inventory.models import Product, PurchaseOrder, Vendor, normalize_stock_status
from inventory.serializers import (
    GoodsReceiptInputSerializer,
    GoodsReceiptSerializer,
    ProductInputSerializer,
    ProductSerializer,
    PurchaseOrderInputSerializer,
    PurchaseOrderSerializer,
    PurchaseOrderStatusInputSerializer,
    ToggleStatusInputSerializer,
    VendorInputSerializer,
    VendorSerializer,
)

TRUTHY = {"1", "true", "yes"}

VENDOR_SORT_FIELDS = {"created_at", "vendor_name", "vendor_code", "email", "status"}
UUID_LOOKUP = r"[0-9a-fA-F-]{36}"


def _flag(request, name):
    return str(request.query_params.get(name, "")).strip().lower() in TRUTHY


class VendorViewSet(AuditedMutationMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = VendorSerializer
    audit_entity = "vendor"
    lookup_value_regex = UUID_LOOKUP

    def get_queryset(self):
        params = self.request.query_params
        qs = Vendor.objects.all()

        search = params.get("search", "").strip()
        if search:
            qs = qs.filter(Q(vendor_name__icontains=search) | Q(vendor_code__icontains=search) | Q(email__icontains=search))

        vendor_status = params.get("status")
        if vendor_status:
            qs = qs.filter(status=vendor_status)

        sort_by = params.get("sort_by", "created_at")
        if sort_by not in VENDOR_SORT_FIELDS:
            raise ValidationError({"sort_by": f"Must be one of: {', '.join(sorted(VENDOR_SORT_FIELDS))}."})
        order = params.get("order", "desc").lower()
        if order not in ("asc", "desc"):
            raise ValidationError({"order": "Must be asc or desc."})
        prefix = "-" if order == "desc" else ""
        return qs.order_by(f"{prefix}{sort_by}", f"{prefix}id")

    def retrieve(self, request, pk=None):
        vendor = services.get_vendor(pk, include_deleted=_flag(request, "include_deleted"))
        return envelope(VendorSerializer(vendor).data)

    def create(self, request):
        serializer = VendorInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vendor = services.create_vendor(serializer.validated_data)
        data = VendorSerializer(vendor).data
        self.audit("create", vendor, after_snapshot=data)
        return envelope(data, message="Vendor created successfully", status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        before = VendorSerializer(services.get_vendor(pk)).data
        serializer = VendorInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        vendor = services.update_vendor(pk, serializer.validated_data)
        data = VendorSerializer(vendor).data
        self.audit("update", vendor, before_snapshot=before, after_snapshot=data)
        return envelope(data, message="Vendor updated successfully")

    def destroy(self, request, pk=None):
        vendor = services.delete_vendor(pk)
        self.audit("delete", vendor, after_snapshot={"is_deleted": True, "deleted_at": vendor.deleted_at})
        return envelope(None, message="Vendor deleted successfully")

    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request, pk=None):
        serializer = ToggleStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        before = services.get_vendor(pk).status
        vendor = services.set_vendor_status(pk, serializer.validated_data["status"])
        self.audit("status", vendor, before_snapshot={"status": before}, after_snapshot={"status": vendor.status})
        return envelope({"id": str(vendor.id), "status": vendor.status}, message="Vendor status updated")


class ProductViewSet(AuditedMutationMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = ProductSerializer
    audit_entity = "product"
    lookup_value_regex = UUID_LOOKUP

    def get_queryset(self):
        params = self.request.query_params
        qs = Product.objects.order_by("-created_at", "-product_code")

        search = params.get("search", "").strip()
        if search:
            qs = qs.filter(Q(product_name__icontains=search) | Q(product_code__icontains=search))

        category = params.get("category")
        if category:
            qs = qs.filter(category__iexact=category)

        sport = params.get("sport")
        if sport:
            qs = qs.filter(sport__iexact=sport)

        raw_status = params.get("status")
        if raw_status:
            stock_status = normalize_stock_status(raw_status)
            if stock_status is None:
                raise ValidationError({"status": "Unknown stock status."})
            qs = qs.filter(status=stock_status)
        return qs

    def retrieve(self, request, pk=None):
        product = services.get_product(pk, include_deleted=_flag(request, "include_deleted"))
        return envelope(ProductSerializer(product).data)

    def create(self, request):
        serializer = ProductInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = services.create_product(serializer.validated_data)
        data = ProductSerializer(product).data
        self.audit("create", product, after_snapshot=data)
        return envelope(data, message="Product created successfully", status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        before = ProductSerializer(services.get_product(pk)).data
        serializer = ProductInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        product = services.update_product(pk, serializer.validated_data)
        data = ProductSerializer(product).data
        self.audit("update", product, before_snapshot=before, after_snapshot=data)
        return envelope(data, message="Product updated successfully")

    def destroy(self, request, pk=None):
        product = services.delete_product(pk)
        self.audit("delete", product, after_snapshot={"is_deleted": True, "deleted_at": product.deleted_at})
        return envelope(None, message="Product deleted successfully")

    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request, pk=None):
        serializer = ToggleStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        before = services.get_product(pk).is_active
        product = services.set_product_status(pk, serializer.validated_data["status"])
        status_label = "active" if product.is_active else "inactive"
        self.audit(
            "status",
            product,
            before_snapshot={"is_active": before},
            after_snapshot={"is_active": product.is_active},
        )
        return envelope({"id": str(product.id), "status": status_label}, message="Product status updated")


class PurchaseOrderViewSet(AuditedMutationMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = PurchaseOrderSerializer
    audit_entity = "purchase_order"
    lookup_value_regex = UUID_LOOKUP

    def get_queryset(self):
        params = self.request.query_params
        qs = services.purchase_order_queryset().order_by("-created_at", "-po_code")

        search = params.get("search", "").strip()
        if search:
            qs = qs.filter(po_code__icontains=search)

        po_status = params.get("status")
        if po_status:
            if po_status not in PurchaseOrder.Status.values:
                raise ValidationError({"status": "Invalid status"})
            qs = qs.filter(status=po_status)

        vendor_id = params.get("vendor")
        if vendor_id:
            try:
                qs = qs.filter(vendor_id=uuid.UUID(vendor_id))
            except ValueError:
                raise ValidationError({"vendor": "Must be a valid UUID."})
        return qs

    def retrieve(self, request, pk=None):
        return envelope(PurchaseOrderSerializer(services.get_purchase_order(pk)).data)

    def create(self, request):
        serializer = PurchaseOrderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data
        po = services.create_purchase_order(
            vendor_id=payload["vendor_id"],
            expected_delivery=payload["expected_delivery"],
            items=payload["items"],
            notes=payload.get("notes", ""),
        )
        data = PurchaseOrderSerializer(po).data
        self.audit("create", po, after_snapshot=data)
        return envelope(data, message="Purchase Order created successfully", status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request, pk=None):
        serializer = PurchaseOrderStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        before = services.get_purchase_order(pk).status
        po = services.update_purchase_order_status(pk, serializer.validated_data["status"])
        self.audit("status", po, before_snapshot={"status": before}, after_snapshot={"status": po.status})
        return envelope(PurchaseOrderSerializer(po).data, message="Purchase Order status updated")


class GoodsReceiptViewSet(AuditedMutationMixin, viewsets.GenericViewSet):
    serializer_class = GoodsReceiptSerializer
    audit_entity = "goods_receipt"
    lookup_value_regex = UUID_LOOKUP

    def get_queryset(self):
        return services.goods_receipt_queryset().order_by("-created_at", "-grn_code")

    def list(self, request):
        queryset = self.get_queryset()
        # Unpaginated unless the client asks for a page.
        if "page" in request.query_params or "limit" in request.query_params:
            page = self.paginate_queryset(queryset)
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return envelope(self.get_serializer(queryset, many=True).data)

    def retrieve(self, request, pk=None):
        return envelope(GoodsReceiptSerializer(services.get_goods_receipt(pk)).data)

    def create(self, request):
        serializer = GoodsReceiptInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data
        grn = services.create_goods_receipt(
            po_id=payload["po_id"],
            vendor_id=payload["vendor_id"],
            items=payload["items"],
            received_date=payload.get("received_date"),
        )
        data = GoodsReceiptSerializer(grn).data
        self.audit("create", grn, after_snapshot=data)
        return envelope(data, message="GRN created successfully and stock updated", status=status.HTTP_201_CREATED)
