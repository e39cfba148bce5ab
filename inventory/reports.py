import csv
from datetime import datetime, time
from decimal import Decimal

from django.db.models import Count, F, Sum
from django.db.models.functions import Coalesce, TruncMonth
from django.http import HttpResponse
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError
from rest_framework.views import APIView

from common.pagination import envelope
from inventory.models import Product, PurchaseOrder, PurchaseOrderItem
from inventory.services import to_money

ZERO = Decimal("0.00")


class BaseReportView(APIView):
    """Procurement reports over non-cancelled purchase orders."""

    filename = "report.csv"

    def _date_range(self, request):
        raw_from = request.query_params.get("date_from", "")
        raw_to = request.query_params.get("date_to", "")
        if not raw_from and not raw_to:
            return None, None

        try:
            date_from = parse_date(raw_from)
            date_to = parse_date(raw_to)
        except ValueError:
            raise ValidationError({"date_range": "Dates must be valid ISO dates (YYYY-MM-DD)."})
        if not date_from or not date_to:
            raise ValidationError({"date_range": "Both date_from and date_to are required."})
        if date_from > date_to:
            raise ValidationError({"date_range": "date_from must be before or equal to date_to."})

        tz = timezone.get_current_timezone()
        start = datetime.combine(date_from, time.min).replace(tzinfo=tz)
        end = datetime.combine(date_to, time.max).replace(tzinfo=tz)
        return start, end

    def _purchase_orders(self, request):
        qs = PurchaseOrder.objects.exclude(status=PurchaseOrder.Status.CANCELLED)
        start, end = self._date_range(request)
        if start and end:
            qs = qs.filter(created_at__gte=start, created_at__lte=end)
        return qs

    def _csv_response(self, rows):
        response = HttpResponse(content_type="text/csv")
        response["Content-Disposition"] = f'attachment; filename="{self.filename}"'

        if not rows:
            return response

        writer = csv.DictWriter(response, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
        return response

    def rows(self, request):
        raise NotImplementedError

    def get(self, request):
        rows = self.rows(request)
        if request.query_params.get("format") == "csv":
            return self._csv_response(rows)
        return envelope(rows)


class VendorSpendReportView(BaseReportView):
    filename = "vendor_spend.csv"

    def rows(self, request):
        grouped = (
            self._purchase_orders(request)
            .values("vendor_id", vendor_name=F("vendor__vendor_name"))
            .annotate(total_spend=Coalesce(Sum("total_amount"), ZERO), orders=Count("id"))
            .order_by("-total_spend", "vendor_name")
        )
        return [
            {
                "vendor_id": str(row["vendor_id"]),
                "vendor_name": row["vendor_name"],
                "total_spend": to_money(row["total_spend"]),
                "orders": row["orders"],
                "avg_order_value": to_money(row["total_spend"] / row["orders"]) if row["orders"] else ZERO,
            }
            for row in grouped
        ]


class MonthlyProcurementReportView(BaseReportView):
    filename = "monthly_procurement.csv"

    def rows(self, request):
        grouped = (
            self._purchase_orders(request)
            .annotate(month=TruncMonth("created_at"))
            .values("month")
            .annotate(total_orders=Count("id"), total_amount=Coalesce(Sum("total_amount"), ZERO))
            .order_by("-month")
        )
        return [
            {
                "month": row["month"].strftime("%Y-%m"),
                "total_orders": row["total_orders"],
                "total_amount": to_money(row["total_amount"]),
                "avg_per_order": to_money(row["total_amount"] / row["total_orders"]) if row["total_orders"] else ZERO,
            }
            for row in grouped
        ]


class CategoryPurchasesReportView(BaseReportView):
    filename = "category_purchases.csv"

    def rows(self, request):
        grouped = list(
            PurchaseOrderItem.objects.filter(purchase_order__in=self._purchase_orders(request))
            .values(category=F("product__category"))
            .annotate(total_spend=Coalesce(Sum("amount"), ZERO))
            .order_by("-total_spend", "category")
        )
        total = sum((row["total_spend"] for row in grouped), ZERO)
        return [
            {
                "category": row["category"],
                "total_spend": to_money(row["total_spend"]),
                "percentage": ZERO if total == 0 else to_money(row["total_spend"] / total * 100),
            }
            for row in grouped
        ]


class StockLevelsReportView(BaseReportView):
    """Products at or below their minimum stock, with the level they should carry."""

    filename = "stock_levels.csv"

    def rows(self, request):
        products = Product.objects.filter(current_stock__lte=F("min_stock")).order_by("current_stock", "product_code")
        return [
            {
                "product_id": str(product.id),
                "product_code": product.product_code,
                "product_name": product.product_name,
                "category": product.category,
                "current_stock": product.current_stock,
                "min_stock": product.min_stock,
                "status": product.status,
                "suggested_status": product.computed_stock_status().value,
            }
            for product in products
        ]
