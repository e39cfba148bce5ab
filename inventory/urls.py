from django.urls import path
from rest_framework.routers import DefaultRouter

from inventory.reports import (
    CategoryPurchasesReportView,
    MonthlyProcurementReportView,
    StockLevelsReportView,
    VendorSpendReportView,
)
from inventory.views import GoodsReceiptViewSet, ProductViewSet, PurchaseOrderViewSet, VendorViewSet

router = DefaultRouter()
router.register(r"vendors", VendorViewSet, basename="vendor")
router.register(r"products", ProductViewSet, basename="product")
router.register(r"purchase-orders", PurchaseOrderViewSet, basename="purchase-order")
router.register(r"goods-receipts", GoodsReceiptViewSet, basename="goods-receipt")

urlpatterns = router.urls + [
    path("reports/vendor-spend/", VendorSpendReportView.as_view(), name="report-vendor-spend"),
    path("reports/monthly-procurement/", MonthlyProcurementReportView.as_view(), name="report-monthly-procurement"),
    path("reports/category-purchases/", CategoryPurchasesReportView.as_view(), name="report-category-purchases"),
    path("reports/stock-levels/", StockLevelsReportView.as_view(), name="report-stock-levels"),
]
