"""Human-readable sequential codes (VEN001, PRD001, PO001, GRN001, INV001).

The next code is derived from the most recently created row of a table, the
way the admin dashboard has always numbered records. Reading the last code
and inserting the new row are two round trips, so two concurrent creates can
compute the same code. Every code column is unique, and `create_with_code`
retries with the following code when the insert collides.
"""

import logging

from django.conf import settings
from django.db import IntegrityError, transaction

from common.exceptions import ConflictError

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 3


def format_code(prefix, number, width=DEFAULT_WIDTH):
    return f"{prefix}{number:0{width}d}"


def increment_code(prefix, code, width=DEFAULT_WIDTH):
    """Return the code following `code`, or the first code if it cannot be parsed."""
    if not code or not code.startswith(prefix):
        return format_code(prefix, 1, width)

    suffix = code[len(prefix):]
    if not suffix.isdigit():
        return format_code(prefix, 1, width)
    return format_code(prefix, int(suffix) + 1, width)


def next_code(model, field, prefix, width=DEFAULT_WIDTH):
    # Soft-deleted rows still own their codes, so read through the base manager.
    last_code = (
        model._base_manager.order_by("-created_at", f"-{field}")
        .values_list(field, flat=True)
        .first()
    )
    return increment_code(prefix, last_code, width)


def create_with_code(model, field, prefix, build, width=DEFAULT_WIDTH):
    """Run `build(code)` with freshly allocated codes until the insert sticks.

    `build` must create exactly one `model` row carrying `code` in `field`.
    Each attempt runs in its own savepoint so a collision does not poison an
    enclosing transaction.
    """
    attempts = max(int(getattr(settings, "CODE_ALLOCATION_ATTEMPTS", 5)), 1)
    code = next_code(model, field, prefix, width)

    for attempt in range(1, attempts + 1):
        try:
            with transaction.atomic():
                return build(code)
        except IntegrityError:
            if not model._base_manager.filter(**{field: code}).exists():
                raise
            logger.warning(
                "Code %s already taken for %s, retrying (attempt %s/%s)",
                code,
                model.__name__,
                attempt,
                attempts,
                extra={"entity": model._meta.label_lower, "code": code},
            )
            code = increment_code(prefix, code, width)

    raise ConflictError(f"Could not allocate a unique {field} after {attempts} attempts.")


def generate_vendor_code():
    from inventory.models import Vendor

    return next_code(Vendor, "vendor_code", "VEN")


def generate_product_code():
    from inventory.models import Product

    return next_code(Product, "product_code", "PRD")


def generate_po_code():
    from inventory.models import PurchaseOrder

    return next_code(PurchaseOrder, "po_code", "PO")


def generate_grn_code():
    from inventory.models import GoodsReceipt

    return next_code(GoodsReceipt, "grn_code", "GRN")


def generate_invoice_code():
    from billing.models import Invoice

    return next_code(Invoice, "invoice_number", "INV")
