"""Aggregated figures over paid sales."""

import typing as t
from datetime import date
from decimal import Decimal

from django.db.models import Count, QuerySet, Sum

from events.models import Sale


def _percentage(part: int | Decimal, total: int | Decimal) -> float:
    if not total:
        return 0.0
    return round(float(part) / float(total) * 100, 2)


def _breakdown(
    sales: QuerySet[Sale], key: str, name_field: str, totals: dict[str, t.Any]
) -> list[dict[str, t.Any]]:
    rows = (
        sales.values(key, name_field)
        .annotate(total_sales=Count("id"), total_revenue=Sum("amount"), total_tickets=Sum("quantity"))
        .order_by("-total_revenue", name_field)
    )
    return [
        {
            "id": row[key],
            "name": row[name_field],
            "total_sales": row["total_sales"],
            "total_revenue": row["total_revenue"] or Decimal(0),
            "total_tickets": row["total_tickets"] or 0,
            "sales_percentage": _percentage(row["total_sales"], totals["total_sales"]),
            "revenue_percentage": _percentage(row["total_revenue"] or 0, totals["total_revenue"]),
            "tickets_percentage": _percentage(row["total_tickets"] or 0, totals["total_tickets"]),
        }
        for row in rows
    ]


def sales_stats(start_date: date | None = None, end_date: date | None = None) -> dict[str, t.Any]:
    """Totals and per-event and per-category shares of paid sales.

    When both dates are given only sales created between them (inclusive) count.
    Percentages have two decimals and are 0 when the corresponding total is 0.
    """
    sales = Sale.objects.paid()
    if start_date is not None and end_date is not None:
        sales = sales.filter(created_at__date__range=(start_date, end_date))

    aggregates = sales.aggregate(total_sales=Count("id"), total_revenue=Sum("amount"), total_tickets=Sum("quantity"))
    totals = {
        "total_sales": aggregates["total_sales"],
        "total_revenue": aggregates["total_revenue"] or Decimal(0),
        "total_tickets": aggregates["total_tickets"] or 0,
    }
    return {
        **totals,
        "sales_by_event": _breakdown(sales, "event_id", "event__name", totals),
        "sales_by_category": _breakdown(sales, "category_id", "category__name", totals),
    }
