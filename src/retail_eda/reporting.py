# ========================
# src/retail_eda/reporting.py
# ========================

"""
Console Reporting Module

Plain-text renderings of the aggregates: ranked tables, the summary
statistics block, cancellation totals and the summary dashboard.
"""

import sys
from typing import Dict, Any, List, Tuple, TextIO, Optional

STAT_LABELS = [
    ('min', 'Min'), ('q1', '1st Qu.'), ('median', 'Median'),
    ('mean', 'Mean'), ('q3', '3rd Qu.'), ('max', 'Max')
]


def _format_number(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:,.2f}"
    if isinstance(value, int):
        return f"{value:,}"
    return str(value)


def format_dashboard(summary: Dict[str, Any], currency_symbol: str = "£") -> str:
    """The four headline figures, revenue rounded to 2 places."""
    revenue_label = f"Total Revenue ({currency_symbol})"
    lines = [
        "🧾 SUMMARY DASHBOARD",
        f"{'Total Orders':<19}: {summary['total_orders']}",
        f"{'Total Customers':<19}: {summary['total_customers']}",
        f"{revenue_label:<19}: {summary['total_revenue']:.2f}",
        f"{'Unique Products':<19}: {summary['unique_products']}",
    ]
    return "\n".join(lines)


def format_ranking(title: str, headers: Tuple[str, str], ranking: List[Tuple[Any, Any]]) -> str:
    """A two-column ranked table with a title line."""
    key_header, value_header = headers
    rendered = [(str(key), _format_number(value)) for key, value in ranking]
    key_width = max([len(key_header)] + [len(key) for key, _ in rendered])
    value_width = max([len(value_header)] + [len(value) for _, value in rendered])

    lines = [title, f"  {'#':>3}  {key_header:<{key_width}}  {value_header:>{value_width}}"]
    for position, (key, value) in enumerate(rendered, start=1):
        lines.append(f"  {position:>3}  {key:<{key_width}}  {value:>{value_width}}")
    if not rendered:
        lines.append("  (no rows)")
    return "\n".join(lines)


def format_statistics(statistics: Dict[str, Dict[str, float]]) -> str:
    """Min, quartiles, mean and max per field, one line each."""
    lines = ["Summary statistics"]
    for field, stats in statistics.items():
        if not stats:
            lines.append(f"  {field:<11} (no rows)")
            continue
        parts = [f"{label}: {stats[key]:,.2f}" for key, label in STAT_LABELS]
        lines.append(f"  {field:<11} " + "  ".join(parts))
    return "\n".join(lines)


def format_cancellations(cancellation_summary: Dict[str, Any]) -> str:
    return (
        "Cancellations\n"
        f"  CancelledOrders  : {cancellation_summary['CancelledOrders']:,}\n"
        f"  TotalLostRevenue : {cancellation_summary['TotalLostRevenue']:,.2f}"
    )


def print_report(aggregator, currency_symbol: str = "£", stream: Optional[TextIO] = None) -> None:
    """
    Print the console report of a finalized RetailAggregator.

    Args:
        aggregator: Finalized RetailAggregator
        currency_symbol (str): Symbol shown next to revenue figures
        stream: Output stream, defaults to stdout
    """
    stream = stream or sys.stdout
    summary = aggregator.get_aggregation_summary()

    sections = [
        f"Unique counts: {summary['total_customers']:,} customers, "
        f"{summary['unique_products']:,} products, {summary['total_orders']:,} invoices, "
        f"{summary['unique_countries']:,} countries",
        f"Invoice date range: {summary['first_invoice_date']} -> {summary['last_invoice_date']}",
        format_statistics(aggregator.summary_statistics),
        format_ranking(f"Top {aggregator.top_n} products by quantity",
                       ('Description', 'TotalQuantity'), aggregator.top_products_by_quantity),
        format_ranking(f"Top {aggregator.top_n} products by revenue",
                       ('Description', 'Revenue'), aggregator.top_products_by_revenue),
        format_ranking(f"Top {aggregator.top_n} customers by spending",
                       ('CustomerID', 'TotalSpent'), aggregator.top_customers),
        format_ranking(f"Top {aggregator.top_n} countries by revenue",
                       ('Country', 'Revenue'), aggregator.top_countries),
        format_cancellations(aggregator.get_cancellation_summary()),
        format_dashboard(summary, currency_symbol),
    ]

    print("\n" + "=" * 70, file=stream)
    print("RETAIL TRANSACTION ANALYSIS", file=stream)
    print("=" * 70, file=stream)
    for section in sections:
        print(section, file=stream)
        print(file=stream)
    print("=" * 70, file=stream)
