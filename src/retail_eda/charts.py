# ========================
# src/retail_eda/charts.py
# ========================

"""
Chart Rendering Module

Static PNG charts of the aggregate tables. Rendering is headless (Agg).
"""

import logging
from pathlib import Path
from typing import Dict, List, Tuple, Any, Optional

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import numpy as np

logger = logging.getLogger(__name__)

def _comma_formatter() -> mticker.FuncFormatter:
    return mticker.FuncFormatter(lambda x, _: f"{x:,.0f}")


def _style_axes(ax) -> None:
    ax.grid(True, axis='both', linestyle='-', linewidth=0.5, color='#e5e5e5')
    ax.set_axisbelow(True)
    for spine in ax.spines.values():
        spine.set_visible(False)


class ChartRenderer:
    """
    Renders the fixed set of report charts into one directory.
    """

    def __init__(self, chart_dir: str = "reports/charts", dpi: int = 150,
                 currency_symbol: str = "£", top_chart_products: int = 5):
        """
        Args:
            chart_dir (str): Directory for PNG files
            dpi (int): Resolution of saved figures
            currency_symbol (str): Used in axis labels
            top_chart_products (int): Products shown in the top products chart
        """
        self.chart_dir = Path(chart_dir)
        self.chart_dir.mkdir(parents=True, exist_ok=True)
        self.dpi = dpi
        self.currency_symbol = currency_symbol
        self.top_chart_products = top_chart_products
        logger.info(f"ChartRenderer initialized with chart directory: {self.chart_dir}")

    def render_all(self, aggregator) -> Dict[str, str]:
        """
        Render every chart the aggregator has data for.

        Args:
            aggregator: Finalized RetailAggregator

        Returns:
            dict: Mapping of chart name to saved file path
        """
        top_products = aggregator.top_products_by_quantity[:self.top_chart_products]
        charts = {
            'top_products': self.plot_top_products(top_products),
            'revenue_by_country': self.plot_revenue_by_country(aggregator.top_countries),
            'monthly_revenue': self.plot_monthly_revenue(aggregator.monthly_trend),
            'top_customers': self.plot_top_customers(aggregator.top_customers),
            'cancellations_by_country': self.plot_cancellations_by_country(
                aggregator.top_cancellation_countries),
            'transaction_types': self.plot_transaction_types(dict(aggregator.transaction_types)),
            'lost_revenue_by_country': self.plot_lost_revenue_by_country(
                aggregator.top_lost_revenue_countries),
            'order_values': self.plot_order_values(list(aggregator.order_values.values())),
            'total_price_histogram': self.plot_total_price_histogram(aggregator.total_price_values),
        }
        rendered = {name: path for name, path in charts.items() if path is not None}
        logger.info(f"Rendered {len(rendered)} of {len(charts)} charts")
        return rendered

    def plot_top_products(self, ranking: List[Tuple[str, int]]) -> Optional[str]:
        return self._ranked_barh(
            ranking, "top_5_products.png",
            title=f"Top {len(ranking)} Selling Products",
            xlabel="Quantity Sold", ylabel="Product", color="skyblue"
        )

    def plot_revenue_by_country(self, ranking: List[Tuple[str, float]]) -> Optional[str]:
        return self._ranked_barh(
            ranking, "top_10_revenue_countries.png",
            title=f"Top {len(ranking)} Countries by Revenue",
            xlabel="Revenue", ylabel="Country", color="orange", comma=True
        )

    def plot_top_customers(self, ranking: List[Tuple[str, float]]) -> Optional[str]:
        return self._ranked_barh(
            ranking, "top_10_customers_by_revenue.png",
            title=f"Top {len(ranking)} Customers by Revenue",
            xlabel=f"Revenue ({self.currency_symbol})", ylabel="Customer ID",
            color="darkgreen", comma=True
        )

    def plot_cancellations_by_country(self, ranking: List[Tuple[str, int]]) -> Optional[str]:
        return self._ranked_barh(
            ranking, "cancelled_orders_by_country.png",
            title=f"Top {len(ranking)} Countries with Cancelled Orders",
            xlabel="Number of Cancellations", ylabel="Country", color="tomato"
        )

    def plot_lost_revenue_by_country(self, ranking: List[Tuple[str, float]]) -> Optional[str]:
        return self._ranked_barh(
            ranking, "top_countries_revenue_lost_cancellations.png",
            title="Top Countries with Most Revenue Lost from Cancellations",
            xlabel=f"Revenue Lost ({self.currency_symbol})", ylabel="Country",
            color="tomato", comma=True
        )

    def _ranked_barh(self, ranking: List[Tuple[Any, float]], file_name: str, title: str,
                     xlabel: str, ylabel: str, color: str, comma: bool = False) -> Optional[str]:
        """Horizontal bars, largest value on top."""
        if not ranking:
            logger.warning(f"No data for {file_name}, skipping")
            return None

        labels = [str(key) for key, _ in reversed(ranking)]
        values = [value for _, value in reversed(ranking)]

        fig, ax = plt.subplots(figsize=(8, 6))
        _style_axes(ax)
        ax.barh(labels, values, color=color, height=0.8)
        ax.set_title(title, loc='left')
        ax.set_xlabel(xlabel)
        ax.set_ylabel(ylabel)
        if comma:
            ax.xaxis.set_major_formatter(_comma_formatter())

        return self._save(fig, file_name)

    def plot_monthly_revenue(self, monthly_trend: List[Tuple[Any, float]]) -> Optional[str]:
        """Line chart of revenue per month, points marked."""
        if not monthly_trend:
            logger.warning("No data for monthly_revenue_trend.png, skipping")
            return None

        months = [month for month, _ in monthly_trend]
        revenue = [value for _, value in monthly_trend]

        fig, ax = plt.subplots(figsize=(8, 6))
        _style_axes(ax)
        ax.plot(months, revenue, color="steelblue", linewidth=1.5)
        ax.scatter(months, revenue, color="red", zorder=3)
        ax.yaxis.set_major_formatter(_comma_formatter())
        ax.set_title("Monthly Revenue Trend", loc='left')
        ax.set_xlabel("Month")
        ax.set_ylabel("Revenue")
        fig.autofmt_xdate()

        return self._save(fig, "monthly_revenue_trend.png")

    def plot_transaction_types(self, counts: Dict[str, int]) -> Optional[str]:
        """Pie of Valid vs Cancelled raw lines."""
        counts = {label: count for label, count in sorted(counts.items()) if count > 0}
        if not counts:
            logger.warning("No data for transaction_type_pie_chart.png, skipping")
            return None

        palette = {'Valid': '#4eee94', 'Cancelled': 'tomato', 'Unknown': 'lightgrey'}
        fig, ax = plt.subplots(figsize=(6, 6))
        ax.pie(
            list(counts.values()),
            labels=list(counts.keys()),
            colors=[palette.get(label, 'grey') for label in counts],
            autopct='%1.1f%%',
            startangle=90,
            counterclock=False
        )
        ax.set_title("Distribution of Transaction Types")
        ax.axis('equal')

        return self._save(fig, "transaction_type_pie_chart.png")

    def plot_order_values(self, order_values: List[float]) -> Optional[str]:
        """Horizontal box plot of order values with jittered points."""
        if not order_values:
            logger.warning("No data for distribution_order_values_boxplot.png, skipping")
            return None

        fig, ax = plt.subplots(figsize=(8, 6))
        _style_axes(ax)
        ax.boxplot(
            order_values, orientation='horizontal', widths=0.3, patch_artist=True,
            boxprops={'facecolor': 'lightblue'},
            flierprops={'marker': 'o', 'markerfacecolor': 'red',
                        'markeredgecolor': 'red', 'markersize': 4}
        )
        rng = np.random.default_rng(0)
        jitter = 1 + rng.uniform(-0.1, 0.1, size=len(order_values))
        ax.scatter(order_values, jitter, alpha=0.3, color="darkblue", s=8)
        ax.set_yticks([1])
        ax.set_yticklabels(["All Orders"])
        ax.xaxis.set_major_formatter(_comma_formatter())
        ax.set_title("Distribution of Order Values", loc='left')
        ax.set_xlabel(f"Order Value ({self.currency_symbol})")

        return self._save(fig, "distribution_order_values_boxplot.png")

    def plot_total_price_histogram(self, total_prices: List[float]) -> Optional[str]:
        """Histogram of line revenue on a log10 axis, bins 0.1 decades wide."""
        values = np.asarray(total_prices, dtype=float)
        values = values[np.isfinite(values) & (values > 0)]
        if values.size == 0:
            logger.warning("No data for histogram_totalprice_log.png, skipping")
            return None

        low = np.floor(np.log10(values.min()) * 10) / 10
        high = np.ceil(np.log10(values.max()) * 10) / 10
        bins = 10 ** np.arange(low, high + 0.1, 0.1)
        if bins.size < 2:
            bins = np.array([10 ** low, 10 ** (low + 0.1)])

        fig, ax = plt.subplots(figsize=(8, 6))
        _style_axes(ax)
        ax.hist(values, bins=bins, color="skyblue", edgecolor="black")
        ax.set_xscale('log')
        ax.xaxis.set_major_formatter(mticker.FuncFormatter(lambda x, _: f"{x:,g}"))
        ax.set_title("Distribution of Total Transaction Values (Log Scale)", loc='left')
        ax.set_xlabel(f"TotalPrice ({self.currency_symbol})")
        ax.set_ylabel("Count")

        return self._save(fig, "histogram_totalprice_log.png")

    def _save(self, fig, file_name: str) -> str:
        file_path = self.chart_dir / file_name
        try:
            fig.tight_layout()
            fig.savefig(file_path, dpi=self.dpi)
        finally:
            plt.close(fig)
        logger.info(f"Chart saved to {file_path}")
        return str(file_path)
