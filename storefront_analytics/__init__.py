"""
Storefront Admin Analytics

Reporting and aggregation layer for the storefront back-office: time-series
bucketing, period comparison, promotion status, review statistics and the
dashboard/report summaries built on top of them.
"""

__version__ = "1.0.0"
