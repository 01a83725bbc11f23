"""
finance_tracker
~~~~~~~~~~~~~~~

Backend for a personal finance tracker: authenticated CRUD for categories and
expenses plus an analytics engine (period totals with change ratios, category
breakdown, trends) served over FastAPI.
"""

__version__ = "1.0.0"
