"""
Ledger history read layer.

Cursor-stable account history, receipts and batch status over the
executed transaction / priority operation store.
"""

__version__ = "0.1.0"
