"""
🏠 Real Estate CRM Package
--------------------------
Record gateway over an Airtable base (properties, contacts, activities),
dashboard aggregation, and CSV property import.
"""

__version__ = "1.0.0"
