"""Credit application system.

Customers and their credit requests behind a small FastAPI service.
"""
