"""
Sales Domain

Point-of-sale bounded context: orders, line items, product stock and returns.
"""
