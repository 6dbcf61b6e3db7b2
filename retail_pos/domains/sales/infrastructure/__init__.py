"""
Sales Infrastructure Layer

SQLAlchemy adapters for the sales ports.
"""
