"""
Sales Application Layer

Use cases, DTOs and ports for the sales domain.
"""
