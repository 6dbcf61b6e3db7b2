"""
Persistence models
"""
