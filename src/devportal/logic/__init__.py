"""
Business logic: upstream access, aggregation, screening and reference data.
"""
