"""
Domain package - Core business logic with no external dependencies.

This package contains pure Python records, calendar windows, currency
normalization and activity rules used by the metrics services.
"""
