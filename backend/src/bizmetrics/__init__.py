"""
Business metrics backend.

Revenue aggregation, customer growth and recent-activity feeds for
business accounts, served to the dashboard over a JSON API.
"""

__version__ = "1.0.0"
