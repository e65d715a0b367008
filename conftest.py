"""Pytest configuration for db-connector tests.

This module provides global pytest configuration and custom warning filters.
"""

import warnings

# SQLAlchemy warning for a connection still checked out at interpreter shutdown
warnings.filterwarnings(
    "ignore",
    message=r".*The garbage collector is trying to clean up.*",
    category=Warning,
)
