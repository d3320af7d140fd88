"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for Base.metadata.create_all() to see every table.
"""

from models.base import Base
from models.product import Product
from models.discount import Discount
from models.affiliate import Affiliate
from models.client import Client

__all__ = [
    'Base',
    'Product',
    'Discount',
    'Affiliate',
    'Client',
]
