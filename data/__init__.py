# Data layer for the campaign builder

from .ads_client import AdsClient, extract_resource_id
from . import constraint_tables

__all__ = ['AdsClient', 'extract_resource_id', 'constraint_tables']
