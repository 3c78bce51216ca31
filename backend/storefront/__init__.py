"""
Storefront backend: product catalog and order placement
"""
__version__ = "1.0.0"
