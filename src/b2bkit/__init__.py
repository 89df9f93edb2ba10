"""b2bkit - Shopify B2B portal toolkit."""

__version__ = "0.1.0"
