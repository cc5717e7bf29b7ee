from .processor import OrderProcessor

__all__ = ["OrderProcessor"]
