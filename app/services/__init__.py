"""Services package — expose all concrete services from one import."""
from .borga_service import BorgaService, MAX_SEARCH_LIMIT

__all__ = [
    'BorgaService',
    'MAX_SEARCH_LIMIT',
]
