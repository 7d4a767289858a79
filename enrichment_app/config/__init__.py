from .settings import EnrichmentSettings

__all__ = ['EnrichmentSettings']
