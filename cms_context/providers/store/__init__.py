"""Document-store providers."""

from cms_context.providers.store.sanity_http_provider import SanityHTTPProvider

__all__ = ["SanityHTTPProvider"]
