"""Abstract interfaces implemented by cms-context providers."""

from cms_context.interfaces.document_store import IDocumentStore

__all__ = ["IDocumentStore"]
