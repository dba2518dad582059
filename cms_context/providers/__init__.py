"""Concrete provider implementations of the cms-context interfaces."""
