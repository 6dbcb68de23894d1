"""Concrete adapters for the interfaces in ``bizknowledge.interfaces``."""
