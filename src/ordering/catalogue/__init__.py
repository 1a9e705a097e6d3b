"""Catalogue adapter abstraction: where ordering looks products up."""

import os

_catalogue_instance = None


def get_catalogue():
    """Return the configured catalogue adapter (singleton).

    Uses InMemoryCatalogue by default. Configure via the CATALOGUE_ADAPTER
    environment variable.
    """
    global _catalogue_instance
    if _catalogue_instance is None:
        adapter = os.environ.get("CATALOGUE_ADAPTER", "memory")
        if adapter == "memory":
            from ordering.catalogue.memory_adapter import InMemoryCatalogue

            _catalogue_instance = InMemoryCatalogue()
        else:
            raise ValueError(f"Unknown catalogue adapter: {adapter}")
    return _catalogue_instance


def reset_catalogue():
    """Reset the catalogue singleton (useful for testing)."""
    global _catalogue_instance
    _catalogue_instance = None
