"""Download sources: the URL list loader and the first-wins catalog."""

from .catalog import SourceCatalog
from .loader import load_source_entries

__all__ = ["SourceCatalog", "load_source_entries"]
