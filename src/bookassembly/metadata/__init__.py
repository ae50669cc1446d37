# ABOUTME: Metadata package for looking up books online by ISBN or free text.
# ABOUTME: Exports the lookup service, its HTTP client, and result types.

from bookassembly.metadata.http import BookAssemblyHttpClient, HttpClient, MetadataFetchError
from bookassembly.metadata.lookup import BookLookup
from bookassembly.metadata.types import LookupResult, SearchPage

__all__ = [
    "BookAssemblyHttpClient",
    "BookLookup",
    "HttpClient",
    "LookupResult",
    "MetadataFetchError",
    "SearchPage",
]
