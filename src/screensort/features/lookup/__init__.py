"""Metadata lookup, destination routing and activity logging collaborators."""

from .interfaces import ActivityLog, DestinationRouter, LookupRegistry, LookupResult, MetadataLookup
from .activity_log import JsonLinesActivityLog
from .directory_router import DirectoryRouter
from .google_books_lookup import GoogleBooksLookup
from .tmdb_lookup import TMDbLookup
from .youtube_lookup import YouTubeLookup

__all__ = [
    'ActivityLog',
    'DestinationRouter',
    'LookupRegistry',
    'LookupResult',
    'MetadataLookup',
    'JsonLinesActivityLog',
    'DirectoryRouter',
    'GoogleBooksLookup',
    'TMDbLookup',
    'YouTubeLookup',
]
