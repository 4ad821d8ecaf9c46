"""Service layer: metadata stores and processing entry points.

``processing_service`` is imported directly (it depends on the processing
package, which depends on the stores exported here).
"""

from .content_store import ContentStore, SqlContentStore
from .preferences_store import PreferencesStore, SqlPreferencesStore

__all__ = [
    "ContentStore",
    "SqlContentStore",
    "PreferencesStore",
    "SqlPreferencesStore",
]
