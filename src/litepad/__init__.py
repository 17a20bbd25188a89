"""
LitePad store: local persistence for the LitePad note-taking application.

Content-addressed image storage, legacy image migration, and zip-based
backups of the full document state.
"""

__version__ = "2.0.0"
