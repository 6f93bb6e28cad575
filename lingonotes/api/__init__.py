"""
API boundary for LingoNotes backend.

Design intent:
- Keep transport concerns (HTTP, SSE, downloads) out of the session core.
"""
