"""
LingoNotes backend package.

Design intent:
- Keep the note session state machine independent from any translation vendor.
- Persist the note history locally as full snapshots.
- Keep export rendering deterministic and snapshot-based.
"""
