"""
Utility modules shared by the summary cache.

- Canonical value objects (canonical.py)
- Application-level utilities: console output, asynchronous tasks (application/)
- File system and formatting helpers (io/)
"""
