"""
Project assignment feature module.

Keeps the project -> staff assignment map that project-level access checks
are resolved against, and persists it through a key/value storage backend.
"""
