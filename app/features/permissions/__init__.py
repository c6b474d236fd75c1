"""
Permission resolution feature module.

Department-based page access and assignment-based project access for the
repairs category, resolved against the project assignment store.
"""
