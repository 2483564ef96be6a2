"""
Session state module.

Holds the two pieces of mutable session state: the published snapshot,
replaced only at pass commit points, and the currently open action request.
"""
