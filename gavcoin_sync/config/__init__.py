"""
Configuration module.

Typed defaults, YAML overrides and validation for a sync session.
"""
