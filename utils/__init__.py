"""
utils/ - Shared helpers
=======================
Cross-cutting utilities with no dependencies on other layers.
"""
