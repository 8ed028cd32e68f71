"""
models/ - Domain Models
=======================
Plain dataclasses shared by the repositories and the HTTP handlers.
"""
