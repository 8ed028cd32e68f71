"""
db/ - Database Layer
====================
Handles PostgreSQL connections and schema provisioning.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
