"""
db/ - Database Layer
====================
Wire types, dialects, the error taxonomy, the PostgreSQL connection pool and
the statement helper. This layer is the lowest in the architecture and has
no dependencies on other layers.
"""
