"""Infrastructure layer — database, graph analysis, filesystem.

This layer depends on stdlib and third-party libs (SQLAlchemy, NetworkX).
It may read domain records but never imports from services, commands, or output.
"""
