"""Domain layer — entities, stores, audit log and the aggregate root.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
