"""Infrastructure layer — backing store engine, tables, repository.

This layer depends on stdlib, SQLAlchemy, and the domain records.
It must never import from services, commands, or output.
"""
