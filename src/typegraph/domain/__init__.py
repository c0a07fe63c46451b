"""Domain layer — values, schemas, descriptors, validation, records.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
