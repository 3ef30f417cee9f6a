"""Domain layer — categories, markers, field discovery and request models.

This layer depends only on stdlib and pydantic.
It must never import from services, config, commands, or output.
"""
