"""Service layer — clone strategies and their orchestration.

Services may import from the domain, config and plugins layers.
They must never import from commands or output.
"""
