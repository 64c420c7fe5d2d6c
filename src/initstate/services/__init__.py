"""Service layer — generation workflows returning ServiceResult.

Services may import from domain, config and infrastructure layers.
They must never import from commands or output.
"""
