"""Domain layer — declarations, classification, and code emission.

This layer depends only on the stdlib.
It must never import from services, infrastructure, commands, or config.
"""
