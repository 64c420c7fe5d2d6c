"""Infrastructure layer — reading, tokenizing, parsing and rewriting Rust sources.

Infrastructure may import from the domain layer.
It must never import from services, commands, or output.
"""
