"""initstate — generate ``check_initial_state()`` for Rust builder structs."""

__version__ = "0.3.0"
