"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, initstate.toml only contains
overrides. An empty file (or no file) reproduces the stock generator.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class GeneratorConfig(BaseModel):
    """[generator] section."""

    model_config = {"frozen": True}

    method_name: str = Field(default="check_initial_state", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    indent: int = Field(default=4, ge=1, le=16)
    emit_docs: bool = True
    lint_option_types: bool = False


class ScanConfig(BaseModel):
    """[scan] section."""

    model_config = {"frozen": True}

    derive_name: str = Field(default="CheckInitialState", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")


class InitStateConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
