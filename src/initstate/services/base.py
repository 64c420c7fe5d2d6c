"""BaseService — shared foundation for initstate services.

Every service receives the resolved :class:`InitStateSettings` at
construction time and derives its generator options from them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from initstate.domain.emitter import GeneratorOptions

if TYPE_CHECKING:
    from initstate.config.settings import InitStateSettings


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ExpandService(BaseService):
            def expand(self, paths: list[str]) -> ServiceResult:
                options = self.generator_options
                ...
    """

    def __init__(self, settings: InitStateSettings) -> None:
        self._settings = settings

    @property
    def generator_options(self) -> GeneratorOptions:
        generator = self._settings.generator
        return GeneratorOptions(
            method_name=generator.method_name,
            indent=generator.indent,
            emit_docs=generator.emit_docs,
        )

    @property
    def derive_name(self) -> str:
        return self._settings.scan.derive_name
