# src/pipeline/registry.py — v1
"""Pipeline registry — dynamic loading and lookup of pipeline definitions.

Loads PipelineDefinition objects from the PIPELINE_REGISTRY config list
and provides lookup by name.
"""

from __future__ import annotations

import importlib
import logging
from functools import lru_cache

from prodanalyzer.config.pipelines import PIPELINE_REGISTRY
from prodanalyzer.pipeline.plugin_kit.base_stage import PipelineDefinition

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when pipeline loading or lookup fails."""


class PipelineRegistry:
    """Registry of all available pipeline definitions."""

    def __init__(self) -> None:
        self._pipelines: dict[str, PipelineDefinition] = {}

    @property
    def pipelines(self) -> dict[str, PipelineDefinition]:
        """Return mapping of pipeline name -> definition."""
        return dict(self._pipelines)

    @property
    def names(self) -> list[str]:
        """Return registered pipeline names in registration order."""
        return list(self._pipelines)

    def load_all(self, paths: list[str] | None = None) -> None:
        """Load every definition listed in PIPELINE_REGISTRY (or `paths`).

        Raises:
            RegistryError: If a path cannot be imported or does not name
                a PipelineDefinition.
        """
        for path in PIPELINE_REGISTRY if paths is None else paths:
            self.register(_import_definition(path))
        logger.debug("Registry loaded %d pipelines", len(self._pipelines))

    def register(self, definition: PipelineDefinition) -> None:
        """Manually register a pipeline definition."""
        if definition.name in self._pipelines:
            logger.warning("Overwriting existing pipeline: %s", definition.name)
        self._pipelines[definition.name] = definition

    def get(self, name: str) -> PipelineDefinition | None:
        """Get pipeline by name, or None if not registered."""
        return self._pipelines.get(name)

    def get_or_raise(self, name: str) -> PipelineDefinition:
        """Get pipeline by name, raise if not found."""
        definition = self._pipelines.get(name)
        if definition is None:
            raise RegistryError(
                f"Unknown pipeline {name!r}. Available: {', '.join(self.names) or 'none'}"
            )
        return definition


@lru_cache(maxsize=1)
def default_registry() -> PipelineRegistry:
    """Registry with the built-in pipelines, loaded once per process."""
    registry = PipelineRegistry()
    registry.load_all()
    return registry


def _import_definition(path: str) -> PipelineDefinition:
    """Import a PipelineDefinition from a dotted attribute path.

    Args:
        path: e.g. 'prodanalyzer.pipeline.definitions.script.SCRIPT_PIPELINE'
    """
    parts = path.rsplit(".", 1)
    if len(parts) != 2:
        raise RegistryError(f"Invalid definition path: {path}")
    module_path, attr = parts

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise RegistryError(f"Cannot import module {module_path}: {exc}") from exc

    definition = getattr(module, attr, None)
    if definition is None:
        raise RegistryError(f"{attr} not found in {module_path}")
    if not isinstance(definition, PipelineDefinition):
        raise RegistryError(f"{path} is not a PipelineDefinition")
    return definition
