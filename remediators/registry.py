#!/usr/bin/env python3
"""
Remediator Registry

Maps every ErrorKind to the remediator that handles it and dispatches
classified failures. The default registry is checked to cover the whole
taxonomy when it is built.
"""

import logging
from importlib import import_module
from pathlib import Path
from typing import Dict, List, Optional, Type

from pipeline.classifier import ErrorClassification, ErrorKind
from remediators.base import RemediationContext, RemediationResult, RemediatorBase

logger = logging.getLogger(__name__)

# One module per ErrorKind, each exposing get_remediator()
REMEDIATOR_MODULES = [
    "missing_metadata",
    "maker_notes",
    "incorrect_extension",
    "truncated_media",
    "file_exists",
    "unknown",
]


class RemediatorRegistry:
    """Registry of remediator classes keyed by ErrorKind"""

    def __init__(self):
        """Initialize empty remediator registry"""
        self.remediators: Dict[ErrorKind, Type[RemediatorBase]] = {}

    def register(self, remediator: Type[RemediatorBase]) -> None:
        """Register a remediator

        Args:
            remediator: A class (not instance) that inherits from RemediatorBase

        Raises:
            TypeError: If remediator is not a RemediatorBase subclass
            ValueError: If its ErrorKind already has a remediator
        """
        if not isinstance(remediator, type):
            raise TypeError(
                f"Remediator must be a class (not an instance), got {type(remediator).__name__}"
            )

        if not issubclass(remediator, RemediatorBase):
            raise TypeError(
                f"Remediator class must inherit from RemediatorBase, got {remediator.__name__}"
            )

        kind = remediator.get_kind()
        if kind in self.remediators:
            raise ValueError(
                f"{kind.value} is already handled by {self.remediators[kind].__name__}"
            )
        self.remediators[kind] = remediator

    def get(self, kind: ErrorKind) -> Type[RemediatorBase]:
        """Return the remediator for kind

        Raises:
            KeyError: If no remediator is registered for kind
        """
        return self.remediators[kind]

    def missing_kinds(self) -> List[ErrorKind]:
        """ErrorKinds without a registered remediator"""
        return [kind for kind in ErrorKind if kind not in self.remediators]

    def get_remediator_count(self) -> int:
        return len(self.remediators)


def create_default_registry() -> RemediatorRegistry:
    """Load every built-in remediator and verify the taxonomy is covered

    Raises:
        RuntimeError: If any ErrorKind is left without a remediator
    """
    registry = RemediatorRegistry()
    for name in REMEDIATOR_MODULES:
        module = import_module(f"remediators.{name}")
        registry.register(module.get_remediator())

    missing = registry.missing_kinds()
    if missing:
        raise RuntimeError(
            f"No remediator registered for: {', '.join(kind.value for kind in missing)}"
        )
    return registry


class RemediationDispatcher:
    """Runs the registered remediator for a classified failure"""

    def __init__(self, registry: RemediatorRegistry, context: RemediationContext):
        self.registry = registry
        self.context = context

    def remediate(
        self,
        classification: ErrorClassification,
        media_path: Path,
        destination_dir: Path,
        sidecar_path: Optional[Path] = None,
    ) -> RemediationResult:
        """Dispatch to the remediator for classification.kind

        Args:
            classification: Classified diagnostic
            media_path: Original media file
            destination_dir: Destination directory for the file
            sidecar_path: Sidecar recorded for the file, if any

        Returns:
            RemediationResult from the remediator
        """
        remediator = self.registry.get(classification.kind)
        logger.debug(
            f"Remediating {media_path} as {classification.kind.value} "
            f"with {remediator.__name__}"
        )
        result = remediator.remediate(
            classification,
            Path(media_path),
            Path(destination_dir),
            self.context,
            sidecar_path,
        )
        level = logging.INFO if result.processed else logging.WARNING
        logger.log(level, f"{classification.kind.value}: {Path(media_path).name}: {result.message}")
        return result
