"""I/O utilities for pipeline artifacts and step logs."""

from .artifact_writer import ArtifactWriter

__all__ = ["ArtifactWriter"]
