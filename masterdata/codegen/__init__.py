"""Code generation: jinja2 templates and the content-addressed writer."""

from .generator import ArtifactGenerator, RegistryEntry, RenderedArtifact, validate_schema_name
from .writer import write_artifact

__all__ = [
    "ArtifactGenerator",
    "RegistryEntry",
    "RenderedArtifact",
    "validate_schema_name",
    "write_artifact",
]
