"""Maven coordinate, POM and metadata document model."""

from pom.dependency import Dependency
from pom.metadata import Metadata, Versioning
from pom.project import Project

__all__ = ["Dependency", "Metadata", "Project", "Versioning"]
