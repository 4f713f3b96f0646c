"""Reader for maven-metadata.xml documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from pom.xml import children, child, parse_document, text


@dataclass
class Versioning:
    """The <versioning> block of a metadata document."""

    latest: str = ""
    release: str = ""
    versions: List[str] = field(default_factory=list)


@dataclass
class Metadata:
    """XML file describing the available versions of a package."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    versioning: Versioning = field(default_factory=Versioning)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Metadata":
        """Read Metadata from a downloaded XML file.

        Raises:
            DocumentFormatError: If the document is not valid XML.
        """
        root = parse_document(data, "metadata")
        versioning = child(root, "versioning")
        return cls(
            group_id=text(root, "groupId"),
            artifact_id=text(root, "artifactId"),
            version=text(root, "version"),
            versioning=Versioning(
                latest=text(versioning, "latest"),
                release=text(versioning, "release"),
                versions=[
                    v.text.strip()
                    for v in children(versioning, "versions/version")
                    if v.text and v.text.strip()
                ],
            ),
        )

    def get_latest(self) -> str:
        """There are multiple values that could indicate latest version."""
        if self.versioning.latest:
            return self.versioning.latest
        if self.versioning.release:
            return self.versioning.release
        return self.version
