"""Maven dependency coordinates and the rules for turning them into paths."""

from __future__ import annotations

from dataclasses import dataclass

from constants import Constants
from errors import InputFormatError


@dataclass
class Dependency:
    """Dependency found in POM files or given as input.

    Only ``version`` is ever changed after construction, when an unknown
    version gets resolved from repository metadata.
    """

    group_id: str
    artifact_id: str
    version: str = ""
    scope: str = ""
    optional: bool = False
    transitive: bool = False  # came from a dependencyManagement block

    @classmethod
    def from_string(cls, data: str) -> "Dependency":
        """Parse a ``<groupId>:<artifactId>:<version>`` coordinate.

        Raises:
            InputFormatError: If fewer than three fields are present.
        """
        tokens = data.strip().split(":")
        if len(tokens) < 3:
            raise InputFormatError(f"not a valid maven dependency: {data.strip()}")
        return cls(
            group_id=tokens[0].strip(),
            artifact_id=tokens[1].strip(),
            version=tokens[2].strip(),
        )

    def has_version(self) -> bool:
        """True when the version is concrete enough to build a POM path."""
        return (
            self.version != ""
            and self.version != Constants.UNSPECIFIED_VERSION
            and not self.version.startswith(Constants.PLACEHOLDER_PREFIX)
        )

    def get_version(self) -> str:
        """Return the version to use, picking one out of a range.

        Version strings can be ranges like "[2.1.0,2.1.1]". The highest token
        is picked by plain string ordering, so "[2.9,2.10]" yields "2.9".
        """
        clean = self.version.strip("[]()")
        tokens = sorted(token.strip() for token in clean.split(","))
        return tokens[-1]

    def id(self) -> str:  # pylint: disable=invalid-name
        """Identity used for deduplication within a run."""
        version = self.get_version() if self.has_version() else self.version
        return f"{self.group_id}:{self.artifact_id}:{version}"

    def group_id_as_path(self) -> str:
        """Group IDs in repository paths are split into subfolders."""
        return self.group_id.replace(".", "/")

    def get_meta_path(self) -> str:
        """Repository path of the artifact's maven-metadata.xml."""
        return f"{self.group_id_as_path()}/{self.artifact_id}/{Constants.METADATA_FILE}"

    def get_pom_path(self) -> str:
        """Repository path of the POM file for the current version."""
        version = self.get_version()
        return (
            f"{self.group_id_as_path()}/{self.artifact_id}/"
            f"{version}/{self.artifact_id}-{version}.pom"
        )

    def __str__(self) -> str:
        return (
            f"<Dep ID={self.group_id}:{self.artifact_id}:{self.version} "
            f"O={self.optional} S={self.scope} >"
        )
