"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    RESOLUTION_FAILED = 3


class Scopes(Enum):
    """Dependency scopes known to Maven.

    Args:
        Enum (string): Scope names as they appear in POM files.
    """

    COMPILE = "compile"
    RUNTIME = "runtime"
    PROVIDED = "provided"
    SYSTEM = "system"
    TEST = "test"
    IMPORT = "import"
    NONE = "none"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # List of Maven repo URLs to try when searching for POMs
    DEFAULT_REPOS = [
        "https://repo.maven.apache.org/maven2",
        "https://dl.google.com/dl/android/maven2",
        "https://repository.sonatype.org/content/groups/sonatype-public-grid",
        "https://plugins.gradle.org/m2",
        "https://jitpack.io",
    ]
    DEFAULT_IGNORE_SCOPES = [
        Scopes.PROVIDED.value,
        Scopes.SYSTEM.value,
        Scopes.TEST.value,
    ]
    DEFAULT_PLUGIN_GROUP_ID = "org.apache.maven.plugins"
    METADATA_FILE = "maven-metadata.xml"
    UNSPECIFIED_VERSION = "unspecified"
    PLACEHOLDER_PREFIX = "${"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    ENV_LOG_LEVEL = "POMFINDER_LOG_LEVEL"
    CONFIG_SECTION = "pomfinder"

    WORKERS = 50  # Size of the HTTP worker pool and its job queue
    HTTP_RETRIES = 2  # Attempts per repository on non-404 errors
    HTTP_TIMEOUT = 2  # Timeout in seconds for a single HTTP attempt
    HTTP_RETRY_DELAY_SEC = 1.0
    POM_FETCH_ATTEMPTS = 1  # Rounds of POM lookups across all repos
    POM_RETRY_DELAY_SEC = 1.0
    USER_AGENT = "pomfinder/1.0"
