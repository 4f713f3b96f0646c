"""Argument parsing functionality for pomfinder."""

import argparse


def parse_args(argv=None):
    """Parses the arguments passed to the program.

    Options left unset on the command line are None, so that values from a
    config file or the built-in defaults can fill them in.
    """
    parser = argparse.ArgumentParser(
        prog="pomfinder",
        description=(
            "pomfinder - Find POM URLs for Maven dependencies and their "
            "transitive dependencies. Reads group:artifact:version lines from "
            "STDIN and prints one URL per line."
        ),
        add_help=True,
    )

    parser.add_argument("-i", "--input",
                        dest="INPUT",
                        help="Read coordinates from a file instead of STDIN.",
                        action="store", type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML configuration file.",
                        action="store", type=str)
    parser.add_argument("-w", "--workers",
                        dest="WORKERS",
                        help="Number of concurrent HTTP workers (default: 50).",
                        action="store", type=int)
    parser.add_argument("-r", "--retries",
                        dest="RETRIES",
                        help="HTTP request attempts on non-404 errors (default: 2).",
                        action="store", type=int)
    parser.add_argument("-t", "--timeout",
                        dest="TIMEOUT",
                        help="HTTP request timeout in seconds (default: 2).",
                        action="store", type=float)
    parser.add_argument("--retry-delay",
                        dest="RETRY_DELAY",
                        help="Seconds to wait between HTTP attempts (default: 1).",
                        action="store", type=float)
    parser.add_argument("--pom-attempts",
                        dest="POM_ATTEMPTS",
                        help="Rounds of POM lookups across all repositories (default: 1).",
                        action="store", type=int)
    parser.add_argument("-R", "--repos-file",
                        dest="REPOS_FILE",
                        help="Path to a file with repository URLs, one per line.",
                        action="store", type=str)
    parser.add_argument("-s", "--ignore-scopes",
                        dest="IGNORE_SCOPES",
                        help="Comma-separated scopes to ignore (default: provided,system,test).",
                        action="store", type=str)

    parser.add_argument("--ignore-optional",
                        dest="IGNORE_OPTIONAL",
                        help="Ignore optional dependencies (default).",
                        action="store_const", const=True)
    parser.add_argument("--no-ignore-optional",
                        dest="IGNORE_OPTIONAL",
                        help="Follow optional dependencies.",
                        action="store_const", const=False)
    parser.add_argument("--ignore-transitive",
                        dest="IGNORE_TRANSITIVE",
                        help="Ignore dependencyManagement entries (default).",
                        action="store_const", const=True)
    parser.add_argument("--no-ignore-transitive",
                        dest="IGNORE_TRANSITIVE",
                        help="Follow scoped dependencyManagement entries.",
                        action="store_const", const=False)
    parser.add_argument("--recursive",
                        dest="RECURSIVE",
                        help="Search dependencies of found POMs (default).",
                        action="store_const", const=True)
    parser.add_argument("--no-recursive",
                        dest="RECURSIVE",
                        help="Only look up the given coordinates.",
                        action="store_const", const=False)
    parser.add_argument("-e", "--exit-code",
                        dest="EXIT_CODE",
                        help="Exit with a non-zero status code if any lookup failed.",
                        action="store_const", const=True)

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
