"""Argument parsing functionality for buildsmith."""

import argparse
from constants import Constants


def _add_common_arguments(parser):
    """Arguments shared by the sub-commands that inspect a source directory."""
    parser.add_argument("SOURCE_DIR",
                        help="Path to the application source directory",
                        action="store", type=str)
    parser.add_argument("-o", "--destination",
                        dest="DESTINATION_DIR",
                        help="Build output directory (default: the source directory)",
                        action="store", type=str)
    parser.add_argument("-i", "--intermediate-dir",
                        dest="INTERMEDIATE_DIR",
                        help="Directory the source is copied to and built in",
                        action="store", type=str)
    parser.add_argument("--temp-dir",
                        dest="TEMP_DIR",
                        help=f"Scratch directory (default: {Constants.DEFAULT_TEMP_DIR})",
                        action="store", type=str)
    parser.add_argument("--platform",
                        dest="PLATFORM",
                        help="Platform to build with instead of detecting it, i.e: nodejs, python",
                        action="store", type=str)
    parser.add_argument("--platform-version",
                        dest="PLATFORM_VERSION",
                        help="Version or range of the platform; requires --platform",
                        action="store", type=str)
    parser.add_argument("-p", "--property",
                        dest="PROPERTIES",
                        help="Platform property (KEY=VALUE format, can be used multiple times)",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--enable-multi-platform",
                        dest="ENABLE_MULTI_PLATFORM",
                        help="Build every detected platform, not just the main one (true/false)",
                        nargs="?", const="true", type=str)
    parser.add_argument("--enable-dynamic-install",
                        dest="ENABLE_DYNAMIC_INSTALL",
                        help="Install missing SDK versions from the SDK storage (true/false)",
                        nargs="?", const="true", type=str)
    parser.add_argument("--enable-checkers",
                        dest="ENABLE_CHECKERS",
                        help="Run checkers and report their advisories (true/false)",
                        nargs="?", const="true", type=str)
    parser.add_argument("--output",
                        dest="OUTPUT",
                        help="Write the generated artifact to this file instead of stdout",
                        action="store", type=str)


def _add_global_arguments(parser):
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store", type=str,
                        choices=Constants.LOG_LEVELS,
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store", type=str)


def build_parser():
    """Create the argument parser with all sub-commands."""
    parser = argparse.ArgumentParser(
        prog=Constants.PROGRAM_NAME,
        description=(
            "buildsmith - detects application platforms and generates build scripts and Dockerfiles"
        ),
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="action", metavar="ACTION")
    subparsers.required = True

    script = subparsers.add_parser("script", help="Generate a bash build script")
    _add_common_arguments(script)
    _add_global_arguments(script)

    dockerfile = subparsers.add_parser("dockerfile", help="Generate a multi-stage Dockerfile")
    _add_common_arguments(dockerfile)
    _add_global_arguments(dockerfile)
    dockerfile.add_argument("--runtime-platform",
                            dest="RUNTIME_PLATFORM",
                            help="Platform whose runtime image the final stage uses",
                            action="store", type=str)

    detect = subparsers.add_parser("detect", help="Print the platforms and versions a build would use")
    _add_common_arguments(detect)
    _add_global_arguments(detect)

    platforms = subparsers.add_parser("platforms", help="List platforms and their supported versions")
    _add_global_arguments(platforms)

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
