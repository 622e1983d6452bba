"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    INVALID_USAGE = 2
    RESOLUTION_ERROR = 3
    UNEXPECTED_ERROR = 4


class PlatformNames(Enum):
    """Platforms shipped with the program.

    Args:
        Enum (string): Registry names of the built-in platforms.
    """

    DOTNET = "dotnet"
    NODEJS = "nodejs"
    PHP = "php"
    PYTHON = "python"


class ManifestKeys:  # pylint: disable=too-few-public-methods
    """Stable keys written to the build manifest."""

    PLATFORMS = "platforms"
    OPERATION_ID = "operation_id"
    BUILD_TYPE = "build_type"
    NODE_VERSION = "node_version"
    PYTHON_VERSION = "python_version"
    DOTNET_VERSION = "dotnet_core_runtime_version"
    PHP_VERSION = "php_version"
    VIRTUALENV_NAME = "virtualenv_name"
    COMPRESSED_VIRTUALENV_FILE = "compressed_virtualenv_file"
    PACKAGEDIR = "packagedir"


class EnvVars:  # pylint: disable=too-few-public-methods
    """Environment variables read by the CLI or by generated scripts."""

    LOG_LEVEL = "BUILDSMITH_LOG_LEVEL"
    ENABLE_MULTIPLATFORM_BUILD = "ENABLE_MULTIPLATFORM_BUILD"
    ENABLE_DYNAMIC_INSTALL = "ENABLE_DYNAMIC_INSTALL"
    ENABLE_CHECKERS = "ENABLE_CHECKERS"
    PLATFORM_NAME = "PLATFORM_NAME"
    PLATFORM_VERSION = "PLATFORM_VERSION"
    PRE_BUILD_SCRIPT_PATH = "PRE_BUILD_SCRIPT_PATH"
    POST_BUILD_SCRIPT_PATH = "POST_BUILD_SCRIPT_PATH"
    PRE_BUILD_COMMAND = "PRE_BUILD_COMMAND"
    POST_BUILD_COMMAND = "POST_BUILD_COMMAND"
    DISABLE_COLLECTSTATIC = "DISABLE_COLLECTSTATIC"
    SOURCE_DIR = "SOURCE_DIR"
    DESTINATION_DIR = "DESTINATION_DIR"
    HOOK_VARS = (
        PRE_BUILD_SCRIPT_PATH,
        POST_BUILD_SCRIPT_PATH,
        PRE_BUILD_COMMAND,
        POST_BUILD_COMMAND,
    )


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PROGRAM_NAME = "buildsmith"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    GENERIC_ERROR_MESSAGE = "Oops... An unexpected error has occurred."

    BUILD_ENV_FILE = "build.env"
    MANIFEST_FILE = "build-manifest.toml"
    DEFAULT_TEMP_DIR = "/tmp/buildsmith"

    # Shared environment-setup script sourced by generated scripts once all
    # runtimes are installed.
    ENV_SETUP_SCRIPT = "/usr/local/bin/benv"
    BUILTIN_INSTALL_ROOT = "/opt"
    DYNAMIC_INSTALL_ROOT = "/tmp/buildsmith/platforms"
    SDK_STORAGE_BASE_URL = "https://sdk.buildsmith.dev"
    SDK_SENTINEL_FILE = ".buildsmith-sdk-sentinel"

    BUILD_IMAGE = "buildsmith/build"
    RUNTIME_IMAGE_REPOSITORY = "buildsmith"
    DOCKERFILE_FALLBACK_TAG = "latest"

    SUPPORTED_VERSIONS = {
        PlatformNames.DOTNET.value: ["2.1.30", "3.1.32", "6.0.33", "8.0.8"],
        PlatformNames.NODEJS.value: [
            "8.17.0", "10.24.1", "12.22.12", "14.21.3", "16.20.2", "18.20.4", "20.17.0",
        ],
        PlatformNames.PHP.value: ["5.6.40", "7.3.33", "7.4.33", "8.1.29", "8.2.22"],
        PlatformNames.PYTHON.value: [
            "2.7.18", "3.7.17", "3.8.18", "3.9.19", "3.10.14", "3.11.9", "3.12.4",
        ],
    }
    DEFAULT_VERSIONS = {
        PlatformNames.DOTNET.value: "8.0.8",
        PlatformNames.NODEJS.value: "20.17.0",
        PlatformNames.PHP.value: "8.2.22",
        PlatformNames.PYTHON.value: "3.11.9",
    }

    # Declarative build-image tag rules: platform -> ordered [(npm range, tag)].
    DOCKERFILE_TAG_RULES = {
        PlatformNames.DOTNET.value: [("~2.1 || ~3.1", "slim")],
        PlatformNames.NODEJS.value: [(">=8", "slim")],
        PlatformNames.PYTHON.value: [(">=3.7", "slim")],
    }
    DOCKERFILE_RUNTIME_NAMES = {
        PlatformNames.DOTNET.value: "dotnetcore",
        PlatformNames.NODEJS.value: "node",
    }

    NODE_MIN_LTS_MAJOR = 18

    PACKAGE_JSON_FILE = "package.json"
    REQUIREMENTS_FILE = "requirements.txt"
    PYPROJECT_TOML_FILE = "pyproject.toml"
    SETUP_PY_FILE = "setup.py"
    RUNTIME_TXT_FILE = "runtime.txt"
    DJANGO_MANAGE_FILE = "manage.py"
    COMPOSER_JSON_FILE = "composer.json"
