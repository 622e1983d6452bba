"""buildsmith - platform detection and build script / Dockerfile generation.

    Returns:
        int: Exit code
"""
import logging
import os
import shutil
import sys
import tempfile

from args import parse_args
from cli_config import build_context, resolve_options
from constants import Constants, EnvVars, ExitCodes
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from checkers import default_checkers
from generation import (
    BuildScriptGenerator,
    DockerfileGenerator,
    DockerfileRules,
    ErrorKind,
    InvalidUsageError,
)
from platforms import build_registry

logger = logging.getLogger(__name__)


def _error_exit_code(error) -> int:
    if error.kind == ErrorKind.INVALID_USAGE:
        return ExitCodes.INVALID_USAGE.value
    return ExitCodes.RESOLUTION_ERROR.value


def _emit(text, output_path=None):
    """Write an artifact to a file, or to stdout."""
    if output_path:
        parent = os.path.dirname(os.path.abspath(output_path))
        os.makedirs(parent, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(text)
        logger.info("Wrote %s", output_path)
    else:
        sys.stdout.write(text)


def cmd_platforms(options):
    """List registered platforms with their supported and default versions."""
    for platform in build_registry(options):
        state = "enabled" if platform.is_enabled() else "disabled"
        versions = ", ".join(platform.supported_versions)
        print(f"{platform.name} ({state}): {versions} [default: {platform.default_version}]")
    return ExitCodes.SUCCESS.value


def cmd_detect(options, context):
    generator = BuildScriptGenerator(build_registry(options))
    versions, error = generator.get_required_tool_versions(context)
    if error is not None:
        sys.stderr.write(f"Error: {error.message}\n")
        return _error_exit_code(error)
    for name, version in versions.items():
        print(f"{name}={version}")
    return ExitCodes.SUCCESS.value


def cmd_script(options, context, output_path=None):
    messages = []
    generator = BuildScriptGenerator(
        build_registry(options), checkers=default_checkers(options.node_min_lts_major)
    )
    success, script, error = generator.try_generate_script(context, messages)
    if not success:
        sys.stderr.write(f"Error: {error.message}\n")
        return _error_exit_code(error)
    _emit(script, output_path)
    for message in messages:
        sys.stderr.write(f"{message}\n")
    return ExitCodes.SUCCESS.value


def cmd_dockerfile(options, context, output_path=None):
    generator = DockerfileGenerator(
        build_registry(options), rules=DockerfileRules.from_config(options.dockerfile)
    )
    result = generator.generate_dockerfile(context)
    if not result.ok:
        sys.stderr.write(f"Error: {result.error.message}\n")
        return _error_exit_code(result.error)
    _emit(result.dockerfile, output_path)
    return ExitCodes.SUCCESS.value


def run(argv=None):
    """Run one CLI invocation and return its exit code."""
    args = parse_args(argv)
    # Honor CLI --loglevel by passing it to centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ[EnvVars.LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging(getattr(args, "LOG_FILE", None))

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action),
        )

    temp_dir = None
    try:
        options = resolve_options(args)
        if args.action == "platforms":
            return cmd_platforms(options)

        if not os.path.isdir(options.source_dir):
            sys.stderr.write(f"Error: source directory '{options.source_dir}' does not exist.\n")
            return ExitCodes.FILE_ERROR.value

        os.makedirs(options.temp_dir, exist_ok=True)
        temp_dir = tempfile.mkdtemp(prefix=f"{options.operation_id}-", dir=options.temp_dir)
        options.temp_dir = temp_dir
        context = build_context(options)

        if args.action == "detect":
            return cmd_detect(options, context)
        if args.action == "dockerfile":
            return cmd_dockerfile(options, context, args.OUTPUT)
        return cmd_script(options, context, args.OUTPUT)
    except InvalidUsageError as e:
        sys.stderr.write(f"Error: {e}\n")
        return ExitCodes.INVALID_USAGE.value
    except OSError as e:
        logger.error("File error: %s", e)
        sys.stderr.write(f"Error: {e}\n")
        return ExitCodes.FILE_ERROR.value
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Unexpected error")
        sys.stderr.write(f"{Constants.GENERIC_ERROR_MESSAGE}\n")
        return ExitCodes.UNEXPECTED_ERROR.value
    finally:
        if temp_dir:
            shutil.rmtree(temp_dir, ignore_errors=True)


def main():
    """Main function of the program."""
    sys.exit(run())


if __name__ == "__main__":
    main()
