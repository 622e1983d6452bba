"""Assembly of the bash build script from resolved platforms."""

import logging
import shlex
import textwrap
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from checkers.runner import run_checkers
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants, EnvVars
from .compatibility import CompatiblePlatformResolver, Resolution, tool_versions
from .context import BuildContext, validate_context
from .errors import BuildError
from .manifest import manifest_entries, manifest_write_snippet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScriptResult:
    """Generated script, or the error that prevented generating one."""
    script: Optional[str] = None
    error: Optional[BuildError] = None
    resolution: Optional[Resolution] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.script is not None


def _hook_snippet(stage: str) -> str:
    """Run the configured command and/or script for 'pre' or 'post' build."""
    upper = stage.upper()
    return textwrap.dedent(f"""\
        if [ -n "${upper}_BUILD_COMMAND" ]; then
            echo "Executing {stage}-build command..."
            eval "${upper}_BUILD_COMMAND"
        fi
        if [ -n "${upper}_BUILD_SCRIPT_PATH" ]; then
            echo "Executing {stage}-build script '${upper}_BUILD_SCRIPT_PATH'..."
            chmod +x "${upper}_BUILD_SCRIPT_PATH"
            "${upper}_BUILD_SCRIPT_PATH"
        fi
        """)


class BuildScriptGenerator:
    """Produces a build script for a repository.

    Args:
        registry: Platforms in registry order.
        checkers: Checkers run after a successful resolution when the context
            enables them.
    """

    def __init__(self, registry: Sequence, checkers: Optional[Sequence] = None):
        self.resolver = CompatiblePlatformResolver(registry)
        self.checkers = list(checkers or [])

    def get_compatible_platforms(self, context: BuildContext) -> Resolution:
        validate_context(context, self.resolver.enabled_platforms())
        return self.resolver.resolve(context)

    def get_required_tool_versions(
        self, context: BuildContext
    ) -> Tuple[Dict[str, str], Optional[BuildError]]:
        """Return ``({platform: version}, error)`` without generating a script."""
        resolution = self.get_compatible_platforms(context)
        if not resolution.ok:
            return {}, resolution.error
        return tool_versions(resolution), None

    def generate_script(
        self, context: BuildContext, messages: Optional[List] = None
    ) -> ScriptResult:
        """Resolve platforms, run checkers and compose the script.

        Args:
            context: BuildContext of the current run.
            messages: Caller-owned list receiving checker messages.

        Returns:
            ScriptResult: The script, or the resolution error.

        Raises:
            InvalidUsageError: If the context is contradictory or incomplete.
        """
        validate_context(context, self.resolver.enabled_platforms())
        with Timer() as timer:
            resolution = self.resolver.resolve(context)
            if not resolution.ok:
                logger.error("%s", resolution.error.message)
                return ScriptResult(error=resolution.error, resolution=resolution)

            if context.checkers_enabled and self.checkers:
                sink = messages if messages is not None else []
                run_checkers(self.checkers, context.source_repo, tool_versions(resolution), sink)

            script = self._compose(context, resolution)

        if is_debug_enabled(logger):
            logger.debug(
                "Build script generated",
                extra=extra_context(
                    event="generate",
                    component="script",
                    action="compose",
                    operation_id=context.operation_id,
                    platforms=tool_versions(resolution),
                    length=len(script),
                    duration_ms=timer.duration_ms(),
                ),
            )
        return ScriptResult(script=script, resolution=resolution)

    def try_generate_script(
        self, context: BuildContext, messages: Optional[List] = None
    ) -> Tuple[bool, Optional[str], Optional[BuildError]]:
        """Variant of generate_script returning ``(success, script, error)``."""
        result = self.generate_script(context, messages)
        return result.ok, result.script, result.error

    def _compose(self, context: BuildContext, resolution: Resolution) -> str:
        parts: List[str] = [self._header(context)]

        for rp in resolution.platforms:
            if not context.dynamic_install_enabled:
                break
            if rp.platform.is_version_already_installed(rp.version):
                logger.debug("%s %s is already installed", rp.name, rp.version)
                continue
            install = rp.platform.generate_install_snippet(rp.version)
            if install:
                # The sentinel write directly follows its install block.
                sentinel = rp.platform.sentinel_snippet(rp.version) or ""
                if not install.endswith("\n"):
                    install += "\n"
                parts.append(install + sentinel)

        setup_args = " ".join(rp.platform.environment_setup_args(rp.version) for rp in resolution.platforms)
        parts.append(f'source {Constants.ENV_SETUP_SCRIPT} {setup_args}\ncd "$BUILD_DIR"\n')
        parts.append(self._build_environment(context))

        main, others = resolution.platforms[0], resolution.platforms[1:]
        parts.append(_hook_snippet("pre"))
        parts.append(main.platform.generate_build_snippet(context, main.version))
        parts.append(_hook_snippet("post"))
        for rp in others:
            parts.append(rp.platform.generate_build_snippet(context, rp.version))

        parts.append(textwrap.dedent("""\
            if [ "$BUILD_DIR" != "$DESTINATION_DIR" ]; then
                echo "Copying files to destination directory '$DESTINATION_DIR'..."
                mkdir -p "$DESTINATION_DIR"
                cp -rf "$BUILD_DIR"/. "$DESTINATION_DIR"
            fi
            """))
        parts.append(manifest_write_snippet(manifest_entries(context, resolution)))
        parts.append('echo "Done."\n')
        return "\n".join(part if part.endswith("\n") else part + "\n" for part in parts)

    @staticmethod
    def _header(context: BuildContext) -> str:
        build_dir = context.intermediate_dir or context.source_dir
        lines = [
            "#!/bin/bash",
            "set -e",
            "",
            f"{EnvVars.SOURCE_DIR}={shlex.quote(context.source_dir)}",
            f"{EnvVars.DESTINATION_DIR}={shlex.quote(context.destination_dir)}",
            f"BUILD_DIR={shlex.quote(build_dir)}",
            f"export {EnvVars.SOURCE_DIR} {EnvVars.DESTINATION_DIR}",
            "",
            'echo "Source directory     : $SOURCE_DIR"',
            'echo "Destination directory: $DESTINATION_DIR"',
        ]
        if context.intermediate_dir:
            lines += [
                'echo "Intermediate directory: $BUILD_DIR"',
                'mkdir -p "$BUILD_DIR"',
                'cp -rf "$SOURCE_DIR"/. "$BUILD_DIR"',
            ]
        lines.append('cd "$BUILD_DIR"')
        return "\n".join(lines) + "\n"

    @staticmethod
    def _build_environment(context: BuildContext) -> str:
        """Load build.env from the source dir, then export configured hook settings."""
        lines = [
            f'if [ -f "$SOURCE_DIR/{Constants.BUILD_ENV_FILE}" ]; then',
            "    set -a",
            f'    source "$SOURCE_DIR/{Constants.BUILD_ENV_FILE}"',
            "    set +a",
            "fi",
        ]
        for var in EnvVars.HOOK_VARS:
            value = context.build_environment.get(var)
            if value:
                lines.append(f"export {var}={shlex.quote(value)}")
        return "\n".join(lines) + "\n"
