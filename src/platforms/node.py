"""Node.js platform: package.json detection and npm/yarn build steps."""

import json
import logging
import textwrap
from typing import Any, Dict, Optional

from constants import Constants, ManifestKeys, PlatformNames
from common.logging_utils import extra_context, is_debug_enabled
from generation.errors import DetectionParseError
from .base import DetectionResult, Platform, read_repo_text

logger = logging.getLogger(__name__)

RUN_BUILD_COMMAND = "run_build_command"
PRUNE_DEV_DEPENDENCIES = "prune_dev_dependencies"
NPM_REGISTRY_URL = "npm_registry_url"
YARN_LOCK_FILE = "yarn.lock"


def read_package_json(repo) -> Optional[Dict[str, Any]]:
    """Load package.json from the repository root.

    Returns:
        dict or None: Parsed document, or None when the file does not exist.

    Raises:
        DetectionParseError: If the file is not a JSON object.
    """
    if not repo.file_exists(Constants.PACKAGE_JSON_FILE):
        return None
    try:
        text = read_repo_text(repo, PlatformNames.NODEJS.value, Constants.PACKAGE_JSON_FILE)
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DetectionParseError(
            PlatformNames.NODEJS.value, Constants.PACKAGE_JSON_FILE, str(e)
        ) from e
    if not isinstance(data, dict):
        raise DetectionParseError(
            PlatformNames.NODEJS.value, Constants.PACKAGE_JSON_FILE, "expected a JSON object"
        )
    return data


class NodePlatform(Platform):
    """Builds JavaScript applications with npm, or yarn when yarn.lock exists."""

    name = PlatformNames.NODEJS.value
    runtime_name = "node"
    manifest_version_key = ManifestKeys.NODE_VERSION

    def detect(self, context) -> Optional[DetectionResult]:
        package_json = read_package_json(context.source_repo)
        if package_json is None:
            return None
        engines = package_json.get("engines") or {}
        version = engines.get("node") if isinstance(engines, dict) else None
        if version is not None and not isinstance(version, str):
            version = str(version)
        if is_debug_enabled(logger):
            logger.debug(
                "Detected Node.js application",
                extra=extra_context(
                    event="detect",
                    component="platform",
                    action="detect",
                    platform=self.name,
                    version=version,
                ),
            )
        return DetectionResult(language=self.name, language_version=version or None)

    def normalize_version(self, raw: str) -> str:
        text = raw.strip()
        if text[:1] in ("v", "V") and text[1:2].isdigit():
            return text[1:]
        return text

    def validate_properties(self, context) -> None:
        context.get_bool_property(PRUNE_DEV_DEPENDENCIES, default=False)

    def environment_setup_args(self, version: str) -> str:
        return f"node={version}"

    def generate_build_snippet(self, context, version: str) -> str:
        repo = context.source_repo
        package_json = read_package_json(repo) or {}
        scripts = package_json.get("scripts") or {}
        use_yarn = repo.file_exists(YARN_LOCK_FILE)
        registry_url = context.get_property(NPM_REGISTRY_URL)
        custom_build = context.get_property(RUN_BUILD_COMMAND)
        prune = context.get_bool_property(PRUNE_DEV_DEPENDENCIES, default=False)

        lines = [f'echo "Using Node version {version}:"', "node --version"]
        if registry_url:
            lines.append(f'echo "registry={registry_url}" >> ~/.npmrc')
        if use_yarn:
            lines.append('echo "Running \'yarn install --prefer-offline\'..."')
            lines.append("yarn install --prefer-offline")
        else:
            lines.append('echo "Running \'npm install\'..."')
            lines.append("npm install")

        if custom_build:
            lines.append(f'echo "Running \'{custom_build}\'..."')
            lines.append(custom_build)
        elif isinstance(scripts, dict) and "build" in scripts:
            tool = "yarn run build" if use_yarn else "npm run build"
            lines.append(f'echo "Running \'{tool}\'..."')
            lines.append(tool)

        if prune:
            lines.append(textwrap.dedent("""\
                echo "Pruning development dependencies..."
                npm prune --production""").rstrip())
        return "\n".join(lines) + "\n"
