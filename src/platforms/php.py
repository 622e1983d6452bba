"""PHP platform: composer.json or plain *.php detection and composer install."""

import json
from typing import Optional

from constants import Constants, ManifestKeys, PlatformNames
from generation.errors import DetectionParseError
from .base import DetectionResult, Platform, read_repo_text


class PhpPlatform(Platform):
    """Runs ``composer install`` when the application has a composer.json."""

    name = PlatformNames.PHP.value
    manifest_version_key = ManifestKeys.PHP_VERSION

    def detect(self, context) -> Optional[DetectionResult]:
        repo = context.source_repo
        if repo.file_exists(Constants.COMPOSER_JSON_FILE):
            try:
                composer = json.loads(read_repo_text(repo, self.name, Constants.COMPOSER_JSON_FILE))
            except json.JSONDecodeError as e:
                raise DetectionParseError(self.name, Constants.COMPOSER_JSON_FILE, str(e)) from e
            if not isinstance(composer, dict):
                raise DetectionParseError(
                    self.name, Constants.COMPOSER_JSON_FILE, "expected a JSON object"
                )
            require = composer.get("require") or {}
            version = require.get("php") if isinstance(require, dict) else None
            if isinstance(version, (int, float)) and not isinstance(version, bool):
                version = str(version)
            elif version is not None and not isinstance(version, str):
                raise DetectionParseError(
                    self.name, Constants.COMPOSER_JSON_FILE, "'require.php' must be a version string"
                )
            return DetectionResult(language=self.name, language_version=version or None)
        if repo.enumerate_files("*.php"):
            return DetectionResult(language=self.name)
        return None

    def generate_build_snippet(self, context, version: str) -> str:
        lines = ['echo "PHP executable: $(which php)"', "php --version"]
        if context.source_repo.file_exists(Constants.COMPOSER_JSON_FILE):
            lines += [
                'composer="composer"',
                "echo \"Running '$composer install --ignore-platform-reqs --no-interaction'...\"",
                "$composer install --ignore-platform-reqs --no-interaction",
            ]
        else:
            lines.append(
                f"echo \"No '{Constants.COMPOSER_JSON_FILE}' file found; not running 'composer install'.\""
            )
        return "\n".join(lines) + "\n"
