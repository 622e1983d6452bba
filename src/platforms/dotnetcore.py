""".NET Core platform: project-file detection and dotnet publish."""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Optional

from constants import ManifestKeys, PlatformNames
from common.logging_utils import extra_context, is_debug_enabled
from generation.errors import DetectionParseError
from .base import DetectionResult, Platform, read_repo_text

logger = logging.getLogger(__name__)

PROJECT = "project"
PROJECT_FILE_PATTERN = "*.csproj"

# netcoreapp2.2 -> 2.2, net6.0 -> 6.0
_TFM_RE = re.compile(r"^(?:netcoreapp|net)(\d+\.\d+)$", re.IGNORECASE)


def _local(tag: str) -> str:
    """Strip an XML namespace from a tag name."""
    return tag.rsplit("}", 1)[-1]


class DotNetCorePlatform(Platform):
    """Publishes a .NET Core project into the destination directory."""

    name = PlatformNames.DOTNET.value
    runtime_name = "dotnetcore"
    manifest_version_key = ManifestKeys.DOTNET_VERSION

    def find_project_file(self, context) -> Optional[str]:
        """Return the project file to build, relative to the source root."""
        repo = context.source_repo
        explicit = context.get_property(PROJECT)
        if explicit:
            return explicit if repo.file_exists(explicit) else None
        candidates = repo.enumerate_files(PROJECT_FILE_PATTERN)
        if len(candidates) > 1 and is_debug_enabled(logger):
            logger.debug(
                "Multiple project files found, using the first",
                extra=extra_context(
                    event="detect",
                    component="platform",
                    action="select_project",
                    platform=self.name,
                    candidates=candidates,
                ),
            )
        return candidates[0] if candidates else None

    def detect(self, context) -> Optional[DetectionResult]:
        project_file = self.find_project_file(context)
        if project_file is None:
            return None
        try:
            root = ET.fromstring(read_repo_text(context.source_repo, self.name, project_file))
        except ET.ParseError as e:
            raise DetectionParseError(self.name, project_file, str(e)) from e

        target_framework = None
        for elem in root.iter():
            if _local(elem.tag) == "TargetFramework" and elem.text and elem.text.strip():
                target_framework = elem.text.strip()
                break
        if target_framework is None:
            logger.debug("Could not find 'TargetFramework' element in %s", project_file)
            return None
        return DetectionResult(language=self.name, language_version=target_framework)

    def normalize_version(self, raw: str) -> str:
        text = raw.strip()
        match = _TFM_RE.match(text)
        return match.group(1) if match else text

    def generate_install_snippet(self, version: str) -> Optional[str]:
        return self.installer.install_snippet(version, file_prefix="dotnet-sdk")

    def generate_build_snippet(self, context, version: str) -> str:
        project_file = self.find_project_file(context) or ""
        return (
            f'echo "Using .NET Core runtime {version}"\n'
            "dotnet --info\n"
            f'echo "Publishing \'{project_file}\' to \'$DESTINATION_DIR\'..."\n'
            f'dotnet restore "{project_file}"\n'
            f'dotnet publish "{project_file}" -c Release -o "$DESTINATION_DIR"\n'
        )
