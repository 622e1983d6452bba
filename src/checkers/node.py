"""Built-in checkers for Node.js applications."""

import json
from typing import List, Mapping

import semantic_version

from constants import Constants, PlatformNames
from .base import Checker, CheckerMessage


class NodeVersionChecker(Checker):
    """Warns when the resolved Node.js version is older than the oldest LTS."""

    name = "node-version"
    target_platform = PlatformNames.NODEJS.value

    def __init__(self, min_lts_major: int = Constants.NODE_MIN_LTS_MAJOR):
        self.min_lts_major = min_lts_major

    def check_tool_versions(self, tool_versions: Mapping[str, str]) -> List[CheckerMessage]:
        version = tool_versions.get(self.target_platform)
        if not version:
            return []
        major = semantic_version.Version.coerce(version).major
        if major >= self.min_lts_major:
            return []
        return [
            self.message(
                f"An outdated version of Node.js was used ({version}). Consider updating. "
                f"Versions older than {self.min_lts_major} are no longer supported by the Node.js project."
            )
        ]


class NodePackageScriptsChecker(Checker):
    """Warns about global npm installs in package.json scripts."""

    name = "node-package-scripts"
    target_platform = PlatformNames.NODEJS.value

    def check_source_repo(self, repo) -> List[CheckerMessage]:
        if not repo.file_exists(Constants.PACKAGE_JSON_FILE):
            return []
        package_json = json.loads(repo.read_file(Constants.PACKAGE_JSON_FILE))
        scripts = package_json.get("scripts") or {}
        messages = []
        for script_name, command in scripts.items():
            if isinstance(command, str) and "npm install -g" in command:
                messages.append(
                    self.message(
                        f"The script '{script_name}' uses 'npm install -g'. Global installs may "
                        "not persist into the runtime image; declare the package as a dependency."
                    )
                )
        return messages
