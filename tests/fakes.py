"""Test doubles for platforms, checkers and source repositories."""

import fnmatch
from typing import Dict, Optional

from checkers.base import Checker
from platforms.base import DetectionResult, Platform


class MemorySourceRepo:
    """In-memory stand-in for LocalSourceRepo."""

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files: Dict[str, str] = dict(files or {})
        self.root_path = "/memory"

    def add_file(self, content: str, *paths: str) -> "MemorySourceRepo":
        self.files["/".join(paths)] = content
        return self

    def file_exists(self, *paths: str) -> bool:
        return "/".join(paths) in self.files

    def dir_exists(self, *paths: str) -> bool:
        prefix = "/".join(paths) + "/"
        return any(name.startswith(prefix) for name in self.files)

    def read_file(self, *paths: str) -> str:
        return self.files["/".join(paths)]

    def enumerate_files(self, pattern: str, recursive: bool = False):
        names = self.files if recursive else [n for n in self.files if "/" not in n]
        return sorted(n for n in names if fnmatch.fnmatch(n.rsplit("/", 1)[-1], pattern))


class FakePlatform(Platform):
    """Configurable platform whose snippets are easy to find in a script."""

    def __init__(
        self,
        name: str,
        supported_versions=("1.0.0",),
        default_version: Optional[str] = "1.0.0",
        detected_version: Optional[str] = None,
        detects: bool = True,
        enabled: bool = True,
        multi_platform: bool = True,
        installed=(),
        detect_error: Optional[Exception] = None,
        build_only: bool = False,
    ):
        self.name = name
        super().__init__(
            supported_versions=supported_versions,
            default_version=default_version,
            enabled=enabled,
            multi_platform=multi_platform,
        )
        self.detected_version = detected_version
        self.detects = detects
        self.installed = set(installed)
        self.detect_error = detect_error
        self.build_only = build_only
        self.detect_calls = 0

    def detect(self, context):
        self.detect_calls += 1
        if self.detect_error is not None:
            raise self.detect_error
        if not self.detects:
            return None
        return DetectionResult(language=self.name, language_version=self.detected_version)

    def is_version_already_installed(self, version):
        return version in self.installed

    def generate_install_snippet(self, version):
        return f"INSTALL {self.name} {version}\n"

    def sentinel_snippet(self, version):
        return f"SENTINEL {self.name} {version}\n"

    def generate_build_snippet(self, context, version):
        return f"BUILD {self.name} {version}\n"


class FakeChecker(Checker):
    """Checker returning canned messages, or raising."""

    def __init__(self, repo_messages=(), tool_messages=(), error=None, target_platform=None):
        self.repo_messages = list(repo_messages)
        self.tool_messages = list(tool_messages)
        self.error = error
        self.target_platform = target_platform
        self.calls = []

    def check_source_repo(self, repo):
        self.calls.append("repo")
        if self.error is not None:
            raise self.error
        return [self.message(m) for m in self.repo_messages]

    def check_tool_versions(self, tool_versions):
        self.calls.append("tools")
        if self.error is not None:
            raise self.error
        return [self.message(m) for m in self.tool_messages]


