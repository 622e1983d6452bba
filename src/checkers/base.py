"""Checker contract and the advisory messages checkers produce."""

from dataclasses import dataclass
from typing import List, Mapping, Optional

WARNING = "warning"
INFO = "info"


@dataclass(frozen=True)
class CheckerMessage:
    """Free-text advisory attached to a build; never affects its outcome."""
    content: str
    source: str = ""
    level: str = WARNING

    def __str__(self) -> str:
        return f"[{self.level}] {self.source}: {self.content}" if self.source else self.content


class Checker:
    """Base class for checkers.

    ``target_platform`` restricts the checker to runs in which that platform
    was resolved; None means it always runs.
    """

    name: str = ""
    target_platform: Optional[str] = None

    def applies_to(self, tool_versions: Mapping[str, str]) -> bool:
        if self.target_platform is None:
            return True
        wanted = self.target_platform.lower()
        return any(name.lower() == wanted for name in tool_versions)

    def check_source_repo(self, repo) -> List[CheckerMessage]:
        """Inspect repository files."""
        return []

    def check_tool_versions(self, tool_versions: Mapping[str, str]) -> List[CheckerMessage]:
        """Inspect the resolved ``{platform: version}`` mapping."""
        return []

    def message(self, content: str, level: str = WARNING) -> CheckerMessage:
        return CheckerMessage(content=content, source=self.name or type(self).__name__, level=level)
