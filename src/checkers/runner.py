"""Runs checkers and collects their advisories into a caller-owned sink."""

import logging
from typing import Iterable, List, Mapping

from common.logging_utils import extra_context, is_debug_enabled
from .base import Checker, CheckerMessage

logger = logging.getLogger(__name__)


def _safe_call(checker: Checker, method: str, arg) -> List[CheckerMessage]:
    """Invoke one checker method; any failure is logged and yields no messages."""
    try:
        return list(getattr(checker, method)(arg) or [])
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.warning(
            "Checker %s failed in %s: %s", type(checker).__name__, method, e, exc_info=True
        )
        return []


def run_checkers(
    checkers: Iterable[Checker],
    repo,
    tool_versions: Mapping[str, str],
    sink: List[CheckerMessage],
) -> List[CheckerMessage]:
    """Run every applicable checker against the repository and tool versions.

    Args:
        checkers: Checkers in registration order.
        repo: Source repository handle.
        tool_versions: Resolved ``{platform: version}`` mapping.
        sink: List the messages are appended to.

    Returns:
        list[CheckerMessage]: The sink.
    """
    for checker in checkers:
        if not checker.applies_to(tool_versions):
            continue
        found = _safe_call(checker, "check_source_repo", repo)
        found += _safe_call(checker, "check_tool_versions", tool_versions)
        sink.extend(found)
        if is_debug_enabled(logger):
            logger.debug(
                "Checker finished",
                extra=extra_context(
                    event="check",
                    component="checkers",
                    action="run",
                    checker=type(checker).__name__,
                    messages=len(found),
                ),
            )
    return sink
