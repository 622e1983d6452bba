"""Non-fatal diagnostics attached to a build."""

from .base import Checker, CheckerMessage
from .node import NodePackageScriptsChecker, NodeVersionChecker
from .runner import run_checkers


def default_checkers(min_node_lts_major=None):
    """Built-in checkers in registration order."""
    if min_node_lts_major is None:
        return [NodeVersionChecker(), NodePackageScriptsChecker()]
    return [NodeVersionChecker(min_node_lts_major), NodePackageScriptsChecker()]


__all__ = [
    "Checker",
    "CheckerMessage",
    "NodePackageScriptsChecker",
    "NodeVersionChecker",
    "default_checkers",
    "run_checkers",
]
