from __future__ import annotations

from typing import List, Optional


class ConfigurationError(ValueError):
    """An edit to the configuration or a site was rejected."""


class DeploymentImportError(ValueError):
    """
    A deployment file could not be imported.

    `problems` lists every structural issue found, so the caller can show
    them all at once instead of one per attempt.
    """

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        super().__init__(message)
        self.problems: List[str] = list(problems or [])

    def __str__(self) -> str:
        base = super().__str__()
        if not self.problems:
            return base
        return base + ": " + "; ".join(self.problems)
