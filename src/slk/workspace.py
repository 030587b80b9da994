from __future__ import annotations

import logging
import os
from pathlib import Path

from slk.errors import WorkspaceNotFound
from slk.types import InstallKind, Workspace

logger = logging.getLogger(__name__)


def default_candidates(home: Path | None = None) -> list[tuple[Path, InstallKind]]:
    home = home or Path(os.path.expanduser("~"))
    return [
        (home / "Library" / "Application Support" / "Slack", InstallKind.DIRECT),
        (
            home
            / "Library"
            / "Containers"
            / "com.tinyspeck.slackmacgap"
            / "Data"
            / "Library"
            / "Application Support"
            / "Slack",
            InstallKind.APP_STORE,
        ),
    ]


class WorkspaceLocator:
    def __init__(self, candidates: list[tuple[Path, InstallKind]] | None = None) -> None:
        self._candidates = candidates if candidates is not None else default_candidates()
        self._workspace: Workspace | None = None

    def locate(self) -> Workspace:
        if self._workspace is not None:
            return self._workspace

        for path, kind in self._candidates:
            if path.is_dir():
                logger.debug("Using Slack data directory %s (%s install)", path, kind.value)
                self._workspace = Workspace(root=path, kind=kind)
                return self._workspace

        raise WorkspaceNotFound([str(path) for path, _ in self._candidates])
