"""
Context Updater - records what the developer is doing before analysis.
"""

import logging
from typing import Optional

from devassist.database import DeveloperContext
from devassist.storage.code_store import CodeStore

logger = logging.getLogger(__name__)


class ContextUpdater:
    """
    Appends a developer context row for every processed event.

    Storage failures propagate to the caller.
    """

    def __init__(self, store: CodeStore):
        self.store = store

    async def update(
        self,
        current_app: Optional[str],
        active_file: Optional[str] = None,
        project_root: Optional[str] = None,
    ) -> DeveloperContext:
        context = self.store.update_developer_context(
            current_app=current_app,
            active_file=active_file,
            project_root=project_root,
        )
        logger.debug(f"Developer context: app={context.current_app} file={context.active_file}")
        return context
