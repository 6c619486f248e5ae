"""
Screen Monitor - feeds OCR events through the pipeline and publishes results.

The vision source is any async iterator of VisionEvent. It is consumed one
event at a time; it is not restartable.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from devassist.pipeline.models import PipelineContext, PipelineResult
from devassist.pipeline.orchestrator import SuggestionPipeline
from devassist.realtime.publisher import ResultPublisher
from devassist.storage.code_store import StoreNotInitializedError

logger = logging.getLogger(__name__)

# Characters of captured text included in each update
TEXT_PREVIEW_LENGTH = 100


@dataclass
class VisionEvent:
    """One captured screen-text sample."""

    app_name: Optional[str] = None
    text: Optional[str] = None


def build_update_message(app_name: str, text: str, result: PipelineResult) -> Dict[str, Any]:
    data = result.to_dict()
    return {
        "type": "ocr_update",
        "data": {
            "appName": app_name,
            "text": text[:TEXT_PREVIEW_LENGTH],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "suggestions": data["suggestions"],
            "errors": data["errors"],
        },
    }


class ScreenMonitor:
    """
    Consumes a vision stream and publishes one update per event.

    Example:
        monitor = ScreenMonitor(pipeline, publisher)
        await monitor.run(source.stream())
    """

    def __init__(self, pipeline: SuggestionPipeline, publisher: ResultPublisher):
        self.pipeline = pipeline
        self.publisher = publisher
        self.processed = 0
        self.failed = 0

    async def handle_event(self, event: VisionEvent) -> Dict[str, Any]:
        """Process a single event and publish its update message."""
        app_name = (event.app_name or "").lower()
        text = (event.text or "").lower()

        result = await self.pipeline.process(text, PipelineContext(source_app=app_name))
        message = build_update_message(app_name, text, result)
        await self.publisher.publish(message)
        return message

    async def run(self, events: AsyncIterator[VisionEvent]) -> None:
        """
        Process events until the stream ends.

        A failure on one event is logged and counted; the loop moves on to
        the next event.
        """
        async for event in events:
            try:
                await self.handle_event(event)
                self.processed += 1
            except (SQLAlchemyError, StoreNotInitializedError) as e:
                self.failed += 1
                logger.error(f"Failed to process screen event from {event.app_name}: {e}")
            except Exception as e:
                self.failed += 1
                logger.error(
                    f"Unexpected error processing screen event from {event.app_name}: {str(e)}",
                    exc_info=True,
                )

        logger.info(f"Vision stream ended ({self.processed} processed, {self.failed} failed)")
