"""
Real-time delivery of pipeline results.
"""

from devassist.realtime.publisher import QueuePublisher, ResultPublisher
from devassist.realtime.monitor import ScreenMonitor, VisionEvent, build_update_message

__all__ = [
    "QueuePublisher",
    "ResultPublisher",
    "ScreenMonitor",
    "VisionEvent",
    "build_update_message",
]
