"""
Detection deduplication and rate-limiting pipeline.

Layers, in the order a session meets them:
- classifier: drop frame noise (no session id)
- cooldown: suppress sessions from devices that emitted too recently
- class_filter: drop denylisted classes
- dedup: one metric per class per session
"""

from .class_filter import should_skip_class
from .classifier import classify_event
from .cooldown import CooldownGate, CooldownState
from .dedup import SessionDeduplicator
from .detection_pipeline import DetectionPipeline, PipelineStats

__all__ = [
    "CooldownGate",
    "CooldownState",
    "DetectionPipeline",
    "PipelineStats",
    "SessionDeduplicator",
    "classify_event",
    "should_skip_class",
]
