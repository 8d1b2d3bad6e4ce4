"""
Detection Event Classifier

Detectors report every frame, but only mark the frames they decided to keep
with a detection id. Anything without one is frame noise and is dropped here,
before cooldown or filtering see it.
"""

import logging
from typing import Any

from ..models import extract_session_id

logger = logging.getLogger(__name__)


def classify_event(payload: Any) -> bool:
    """
    Decide whether a raw payload is a retained detection session.

    Args:
        payload: Raw event data from the host

    Returns:
        True if the payload carries a non-empty session identifier
    """
    if extract_session_id(payload) is None:
        logger.debug("Dropping detection frame without session id")
        return False
    return True
