"""
Memorial Backend - Engager Lookup Service
==========================================

What:  Returns the ranked engagers of a handle.
How:   Static table keyed by lowercase handle; unknown handles get the
       default list. A configurable delay stands in for upstream latency.
Who:   Called by POST /api/get-engagers.

The table is a stand-in for a real social graph API. Swapping it for a live
source means replacing get_engagers() while keeping its return type.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from memorial.config import settings
from memorial.exceptions import ValidationError
from memorial.schemas.engager import EngagerRecord

logger = logging.getLogger(__name__)

DEFAULT_HANDLE = "simulasyoncu"

MOCK_ENGAGERS: Dict[str, List[EngagerRecord]] = {
    "dwr": [
        EngagerRecord(fname="v", fid=2, engagement_score=980, casts=120, followers="15.2k"),
        EngagerRecord(fname="ccarella", fid=3, engagement_score=750, casts=80, followers="10.5k"),
        EngagerRecord(fname="pedro", fid=4, engagement_score=520, casts=200, followers="2.1k"),
    ],
    "nodepro": [
        EngagerRecord(fname="synth_dev", fid=501, engagement_score=1100, casts=300, followers="50k"),
        EngagerRecord(fname="web3_wizard", fid=502, engagement_score=950, casts=150, followers="22k"),
    ],
    DEFAULT_HANDLE: [
        EngagerRecord(fname="mehmet", fid=101, engagement_score=650, casts=50, followers="300"),
        EngagerRecord(fname="ayse", fid=102, engagement_score=500, casts=90, followers="450"),
    ],
}


def normalize_handle(fname: str) -> str:
    """
    Lowercase, trimmed lookup key for a handle.

    Raises:
        ValidationError: the handle is only whitespace. The schema already
            rejects empty strings, so this is the case it lets through.
    """
    key = fname.strip().lower()
    if not key:
        raise ValidationError("fname must not be blank", field="fname")
    return key


class EngagerService:
    def __init__(self, delay: Optional[float] = None):
        self.delay = delay

    async def get_engagers(self, fname: str) -> List[EngagerRecord]:
        """Look up engagers for `fname`, falling back to the default list."""
        key = normalize_handle(fname)
        engagers = MOCK_ENGAGERS.get(key)
        if engagers is None:
            logger.info("No engager data for @%s, using default list", key)
            engagers = MOCK_ENGAGERS[DEFAULT_HANDLE]

        delay = self.delay if self.delay is not None else settings.engager_lookup_delay
        if delay > 0:
            await asyncio.sleep(delay)

        return list(engagers)


engager_service = EngagerService()
