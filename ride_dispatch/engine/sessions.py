"""
Driver Sessions
One dispatch engine per connected driver
"""

import logging
import random
from typing import Dict, Optional

from ..config import get_settings
from .dispatch_clock import DispatchClock
from .dispatch_engine import DispatchEngine
from .ride_factory import RideFactory

logger = logging.getLogger(__name__)


class DriverSessionRegistry:
    """Keeps the dispatch engine of each driver alive across connections."""

    def __init__(self):
        self._engines: Dict[str, DispatchEngine] = {}

    def get(self, driver_id: str) -> Optional[DispatchEngine]:
        return self._engines.get(driver_id)

    def get_or_create(self, driver_id: str) -> DispatchEngine:
        engine = self._engines.get(driver_id)
        if engine is None:
            engine = self._build_engine(driver_id)
            self._engines[driver_id] = engine
            logger.info(f"Created dispatch session for driver {driver_id}")
        return engine

    def remove(self, driver_id: str) -> bool:
        engine = self._engines.pop(driver_id, None)
        if engine is None:
            return False
        engine.shutdown()
        logger.info(f"Removed dispatch session for driver {driver_id}")
        return True

    def shutdown_all(self) -> None:
        for driver_id in list(self._engines):
            self.remove(driver_id)

    def __len__(self) -> int:
        return len(self._engines)

    def _build_engine(self, driver_id: str) -> DispatchEngine:
        settings = get_settings()
        if settings.random_seed is not None:
            rng = random.Random(f"{settings.random_seed}:{driver_id}")
        else:
            rng = random.Random()

        return DispatchEngine(
            factory=RideFactory(rng=rng),
            clock=DispatchClock(rng=rng),
            min_interval_ms=settings.min_interval_ms,
            max_interval_ms=settings.max_interval_ms,
            driver_id=driver_id,
        )


sessions = DriverSessionRegistry()
