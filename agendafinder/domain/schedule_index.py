"""
Recurring work windows per attendant and weekday.
"""

from collections import defaultdict
from typing import Dict, Iterable, List

from .models import WorkWindow


class WorkScheduleIndex:
    """
    Groups an attendant's configured windows so they can be looked up by weekday.

    A window is valid for a weekday when the weekday appears in its ``days``
    list or matches its legacy ``day`` field. Windows flagged as unavailable
    are ignored. Returned windows keep insertion order; callers sort.
    """

    def __init__(self, windows: Iterable[WorkWindow]):
        self._by_attendant: Dict[str, List[WorkWindow]] = defaultdict(list)
        for window in windows:
            if window.available:
                self._by_attendant[window.attendant_id].append(window)

    def has_windows(self, attendant_id: str) -> bool:
        return bool(self._by_attendant.get(attendant_id))

    def windows_for(self, attendant_id: str, weekday: int) -> List[WorkWindow]:
        return [
            window for window in self._by_attendant.get(attendant_id, [])
            if window.is_valid_for(weekday)
        ]
