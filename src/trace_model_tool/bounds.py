# -*- coding: utf-8 -*-
"""
trace 时间边界
"""

import math

from .models import TraceEvent


class Bounds:
    """所有已摄入事件的最小/最大时间戳，只会扩大不会收缩"""

    def __init__(self):
        self.min = math.inf
        self.max = -math.inf

    @property
    def is_empty(self) -> bool:
        return self.min > self.max

    @property
    def duration(self) -> float:
        if self.is_empty:
            return 0
        return self.max - self.min

    def add(self, ts: float):
        if ts < self.min:
            self.min = ts
        if ts > self.max:
            self.max = ts

    def add_event(self, event: TraceEvent):
        self.add(event.ts)
        end = event.end
        if end is not None:
            self.add(end)

    def contains(self, ts: float) -> bool:
        return self.min <= ts <= self.max

    def __repr__(self):
        return f"Bounds(min={self.min}, max={self.max})"
