# -*- coding: utf-8 -*-
"""
进程与线程注册表
"""

from typing import Any, Dict, List, Optional

from .models import TraceEvent


class Thread:
    """线程，进程内按 id 唯一"""

    def __init__(self, tid: int):
        self.id = tid
        self.name: Optional[str] = None
        self.sort_index: Optional[int] = None
        self.events: List[TraceEvent] = []

    def add_event(self, event: TraceEvent):
        self.events.append(event)

    def __repr__(self):
        return f"Thread(id={self.id}, name={self.name!r})"


class Process:
    """进程，首次按 id 引用时创建"""

    def __init__(self, pid: int):
        self.id = pid
        self.name: Optional[str] = None
        self.labels: Optional[Any] = None
        self.sort_index: Optional[int] = None
        self.main_thread: Optional[Thread] = None
        self.script_streamer_thread: Optional[Thread] = None
        self.trace_buffer_overflowed_at: Optional[float] = None
        self.is_time_ticks_high_resolution: Optional[bool] = None
        self.trace_config: Optional[Any] = None
        self.threads: List[Thread] = []
        self.events: List[TraceEvent] = []
        self._threads_by_id: Dict[int, Thread] = {}

    def thread(self, tid: int) -> Thread:
        """获取线程，不存在时创建并注册"""
        thread = self._threads_by_id.get(tid)
        if thread is None:
            thread = Thread(tid)
            self._threads_by_id[tid] = thread
            self.threads.append(thread)
        return thread

    def find_thread(self, tid: int) -> Optional[Thread]:
        return self._threads_by_id.get(tid)

    def add_event(self, event: TraceEvent):
        """将事件放入进程及其所属线程"""
        self.events.append(event)
        self.thread(event.tid).add_event(event)

    def __repr__(self):
        return f"Process(id={self.id}, name={self.name!r}, threads={len(self.threads)})"
