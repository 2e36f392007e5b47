# -*- coding: utf-8 -*-
"""
Trace 模型：事件摄入排序、B/E 配对、进程/线程注册、父子关联与 CPU profile 装配
"""

import logging
from bisect import bisect_left, bisect_right
from typing import Dict, Iterable, List, Optional

from .bounds import Bounds
from .cpu_profile import CpuProfile
from .exceptions import MissingCpuProfileError, TraceFormatError, UnmatchedEndEventError
from .models import (
    STRIPPED_ARGS,
    EventArgs,
    PartialProfileEntry,
    Phase,
    ProfileNode,
    RawCpuProfile,
    TraceEvent,
    args_present,
)
from .process import Process, Thread

logger = logging.getLogger(__name__)

DEVTOOLS_TIMELINE_CATEGORY = 'disabled-by-default-devtools.timeline'

BROWSER_PROCESS_NAME = 'Browser'
GPU_PROCESS_NAME = 'GPU Process'
RENDERER_PROCESS_NAME = 'Renderer'

RENDERER_MAIN_THREAD_NAME = 'CrRendererMain'
SCRIPT_STREAMER_THREAD_NAME = 'ScriptStreamerThread'


def link_profile_nodes(nodes: List[ProfileNode]):
    """根据 parent id 填充父节点的 children 列表（按 id 查找，不持有引用）"""
    node_map = {node.id: node for node in nodes}
    for node in nodes:
        if node.parent is None:
            continue
        parent = node_map.get(node.parent)
        if parent is None:
            raise TraceFormatError(f"profile node {node.id} references missing parent node {node.parent}")
        if parent.children is None:
            parent.children = [node.id]
        else:
            parent.children.append(node.id)


def merge_args(begin_args: EventArgs, end_args: EventArgs) -> EventArgs:
    """B 的 args 在前，E 的 args 覆盖/扩展；两者都被剥离时结果仍为剥离"""
    args = STRIPPED_ARGS
    if args_present(begin_args):
        args = dict(begin_args)
    if args_present(end_args):
        args = dict(args) if args_present(args) else {}
        args.update(end_args)
    return args


class Trace:
    """单个 trace 的完整模型

    生命周期：构造 → add_events 摄入全部事件 → build_model 一次 → 查询。
    """

    def __init__(self):
        self.processes: List[Process] = []
        self.main_process: Optional[Process] = None
        self.bounds = Bounds()
        self.events: List[TraceEvent] = []
        self.browser_process: Optional[Process] = None
        self.gpu_process: Optional[Process] = None
        self.renderer_processes: List[Process] = []
        self.number_of_processors: Optional[int] = None
        self.last_tracing_started_in_page_event: Optional[TraceEvent] = None

        self._cpu_profile: Optional[RawCpuProfile] = None
        self._processes_by_id: Dict[int, Process] = {}
        # 与 events 平行的时间戳列表，供二分查找
        self._timestamps: List[float] = []
        # 以 id(event) 为键，值为父事件
        self._parents: Dict[int, TraceEvent] = {}
        self._pending_begins: List[TraceEvent] = []
        self._profile_map: Dict[str, PartialProfileEntry] = {}

    # ------------------------------------------------------------------
    # 查询

    def process(self, pid: int) -> Process:
        """获取进程，不存在时创建并注册"""
        process = self._processes_by_id.get(pid)
        if process is None:
            process = Process(pid)
            self._processes_by_id[pid] = process
            self.processes.append(process)
        return process

    def thread(self, pid: int, tid: int) -> Thread:
        return self.process(pid).thread(tid)

    def find_process(self, pid: int) -> Optional[Process]:
        return self._processes_by_id.get(pid)

    def get_parent(self, event: TraceEvent) -> Optional[TraceEvent]:
        """事件的因果父事件，顶层事件或非 X 事件返回 None"""
        return self._parents.get(id(event))

    @property
    def has_cpu_profile(self) -> bool:
        return self._cpu_profile is not None

    @property
    def raw_cpu_profile(self) -> RawCpuProfile:
        if self._cpu_profile is None:
            raise MissingCpuProfileError('trace is missing CpuProfile')
        return self._cpu_profile

    def cpu_profile(self, min: float = -1, max: float = -1) -> CpuProfile:
        """主线程 CPU profile，限定在 [min, max] 时间窗口内（负值表示不限）"""
        return CpuProfile(self.raw_cpu_profile, min, max)

    # ------------------------------------------------------------------
    # 摄入

    def add_events(self, events: Iterable[TraceEvent]):
        for event in events:
            self.add_event(event)

    def add_event(self, event: TraceEvent):
        if event.ph == Phase.END:
            self._end_event(event)
            return

        # 时间戳相同的事件插在已有事件之后，保持到达顺序
        index = bisect_right(self._timestamps, event.ts)
        self.events.insert(index, event)
        self._timestamps.insert(index, event.ts)

        if event.ph == Phase.METADATA:
            self._add_metadata(event)
            return
        if event.ph == Phase.BEGIN:
            self._pending_begins.append(event)
        self.bounds.add_event(event)

    def _end_event(self, end: TraceEvent):
        stack = self._pending_begins
        for i in range(len(stack) - 1, -1, -1):
            begin = stack[i]
            if (begin.name == end.name and begin.cat == end.cat
                    and begin.tid == end.tid and begin.pid == end.pid):
                del stack[i]
                self._complete_event(begin, end)
                return
        raise UnmatchedEndEventError(end)

    def _complete_event(self, begin: TraceEvent, end: TraceEvent):
        tdur = None
        if begin.tts is not None and end.tts is not None:
            tdur = end.tts - begin.tts
        complete = TraceEvent(
            name=begin.name,
            cat=begin.cat,
            ph=Phase.COMPLETE,
            pid=begin.pid,
            tid=begin.tid,
            ts=begin.ts,
            dur=end.ts - begin.ts,
            tts=begin.tts,
            tdur=tdur,
            args=merge_args(begin.args, end.args),
            id=begin.id,
        )
        self.events[self._index_of(begin)] = complete
        self.bounds.add_event(complete)

    def _index_of(self, event: TraceEvent) -> int:
        """在相同时间戳的区段内按对象身份定位事件"""
        lo = bisect_left(self._timestamps, event.ts)
        hi = bisect_right(self._timestamps, event.ts)
        for i in range(lo, hi):
            if self.events[i] is event:
                return i
        raise ValueError(f"event not found in trace: {event.name} at {event.ts}")

    # ------------------------------------------------------------------
    # 元数据

    def _add_metadata(self, event: TraceEvent):
        if not args_present(event.args):
            return
        pid, tid, args = event.pid, event.tid, event.args
        name = event.name

        if name == 'num_cpus':
            self.number_of_processors = args.get('number')
        elif name == 'process_name':
            process_name = args.get('name')
            process = self.process(pid)
            process.name = process_name
            if process_name == GPU_PROCESS_NAME:
                self.gpu_process = process
            elif process_name == BROWSER_PROCESS_NAME:
                self.browser_process = process
            elif process_name == RENDERER_PROCESS_NAME:
                if process not in self.renderer_processes:
                    self.renderer_processes.append(process)
        elif name == 'process_labels':
            self.process(pid).labels = args.get('labels')
        elif name == 'process_sort_index':
            self.process(pid).sort_index = args.get('sort_index')
        elif name == 'trace_buffer_overflowed':
            self.process(pid).trace_buffer_overflowed_at = args.get('overflowed_at_ts')
        elif name == 'thread_name':
            thread_name = args.get('name')
            thread = self.thread(pid, tid)
            thread.name = thread_name
            if thread_name == RENDERER_MAIN_THREAD_NAME:
                self.process(pid).main_thread = thread
            elif thread_name == SCRIPT_STREAMER_THREAD_NAME:
                self.process(pid).script_streamer_thread = thread
        elif name == 'thread_sort_index':
            self.thread(pid, tid).sort_index = args.get('sort_index')
        elif name == 'IsTimeTicksHighResolution':
            self.process(pid).is_time_ticks_high_resolution = args.get('value')
        elif name == 'TraceConfig':
            self.process(pid).trace_config = args.get('value')
        else:
            logger.warning(f"unrecognized metadata: {event.to_dict()}")

    # ------------------------------------------------------------------
    # 构建模型

    def build_model(self):
        """在全部事件摄入后构建模型：父子关联、事件归属、profile 装配、主 profile 选择"""
        if self._pending_begins:
            logger.error(f"trace has {len(self._pending_begins)} incomplete B phase events")
            self._pending_begins.clear()

        ancestors: List[TraceEvent] = []
        for event in self.events:
            self._associate_parent(event, ancestors)
            self.process(event.pid).add_event(event)

            if event.ph == Phase.INSTANT and event.cat == DEVTOOLS_TIMELINE_CATEGORY:
                if event.name == 'CpuProfile':
                    cpu_profile = event.data.get('cpuProfile')
                    if cpu_profile is not None:
                        self._cpu_profile = RawCpuProfile.from_dict(cpu_profile)
                elif event.name == 'TracingStartedInPage':
                    self.last_tracing_started_in_page_event = event
            elif event.ph == Phase.SAMPLE:
                if event.name == 'Profile':
                    self._start_profile(event)
                elif event.name == 'ProfileChunk':
                    self._add_profile_chunk(event)

        self.main_process = self._determine_main_process()
        self._select_main_profile()

    def _associate_parent(self, event: TraceEvent, ancestors: List[TraceEvent]):
        if event.ph != Phase.COMPLETE:
            return
        ts = event.ts
        for i in range(len(ancestors) - 1, -1, -1):
            candidate = ancestors[i]
            # 没有 dur 的 X 事件视为已结束
            if candidate.dur is not None and ts < candidate.ts + candidate.dur:
                if candidate.pid == event.pid and candidate.tid == event.tid:
                    self._parents[id(event)] = candidate
                    break
            else:
                # 区间已结束，后续事件时间只会更晚
                del ancestors[i]
        ancestors.append(event)

    def _start_profile(self, event: TraceEvent):
        self._profile_map[event.id] = PartialProfileEntry(
            pid=event.pid,
            tid=event.tid,
            cpu_profile=RawCpuProfile(start_time=event.data.get('startTime', event.ts)),
        )

    def _add_profile_chunk(self, event: TraceEvent):
        entry = self._profile_map.get(event.id)
        if entry is None:
            logger.warning(f"ProfileChunk for unknown profile id {event.id!r} ignored")
            return
        data = event.data
        chunk = data.get('cpuProfile') or {}
        profile = entry.cpu_profile
        for node in chunk.get('nodes') or []:
            profile.nodes.append(ProfileNode.from_dict(node))
        profile.samples.extend(chunk.get('samples') or [])
        profile.time_deltas.extend(data.get('timeDeltas') or [])

    def _determine_main_process(self) -> Optional[Process]:
        if self.last_tracing_started_in_page_event is not None:
            return self.process(self.last_tracing_started_in_page_event.pid)
        renderers = [p for p in self.processes if p.name == RENDERER_PROCESS_NAME]
        if not renderers:
            logger.warning("trace has no TracingStartedInPage event and no Renderer process")
            return None
        main_process = renderers[0]
        for process in renderers[1:]:
            # 相同事件数时保留先出现的进程
            if len(process.events) > len(main_process.events):
                main_process = process
        return main_process

    def _select_main_profile(self):
        main_process = self.main_process
        if main_process is None or main_process.main_thread is None:
            return
        for entry in self._profile_map.values():
            if entry.pid == main_process.id and entry.tid == main_process.main_thread.id:
                profile = entry.cpu_profile
                profile.duration = sum(profile.time_deltas)
                profile.end_time = profile.start_time + profile.duration
                link_profile_nodes(profile.nodes)
                self._cpu_profile = profile
                break
