# -*- coding: utf-8 -*-
"""
Chrome Trace Event 数据模型定义
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Union


class Phase:
    """事件阶段（ph 字段的单字母代码）"""
    BEGIN = 'B'
    END = 'E'
    COMPLETE = 'X'
    INSTANT = 'I'
    METADATA = 'M'
    SAMPLE = 'P'

    # 旧版本 trace 中 instant 事件使用小写 'i'
    ALIASES = {'i': 'I'}
    ALL = {'B', 'E', 'X', 'I', 'M', 'P'}


class StrippedArgs:
    """args 在采集时被剥离（trace 中记为 "__stripped__"）"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'STRIPPED_ARGS'

    def __bool__(self):
        return False


STRIPPED_ARGS = StrippedArgs()

EventArgs = Union[Dict[str, Any], StrippedArgs]


def args_present(args: EventArgs) -> bool:
    """args 是否为真实的键值映射"""
    return isinstance(args, dict)


@dataclass(eq=False)
class TraceEvent:
    """trace 事件数据模型

    以对象身份区分事件（eq=False），两个字段相同的事件仍是不同事件。
    """
    name: str
    cat: str
    ph: str
    pid: int
    tid: int
    ts: float
    dur: Optional[float] = None
    tts: Optional[float] = None
    tdur: Optional[float] = None
    args: EventArgs = field(default_factory=dict)
    id: Optional[str] = None

    @property
    def end(self) -> Optional[float]:
        """结束时间戳，没有 dur 时为 None"""
        if self.dur is None:
            return None
        return self.ts + self.dur

    @property
    def data(self) -> Dict[str, Any]:
        """args['data']，args 被剥离时返回空字典"""
        if not args_present(self.args):
            return {}
        return self.args.get('data') or {}

    def to_dict(self) -> Dict[str, Any]:
        """转换回 Chrome Trace Event JSON 字段"""
        result = {
            'name': self.name,
            'cat': self.cat,
            'ph': self.ph,
            'pid': self.pid,
            'tid': self.tid,
            'ts': self.ts,
            'args': self.args if args_present(self.args) else '__stripped__',
        }
        for key in ('dur', 'tts', 'tdur', 'id'):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


@dataclass(frozen=True)
class CallFrame:
    """调用点标识"""
    function_name: str
    script_id: Union[int, str] = 0
    url: str = ''
    line_number: int = -1
    column_number: int = -1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CallFrame':
        return cls(
            function_name=data.get('functionName', ''),
            script_id=data.get('scriptId', 0),
            url=data.get('url', ''),
            line_number=data.get('lineNumber', -1),
            column_number=data.get('columnNumber', -1),
        )


@dataclass
class ProfileNode:
    """采样 profile 节点

    self_time/total_time/min/max/sample_count 由层级构建器填充，装配阶段只做零初始化。
    """
    id: int
    call_frame: CallFrame
    parent: Optional[int] = None
    children: Optional[List[int]] = None
    sample_count: int = 0
    min: float = 0
    max: float = 0
    total_time: float = 0
    self_time: float = 0

    @property
    def function_name(self) -> str:
        return self.call_frame.function_name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProfileNode':
        children = data.get('children')
        return cls(
            id=data['id'],
            call_frame=CallFrame.from_dict(data.get('callFrame', {})),
            parent=data.get('parent'),
            children=list(children) if children is not None else None,
        )


@dataclass
class RawCpuProfile:
    """原始 CPU profile（samples 与 time_deltas 等长）"""
    start_time: float
    end_time: float = 0
    duration: float = 0
    nodes: List[ProfileNode] = field(default_factory=list)
    samples: List[int] = field(default_factory=list)
    time_deltas: List[float] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawCpuProfile':
        """从 devtools 的 cpuProfile JSON 构建"""
        time_deltas = list(data.get('timeDeltas', []))
        start_time = data.get('startTime', 0)
        end_time = data.get('endTime')
        duration = data.get('duration')
        if duration is None:
            duration = sum(time_deltas)
        if end_time is None:
            end_time = start_time + duration
        return cls(
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            nodes=[ProfileNode.from_dict(node) for node in data.get('nodes', [])],
            samples=list(data.get('samples', [])),
            time_deltas=time_deltas,
        )


@dataclass
class PartialProfileEntry:
    """按 profile 关联 id 累积中的 profile 分片"""
    pid: int
    tid: int
    cpu_profile: RawCpuProfile
