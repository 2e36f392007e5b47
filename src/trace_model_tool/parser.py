# -*- coding: utf-8 -*-
"""
Chrome Trace Event JSON 解析器
"""

import json
import gzip
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

from .exceptions import TraceFormatError
from .models import STRIPPED_ARGS, Phase, TraceEvent
from .trace import Trace

logger = logging.getLogger(__name__)

STRIPPED_MARKER = '__stripped__'


def parse_event(event_data: Dict[str, Any]) -> Optional[TraceEvent]:
    """
    解析单个事件

    Args:
        event_data: 事件数据字典

    Returns:
        TraceEvent: 解析后的事件对象；不在模型范围内的阶段（flow、counter 等）返回 None

    Raises:
        TraceFormatError: 缺少必需字段
    """
    ph = event_data.get('ph')
    if not ph:
        raise TraceFormatError(f"event is missing 'ph': {event_data}")
    ph = Phase.ALIASES.get(ph, ph)
    if ph not in Phase.ALL:
        logger.debug(f"skipping event with unsupported phase {ph!r}: {event_data.get('name')}")
        return None

    for key in ('pid', 'tid'):
        if key not in event_data and ph != Phase.METADATA:
            raise TraceFormatError(f"event is missing {key!r}: {event_data}")
    if 'ts' not in event_data and ph != Phase.METADATA:
        raise TraceFormatError(f"event is missing 'ts': {event_data}")

    args = event_data.get('args', {})
    if args == STRIPPED_MARKER:
        args = STRIPPED_ARGS
    elif args is None:
        args = {}

    event_id = event_data.get('id')
    if event_id is not None:
        event_id = str(event_id)

    return TraceEvent(
        name=event_data.get('name', ''),
        cat=event_data.get('cat', ''),
        ph=ph,
        pid=event_data.get('pid', 0),
        tid=event_data.get('tid', 0),
        ts=event_data.get('ts', 0),
        dur=event_data.get('dur'),
        tts=event_data.get('tts'),
        tdur=event_data.get('tdur'),
        args=args,
        id=event_id,
    )


def parse_events(raw_events: List[Dict[str, Any]]) -> List[TraceEvent]:
    """按到达顺序解析事件列表，跳过模型范围之外的事件"""
    events = []
    for raw_event in raw_events:
        event = parse_event(raw_event)
        if event is not None:
            events.append(event)
    return events


def read_trace_file(file_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    读取 trace 文件中的原始事件

    支持 {"traceEvents": [...]} 对象格式和裸数组格式，.gz 后缀按 gzip 读取。
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"文件不存在: {file_path}")

    open_func = gzip.open if file_path.suffix == '.gz' else open
    with open_func(file_path, 'rt', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get('traceEvents'), list):
        return data['traceEvents']
    raise TraceFormatError(f"{file_path} is not a Chrome trace (expected an array or traceEvents)")


def load_trace_events(file_path: Union[str, Path]) -> List[TraceEvent]:
    raw_events = read_trace_file(file_path)
    logger.info(f"读取到 {len(raw_events)} 个原始事件")
    return parse_events(raw_events)


def build_trace(events: List[TraceEvent]) -> Trace:
    """摄入全部事件并构建模型"""
    trace = Trace()
    trace.add_events(events)
    trace.build_model()
    return trace


def load_trace(file_path: Union[str, Path]) -> Trace:
    """
    解析 trace 文件并构建 Trace 模型

    Args:
        file_path: JSON 或 JSON.gz 文件路径

    Returns:
        Trace: 构建完成的模型
    """
    events = load_trace_events(file_path)
    trace = build_trace(events)
    logger.info(
        f"构建了 {len(trace.processes)} 个进程，{len(trace.events)} 个事件"
    )
    return trace
