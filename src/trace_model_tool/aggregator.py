# -*- coding: utf-8 -*-
"""
调用树聚合与分类

对一组目标函数名计算归属时间：命中目标的节点吸收其整棵子树的 self 时间，
子树中再次出现的目标（无论同名与否）不再单独计数。
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .cpu_profile import HierarchyNode
from .exceptions import UnknownTargetError
from .models import CallFrame


@dataclass
class CallFrameRecord:
    """计入某个目标的一个节点"""
    self_time: float
    stack: List[str]
    call_frame: Optional[CallFrame] = None


@dataclass
class AggregationResult:
    """单个目标的聚合结果

    total: 命中节点及其子树归属的时间总和
    self_time: 命中节点自身的 self 时间总和
    attributed: 从命中节点的后代吸收的时间（total - self_time）
    """
    name: str
    total: float = 0
    self_time: float = 0
    attributed: float = 0
    callframes: List[CallFrameRecord] = field(default_factory=list)


Aggregations = Dict[str, AggregationResult]


def _to_aggregations(names: Iterable[str]) -> Aggregations:
    aggregations: Aggregations = {}
    for name in names:
        if name not in aggregations:
            aggregations[name] = AggregationResult(name=name)
    return aggregations


def _record(result: AggregationResult, node: HierarchyNode):
    self_time = node.data.self_time
    result.total += self_time
    result.callframes.append(CallFrameRecord(
        self_time=self_time,
        stack=node.get_call_stack(),
        call_frame=node.data.call_frame,
    ))


def aggregate(hierarchy: HierarchyNode, targets: Iterable[str]) -> Aggregations:
    """
    计算目标函数名的归属时间

    Args:
        hierarchy: 调用树根节点
        targets: 目标函数名，结果按请求顺序排列

    Returns:
        Aggregations: 目标名 -> AggregationResult
    """
    aggregations = _to_aggregations(targets)

    # 显式工作栈，每帧携带从祖先继承的当前目标
    work: List[Tuple[HierarchyNode, Optional[AggregationResult]]] = [(hierarchy, None)]
    while work:
        node, active = work.pop()
        if active is None and node.name in aggregations:
            active = aggregations[node.name]
            active.self_time += node.data.self_time
        if active is not None:
            _record(active, node)
        for child in reversed(node.children):
            work.append((child, active))

    for result in aggregations.values():
        result.attributed = result.total - result.self_time
    return aggregations


def to_categories(aggregations: Aggregations,
                  categories: Dict[str, List[str]]) -> Dict[str, List[AggregationResult]]:
    """
    按分类重组聚合结果，保持每个分类中目标的请求顺序

    Raises:
        UnknownTargetError: 分类引用了聚合结果中不存在的目标名
    """
    categorized: Dict[str, List[AggregationResult]] = {}
    for category, names in categories.items():
        results = []
        for name in names:
            if name not in aggregations:
                raise UnknownTargetError(name, category)
            results.append(aggregations[name])
        categorized[category] = results
    return categorized


def category_totals(categorized: Dict[str, List[AggregationResult]]) -> Dict[str, float]:
    """每个分类的 total 之和"""
    return {
        category: sum(result.total for result in results)
        for category, results in categorized.items()
    }
