# -*- coding: utf-8 -*-
"""
CPU profile 层级构建
将原始采样 profile 按时间窗口展开为带 self/total 时间的调用树
"""

from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional
import logging

import numpy as np

from .models import ProfileNode, RawCpuProfile

logger = logging.getLogger(__name__)


class HierarchyNode:
    """调用树节点"""

    def __init__(self, data: ProfileNode, parent: Optional['HierarchyNode'] = None):
        self.data = data
        self.children: List['HierarchyNode'] = []
        self.parent = parent
        self.depth = parent.depth + 1 if parent else 0

    @property
    def name(self) -> str:
        return self.data.function_name

    def add_child(self, child: 'HierarchyNode'):
        """添加子节点"""
        child.parent = self
        child.depth = self.depth + 1
        self.children.append(child)

    def get_call_stack(self) -> List[str]:
        """获取从根到当前节点的调用栈路径"""
        path = []
        current = self
        while current is not None:
            path.append(current.name)
            current = current.parent
        return list(reversed(path))

    def each(self) -> Iterator['HierarchyNode']:
        """先序遍历（含自身）"""
        stack = [self]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            'id': self.data.id,
            'name': self.name,
            'self': self.data.self_time,
            'total': self.data.total_time,
            'sample_count': self.data.sample_count,
            'children': [child.to_dict() for child in self.children],
            'depth': self.depth,
        }

    def __repr__(self):
        return f"HierarchyNode({self.name!r}, self={self.data.self_time}, total={self.data.total_time})"


class CpuProfile:
    """按时间窗口构建的 CPU profile 调用树

    每个采样 i 覆盖 [t_i - delta_i, t_i]，其 delta_i 计入 samples[i] 对应节点的 self 时间。
    min/max 为负时表示该侧不限。
    """

    def __init__(self, profile: RawCpuProfile, min: float = -1, max: float = -1):
        self.profile = profile
        self.start_time = profile.start_time
        self.end_time = profile.end_time
        self.duration = profile.duration
        self.min = min
        self.max = max

        # 在副本上累加，原始 profile 可重复按不同窗口构建
        self.nodes: List[ProfileNode] = [
            replace(node, sample_count=0, min=0, max=0, total_time=0, self_time=0,
                    children=list(node.children) if node.children else None)
            for node in profile.nodes
        ]
        self.node_map: Dict[int, ProfileNode] = {node.id: node for node in self.nodes}

        self.timestamps = self._sample_timestamps(profile)
        self._attribute_samples()
        self.hierarchy = self._build_hierarchy()

    @staticmethod
    def _sample_timestamps(profile: RawCpuProfile) -> np.ndarray:
        if len(profile.samples) != len(profile.time_deltas):
            logger.warning(
                f"profile has {len(profile.samples)} samples but {len(profile.time_deltas)} time deltas"
            )
        deltas = np.asarray(profile.time_deltas, dtype=float)
        return profile.start_time + np.cumsum(deltas)

    def _in_window(self, start: float, end: float) -> bool:
        if self.min >= 0 and start < self.min:
            return False
        if self.max >= 0 and end > self.max:
            return False
        return True

    def _attribute_samples(self):
        for node_id, delta, ts in zip(self.profile.samples, self.profile.time_deltas, self.timestamps):
            ts = float(ts)
            if not self._in_window(ts - delta, ts):
                continue
            node = self.node_map.get(node_id)
            if node is None:
                logger.warning(f"sample references unknown node id {node_id}")
                continue
            if node.sample_count == 0:
                node.min = ts
            node.max = ts
            node.sample_count += 1
            node.self_time += delta

    def _find_root(self) -> ProfileNode:
        child_ids = set()
        for node in self.nodes:
            if node.children:
                child_ids.update(node.children)
        for node in self.nodes:
            if node.parent is None and node.id not in child_ids:
                return node
        raise ValueError('profile has no root node')

    def _build_hierarchy(self) -> HierarchyNode:
        root = HierarchyNode(self._find_root())
        stack = [root]
        while stack:
            current = stack.pop()
            for child_id in current.data.children or []:
                child = HierarchyNode(self.node_map[child_id])
                current.add_child(child)
                stack.append(child)

        # 后序累加 total
        for node in reversed(list(root.each())):
            node.data.total_time = node.data.self_time + sum(
                child.data.total_time for child in node.children
            )
        return root

    def get_tree_statistics(self) -> Dict[str, Any]:
        """获取调用树的统计信息"""
        depth = 0
        count = 0
        for node in self.hierarchy.each():
            count += 1
            depth = max(depth, node.depth)
        return {
            'total_nodes': count,
            'max_depth': depth,
            'total_time': self.hierarchy.data.total_time,
        }
