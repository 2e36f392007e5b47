# -*- coding: utf-8 -*-
"""
异常定义
"""


class TraceModelError(Exception):
    """trace 模型错误基类"""


class TraceFormatError(TraceModelError, ValueError):
    """输入事件格式错误"""


class UnmatchedEndEventError(TraceFormatError):
    """E 阶段事件找不到匹配的 B 阶段事件"""

    def __init__(self, event):
        self.event = event
        super().__init__(
            f"could not find matching B phase for E phase event: "
            f"{event.name} (cat={event.cat}, pid={event.pid}, tid={event.tid}, ts={event.ts})"
        )


class MissingCpuProfileError(TraceModelError):
    """trace 中没有可用的 CPU profile"""


class UnknownTargetError(TraceModelError, KeyError):
    """分类中引用了聚合结果里不存在的目标名"""

    def __init__(self, name, category):
        self.name = name
        self.category = category
        super().__init__(f"category {category!r} references unknown target {name!r}")

    def __str__(self):
        return self.args[0]
