# -*- coding: utf-8 -*-
"""
CLI验证器模块
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple


def validate_targets(targets_spec: str) -> List[str]:
    """
    验证目标函数名列表

    Args:
        targets_spec: 逗号分隔的函数名

    Returns:
        List[str]: 目标函数名列表

    Raises:
        ValueError: 如果列表为空或有重复
    """
    if not targets_spec or not targets_spec.strip():
        raise ValueError("目标函数名不能为空")

    targets = [name.strip() for name in targets_spec.split(',')]
    for name in targets:
        if not name:
            raise ValueError("目标函数名不能为空字符串")

    if len(targets) != len(set(targets)):
        raise ValueError("目标函数名不能重复")

    return targets


def parse_window(window_spec: Optional[str]) -> Tuple[float, float]:
    """
    解析时间窗口 "MIN,MAX"（微秒），负值表示不限

    Returns:
        Tuple[float, float]: (min, max)，未指定时为 (-1, -1)
    """
    if not window_spec:
        return -1, -1

    parts = [part.strip() for part in window_spec.split(',')]
    if len(parts) != 2:
        raise ValueError(f"时间窗口格式应为 MIN,MAX: {window_spec}")
    try:
        low, high = float(parts[0]), float(parts[1])
    except ValueError:
        raise ValueError(f"时间窗口必须是数字: {window_spec}")

    if low >= 0 and high >= 0 and low > high:
        raise ValueError(f"时间窗口 MIN 不能大于 MAX: {window_spec}")
    return low, high


def load_categories(categories_file: str) -> Dict[str, List[str]]:
    """
    读取分类文件：JSON 对象，分类名 -> 函数名列表

    Raises:
        ValueError: 文件不存在或格式不合法
    """
    path = Path(categories_file)
    if not path.exists():
        raise ValueError(f"分类文件不存在: {categories_file}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"分类文件不是合法的 JSON: {e}")

    if not isinstance(data, dict):
        raise ValueError("分类文件必须是 JSON 对象")

    categories = {}
    for category, names in data.items():
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ValueError(f"分类 {category} 必须是字符串列表")
        categories[category] = names
    return categories


def merge_category_targets(targets: Optional[List[str]], categories: Dict[str, List[str]]) -> List[str]:
    """
    合并目标列表与分类中引用的函数名

    显式给出目标时，分类中的函数名必须全部在目标中。
    """
    if targets is None:
        merged = []
        for names in categories.values():
            for name in names:
                if name not in merged:
                    merged.append(name)
        if not merged:
            raise ValueError("分类文件中没有任何函数名")
        return merged

    missing = [
        name for names in categories.values() for name in names if name not in targets
    ]
    if missing:
        raise ValueError(f"分类引用了不在目标列表中的函数名: {', '.join(missing)}")
    return targets


def parse_output_formats(output_format: str) -> List[str]:
    """解析输出格式"""
    valid_formats = {'json', 'csv', 'xlsx'}
    formats = [f.strip() for f in output_format.split(',') if f.strip()]
    if not formats:
        raise ValueError("输出格式不能为空")
    for f in formats:
        if f not in valid_formats:
            raise ValueError(f"不支持的输出格式: {f}。支持的格式: {', '.join(sorted(valid_formats))}")
    return formats
