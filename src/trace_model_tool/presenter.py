# -*- coding: utf-8 -*-
"""
聚合结果展示
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import pandas as pd

from .aggregator import AggregationResult, Aggregations, category_totals

logger = logging.getLogger(__name__)

COLUMNS = ['category', 'name', 'total', 'self', 'attributed', 'callframes']


def aggregations_to_rows(aggregations: Aggregations,
                         categorized: Optional[Dict[str, List[AggregationResult]]] = None) -> List[Dict[str, Any]]:
    """
    将聚合结果转换为表格行

    Args:
        aggregations: 聚合结果
        categorized: 分类后的结果；为 None 时 category 列留空

    Returns:
        List[Dict[str, Any]]: 表格行
    """
    def _row(category, result):
        return {
            'category': category,
            'name': result.name,
            'total': result.total,
            'self': result.self_time,
            'attributed': result.attributed,
            'callframes': len(result.callframes),
        }

    if categorized is None:
        return [_row('', result) for result in aggregations.values()]

    rows = []
    for category, results in categorized.items():
        for result in results:
            rows.append(_row(category, result))
    return rows


def rows_to_markdown(rows: List[Dict[str, Any]]) -> str:
    """以 markdown 表格格式输出"""
    if not rows:
        return ''
    columns = list(rows[0].keys())
    lines = [
        '| ' + ' | '.join(columns) + ' |',
        '| ' + ' | '.join('---' for _ in columns) + ' |',
    ]
    for row in rows:
        lines.append('| ' + ' | '.join(str(row[c]) for c in columns) + ' |')
    return '\n'.join(lines)


def write_reports(rows: List[Dict[str, Any]], output_dir: str, base_name: str,
                  output_formats: List[str]) -> List[Path]:
    """
    生成输出文件 (JSON、CSV 和 Excel)

    Args:
        rows: 数据行列表
        output_dir: 输出目录
        base_name: 基础文件名
        output_formats: 输出格式列表，支持 json、csv、xlsx

    Returns:
        List[Path]: 生成的文件路径列表
    """
    if not rows:
        logger.warning("没有数据可供展示")
        return []

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(rows, columns=[c for c in COLUMNS if c in rows[0]])
    files = []

    if 'json' in output_formats:
        json_file = output_path / f"{base_name}.json"
        try:
            with open(json_file, 'w', encoding='utf-8') as f:
                json.dump(rows, f, indent=2, ensure_ascii=False)
            files.append(json_file)
            print(f"生成 JSON 文件: {json_file}")
        except OSError as e:
            logger.error(f"生成 JSON 文件失败: {e}")

    if 'csv' in output_formats:
        csv_file = output_path / f"{base_name}.csv"
        try:
            df.to_csv(csv_file, index=False)
            files.append(csv_file)
            print(f"生成 CSV 文件: {csv_file}")
        except OSError as e:
            logger.error(f"生成 CSV 文件失败: {e}")

    if 'xlsx' in output_formats:
        excel_file = output_path / f"{base_name}.xlsx"
        try:
            df.to_excel(excel_file, index=False, engine='openpyxl')
            files.append(excel_file)
            print(f"生成 Excel 文件: {excel_file}")
        except (OSError, ValueError) as e:
            logger.error(f"生成 Excel 文件失败: {e}")

    return files


def plot_category_totals(categorized: Dict[str, List[AggregationResult]],
                         output_dir: str, base_name: str) -> Optional[Path]:
    """生成分类总时间柱状图"""
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    totals = category_totals(categorized)
    if not totals:
        logger.warning("没有分类数据，跳过图表生成")
        return None

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    chart_file = output_path / f"{base_name}_categories.png"

    fig, ax = plt.subplots(figsize=(max(6, len(totals) * 1.2), 4))
    ax.bar(list(totals.keys()), list(totals.values()), color='steelblue')
    ax.set_ylabel('time (us)')
    ax.set_title('Attributed time by category')
    fig.tight_layout()
    fig.savefig(chart_file)
    plt.close(fig)

    print(f"生成图表文件: {chart_file}")
    return chart_file
