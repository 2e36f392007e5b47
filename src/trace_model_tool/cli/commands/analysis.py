"""
分析命令模块
"""

from pathlib import Path

from ..validators import (
    load_categories,
    merge_category_targets,
    parse_output_formats,
    parse_window,
    validate_targets,
)
from ...aggregator import aggregate, to_categories
from ...exceptions import TraceModelError
from ...parser import load_trace
from ...presenter import aggregations_to_rows, plot_category_totals, rows_to_markdown, write_reports


class AnalysisCommand:
    """分析命令处理器"""

    def run(self, args) -> int:
        print(f"=== CPU profile 聚合分析 ===")
        print(f"文件: {args.file}")
        print(f"目标: {args.targets if args.targets else '取自分类文件'}")
        print(f"分类文件: {args.categories if args.categories else '无'}")
        print(f"时间窗口: {args.window if args.window else '不限'}")
        print(f"输出格式: {args.output_format}")
        print(f"输出目录: {args.output_dir}")
        print()

        try:
            targets = validate_targets(args.targets) if args.targets else None
            categories = load_categories(args.categories) if args.categories else None
            if categories is not None:
                targets = merge_category_targets(targets, categories)
            elif targets is None:
                raise ValueError("请指定 --targets 或 --categories")
            window_min, window_max = parse_window(args.window)
            output_formats = parse_output_formats(args.output_format)
        except ValueError as e:
            print(f"错误: 参数验证失败 - {e}")
            return 1

        if args.chart and categories is None:
            print("错误: --chart 需要 --categories")
            return 1

        try:
            trace = load_trace(args.file)
            profile = trace.cpu_profile(window_min, window_max)
            aggregations = aggregate(profile.hierarchy, targets)
            categorized = to_categories(aggregations, categories) if categories is not None else None
        except (OSError, TraceModelError, ValueError) as e:
            print(f"错误: 分析失败 - {e}")
            return 1

        rows = aggregations_to_rows(aggregations, categorized)
        if args.print_markdown:
            print(rows_to_markdown(rows))
            print()

        base_name = f"{Path(args.file).name.split('.')[0]}_aggregation"
        generated_files = write_reports(rows, args.output_dir, base_name, output_formats)
        if args.chart:
            chart_file = plot_category_totals(categorized, args.output_dir, base_name)
            if chart_file is not None:
                generated_files.append(chart_file)

        print(f"\n分析完成，生成 {len(generated_files)} 个文件")
        return 0
