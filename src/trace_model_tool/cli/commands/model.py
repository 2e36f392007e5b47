"""
模型命令模块
"""

from typing import Any, Dict, List

from ...exceptions import TraceModelError
from ...parser import load_trace
from ...presenter import rows_to_markdown
from ...trace import Trace


def registry_rows(trace: Trace) -> List[Dict[str, Any]]:
    """进程/线程注册表，每个线程一行"""
    rows = []
    for process in trace.processes:
        for thread in process.threads:
            rows.append({
                'pid': process.id,
                'process': process.name or '',
                'tid': thread.id,
                'thread': thread.name or '',
                'sort_index': thread.sort_index if thread.sort_index is not None else '',
                'events': len(thread.events),
                'main': process.main_thread is thread,
            })
    return rows


class ModelCommand:
    """模型命令处理器"""

    def run(self, args) -> int:
        print(f"=== Trace 模型 ===")
        print(f"文件: {args.file}")

        try:
            trace = load_trace(args.file)
        except (OSError, TraceModelError, ValueError) as e:
            print(f"错误: 无法加载 trace - {e}")
            return 1

        bounds = trace.bounds
        if bounds.is_empty:
            print("时间边界: 无")
        else:
            print(f"时间边界: {bounds.min} - {bounds.max} (时长 {bounds.duration} 微秒)")
        print(f"事件数: {len(trace.events)}")
        print(f"进程数: {len(trace.processes)}")
        if trace.number_of_processors is not None:
            print(f"CPU 数: {trace.number_of_processors}")
        if trace.main_process is not None:
            print(f"主进程: {trace.main_process.id} ({trace.main_process.name})")
        else:
            print("主进程: 无")
        print(f"CPU profile: {'有' if trace.has_cpu_profile else '无'}")
        print()

        rows = registry_rows(trace)
        if args.print_markdown:
            print(rows_to_markdown(rows))
        else:
            for row in rows:
                marker = ' *' if row['main'] else ''
                print(f"  [{row['pid']}] {row['process']} / [{row['tid']}] {row['thread']}: "
                      f"{row['events']} 个事件{marker}")
        return 0
