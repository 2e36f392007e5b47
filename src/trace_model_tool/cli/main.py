"""
CLI主模块
"""

import argparse
import logging
import sys
from .commands import AnalysisCommand, ModelCommand


def parse_arguments(argv=None):
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description="Trace Model Tool - 从 Chrome trace 重建执行模型并计算归属时间",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例用法:
  # 查看进程/线程结构
  trace-model-tool model trace.json

  # 按目标函数聚合主线程 CPU profile
  trace-model-tool analysis trace.json --targets "parseHTML,evaluateScript" --output-format json,xlsx

  # 按分类聚合并生成图表
  trace-model-tool analysis trace.json.gz --categories categories.json --chart

  # 限定时间窗口（微秒）
  trace-model-tool analysis trace.json --targets render --window 1000,250000
        """
    )
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='日志级别 (默认: WARNING)')

    subparsers = parser.add_subparsers(dest='command', help='可用命令')

    # model 命令 - 打印 trace 模型结构
    model_parser = subparsers.add_parser('model', help='打印进程/线程结构与时间边界')
    model_parser.add_argument('file', help='trace 文件路径 (.json 或 .json.gz)')
    model_parser.add_argument('--print-markdown', action='store_true',
                              help='以markdown格式打印进程/线程表格 (默认: False)')

    # analysis 命令 - 聚合 CPU profile
    analysis_parser = subparsers.add_parser('analysis', help='聚合主线程 CPU profile 的归属时间')
    analysis_parser.add_argument('file', help='trace 文件路径 (.json 或 .json.gz)')
    analysis_parser.add_argument('--targets', default=None,
                                 help='逗号分隔的目标函数名，如 "a,b,c"；省略时取分类文件中的全部函数名')
    analysis_parser.add_argument('--categories', default=None,
                                 help='分类 JSON 文件，格式 {"分类": ["函数名", ...]}')
    analysis_parser.add_argument('--window', default=None,
                                 help='时间窗口 MIN,MAX（微秒），负值表示不限')
    analysis_parser.add_argument('--print-markdown', action='store_true',
                                 help='是否在stdout中以markdown格式打印表格 (默认: False)')
    analysis_parser.add_argument('--chart', action='store_true',
                                 help='生成分类总时间柱状图（需要 --categories）')
    analysis_parser.add_argument('--output-format', default='json,xlsx',
                                 help='输出格式，逗号分隔: json, csv, xlsx (默认: json,xlsx)')
    analysis_parser.add_argument('--output-dir', default='.', help='输出目录 (默认: 当前目录)')

    return parser.parse_args(argv)


def main(argv=None):
    """主函数"""
    args = parse_arguments(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(levelname)s %(name)s: %(message)s')

    if not args.command:
        print("错误: 请指定命令 (model, analysis)")
        print("使用 --help 查看帮助信息")
        return 1

    if args.command == 'model':
        command = ModelCommand()
        return command.run(args)
    elif args.command == 'analysis':
        command = AnalysisCommand()
        return command.run(args)
    else:
        print(f"错误: 未知命令: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
