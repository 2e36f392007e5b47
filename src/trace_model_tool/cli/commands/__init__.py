"""
CLI命令模块
"""

from .analysis import AnalysisCommand
from .model import ModelCommand

__all__ = ['AnalysisCommand', 'ModelCommand']
