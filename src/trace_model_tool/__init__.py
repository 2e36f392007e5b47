"""
Trace Model Tool Package
"""

from .models import TraceEvent, Phase, STRIPPED_ARGS, CallFrame, ProfileNode, RawCpuProfile
from .trace import Trace
from .cpu_profile import CpuProfile, HierarchyNode
from .aggregator import aggregate, to_categories, AggregationResult, Aggregations
from .parser import load_trace, parse_event

__all__ = [
    'TraceEvent',
    'Phase',
    'STRIPPED_ARGS',
    'CallFrame',
    'ProfileNode',
    'RawCpuProfile',
    'Trace',
    'CpuProfile',
    'HierarchyNode',
    'aggregate',
    'to_categories',
    'AggregationResult',
    'Aggregations',
    'load_trace',
    'parse_event',
]
