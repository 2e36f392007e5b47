"""
测试数据生成器
"""

from trace_model_tool.models import CallFrame, ProfileNode, RawCpuProfile, TraceEvent


def make_event(name, ph, ts, pid=1, tid=1, cat='test', **kwargs):
    """构造 TraceEvent，args 默认为空字典"""
    kwargs.setdefault('args', {})
    return TraceEvent(name=name, cat=cat, ph=ph, pid=pid, tid=tid, ts=ts, **kwargs)


def metadata(metadata_name, pid, tid=0, **args):
    return make_event(metadata_name, 'M', 0, pid=pid, tid=tid, cat='__metadata', args=args)


class ProfileGenerator:
    """按调用关系逐个追加节点，每个节点对应一个采样"""

    def __init__(self):
        self._next_id = 0
        self.root = self._node('(root)')
        self.nodes = [self.root]
        self.samples = []
        self.time_deltas = []

    def _node(self, function_name, parent=None):
        node = ProfileNode(
            id=self._next_id,
            call_frame=CallFrame(function_name=function_name, script_id=10, url='script'),
            parent=parent.id if parent is not None else None,
        )
        self._next_id += 1
        return node

    def start(self):
        return self.root

    def append(self, parent, function_name, delta):
        child = self._node(function_name, parent)
        if parent.children is None:
            parent.children = []
        parent.children.append(child.id)
        self.nodes.append(child)
        self.samples.append(child.id)
        self.time_deltas.append(delta)
        return child

    def end(self, start_time=0):
        duration = sum(self.time_deltas)
        return RawCpuProfile(
            start_time=start_time,
            end_time=start_time + duration,
            duration=duration,
            nodes=self.nodes,
            samples=self.samples,
            time_deltas=self.time_deltas,
        )


def standard_profile(extra_c=False):
    """root → a(100) → {b(50), c(75)}; root → d(100); root → e(25) → f(15)"""
    generator = ProfileGenerator()
    root = generator.start()

    a = generator.append(root, 'a', 100)
    generator.append(a, 'b', 50)
    generator.append(a, 'c', 75)

    generator.append(root, 'd', 100)
    e = generator.append(root, 'e', 25)
    generator.append(e, 'f', 15)

    if extra_c:
        generator.append(root, 'c', 10)

    return generator.end()
