"""
CLI 单元测试
"""

import json
import tempfile
import unittest
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path

from trace_model_tool.cli.main import main
from trace_model_tool.cli.validators import (
    load_categories,
    merge_category_targets,
    parse_output_formats,
    parse_window,
    validate_targets,
)

TIMELINE = 'disabled-by-default-devtools.timeline'
PROFILER = 'disabled-by-default-v8.cpu_profiler'


def _frame(name):
    return {'functionName': name, 'scriptId': 1, 'url': 'app.js', 'lineNumber': 0, 'columnNumber': 0}


TRACE_EVENTS = [
    {'name': 'process_name', 'ph': 'M', 'pid': 1, 'tid': 0, 'args': {'name': 'Renderer'}},
    {'name': 'thread_name', 'ph': 'M', 'pid': 1, 'tid': 2, 'args': {'name': 'CrRendererMain'}},
    {'name': 'TracingStartedInPage', 'cat': TIMELINE, 'ph': 'I', 'pid': 1, 'tid': 2, 'ts': 10, 'args': {}},
    {'name': 'Profile', 'cat': PROFILER, 'ph': 'P', 'pid': 1, 'tid': 2, 'ts': 20, 'id': '0x1',
     'args': {'data': {'startTime': 0}}},
    {'name': 'ProfileChunk', 'cat': PROFILER, 'ph': 'P', 'pid': 1, 'tid': 2, 'ts': 30, 'id': '0x1',
     'args': {'data': {
         'cpuProfile': {
             'nodes': [
                 {'id': 1, 'callFrame': _frame('(root)')},
                 {'id': 2, 'callFrame': _frame('a'), 'parent': 1},
                 {'id': 3, 'callFrame': _frame('c'), 'parent': 2},
                 {'id': 4, 'callFrame': _frame('c'), 'parent': 1},
             ],
             'samples': [2, 3, 4],
         },
         'timeDeltas': [100, 75, 10],
     }}},
]


class TestValidators(unittest.TestCase):
    def test_validate_targets(self):
        self.assertEqual(validate_targets('a, b,c'), ['a', 'b', 'c'])
        with self.assertRaises(ValueError):
            validate_targets('')
        with self.assertRaises(ValueError):
            validate_targets('a,,b')
        with self.assertRaises(ValueError):
            validate_targets('a,a')

    def test_parse_window(self):
        self.assertEqual(parse_window(None), (-1, -1))
        self.assertEqual(parse_window('10,20'), (10.0, 20.0))
        self.assertEqual(parse_window('10,-1'), (10.0, -1.0))
        with self.assertRaises(ValueError):
            parse_window('10')
        with self.assertRaises(ValueError):
            parse_window('a,b')
        with self.assertRaises(ValueError):
            parse_window('30,20')

    def test_output_formats(self):
        self.assertEqual(parse_output_formats('json,xlsx'), ['json', 'xlsx'])
        with self.assertRaises(ValueError):
            parse_output_formats('pdf')

    def test_merge_category_targets(self):
        categories = {'x': ['a', 'b'], 'y': ['b', 'c']}
        self.assertEqual(merge_category_targets(None, categories), ['a', 'b', 'c'])
        self.assertEqual(merge_category_targets(['c', 'b', 'a'], categories), ['c', 'b', 'a'])
        with self.assertRaises(ValueError):
            merge_category_targets(['a'], categories)

    def test_load_categories(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / 'cats.json'
            path.write_text(json.dumps({'x': ['a']}), encoding='utf-8')
            self.assertEqual(load_categories(str(path)), {'x': ['a']})

            path.write_text(json.dumps({'x': 'a'}), encoding='utf-8')
            with self.assertRaises(ValueError):
                load_categories(str(path))
            with self.assertRaises(ValueError):
                load_categories(str(Path(tmp) / 'missing.json'))


class TestCommands(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.dir = Path(self.temp_dir.name)
        self.trace_file = self.dir / 'trace.json'
        self.trace_file.write_text(json.dumps({'traceEvents': TRACE_EVENTS}), encoding='utf-8')

    def tearDown(self):
        self.temp_dir.cleanup()

    def run_main(self, argv):
        output = StringIO()
        with redirect_stdout(output):
            code = main(argv)
        return code, output.getvalue()

    def test_model_command(self):
        code, output = self.run_main(['model', str(self.trace_file), '--print-markdown'])
        self.assertEqual(code, 0)
        self.assertIn('CrRendererMain', output)
        self.assertIn('| pid |', output)

    def test_analysis_writes_reports(self):
        out_dir = self.dir / 'out'
        code, _ = self.run_main([
            'analysis', str(self.trace_file), '--targets', 'a,c',
            '--output-format', 'json,csv', '--output-dir', str(out_dir),
        ])
        self.assertEqual(code, 0)

        rows = json.loads((out_dir / 'trace_aggregation.json').read_text(encoding='utf-8'))
        totals = {row['name']: row['total'] for row in rows}
        self.assertEqual(totals, {'a': 175, 'c': 10})
        self.assertTrue((out_dir / 'trace_aggregation.csv').exists())

    def test_analysis_with_categories_and_chart(self):
        categories_file = self.dir / 'cats.json'
        categories_file.write_text(json.dumps({'outer': ['a'], 'other': ['c']}), encoding='utf-8')
        out_dir = self.dir / 'out'
        code, output = self.run_main([
            'analysis', str(self.trace_file), '--categories', str(categories_file),
            '--output-format', 'json', '--output-dir', str(out_dir), '--chart', '--print-markdown',
        ])
        self.assertEqual(code, 0)
        self.assertIn('| category |', output)

        rows = json.loads((out_dir / 'trace_aggregation.json').read_text(encoding='utf-8'))
        self.assertEqual([(row['category'], row['name']) for row in rows], [('outer', 'a'), ('other', 'c')])
        self.assertTrue((out_dir / 'trace_aggregation_categories.png').exists())

    def test_analysis_requires_targets(self):
        code, output = self.run_main(['analysis', str(self.trace_file)])
        self.assertEqual(code, 1)
        self.assertIn('错误', output)

    def test_analysis_without_profile_fails(self):
        self.trace_file.write_text(json.dumps(TRACE_EVENTS[:3]), encoding='utf-8')
        code, output = self.run_main(['analysis', str(self.trace_file), '--targets', 'a'])
        self.assertEqual(code, 1)
        self.assertIn('CpuProfile', output)


if __name__ == '__main__':
    unittest.main()
