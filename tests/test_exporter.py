import csv
import json
import tempfile
import unittest
from pathlib import Path

import openpyxl

from lottoai.core.models import DrawRecord
from lottoai.core.stats import compute_statistics
from lottoai.data.exporter import DataExporter


class TestDataExporter(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)
        self.records = [
            DrawRecord('2026002', '2026-01-04', (2, 3, 4, 5, 6, 7), (9,)),
            DrawRecord('2026001', '2026-01-01', (1, 2, 3, 4, 5, 6), (3,)),
        ]
        self.stats = compute_statistics(self.records)

    def tearDown(self):
        self.tmp.cleanup()

    def read_csv(self, path):
        with open(path, encoding='utf-8-sig', newline='') as f:
            return list(csv.reader(f))

    def test_history_csv(self):
        path = self.dir / "history.csv"
        self.assertTrue(DataExporter.export_history_to_csv(self.records, str(path)))
        rows = self.read_csv(path)
        self.assertEqual(rows[0], ["期号", "日期", "主号码", "副号码"])
        self.assertEqual(rows[1], ['2026002', '2026-01-04', '2 3 4 5 6 7', '9'])
        self.assertEqual(len(rows), 3)

    def test_statistics_csv(self):
        path = self.dir / "stats.csv"
        self.assertTrue(DataExporter.export_statistics_to_csv(self.stats, str(path)))
        rows = self.read_csv(path)
        categories = [r[0] for r in rows[1:]]
        self.assertEqual(categories.count('primary'), 7)
        self.assertEqual(categories.count('secondary'), 2)
        self.assertEqual(categories.count('pair'), 12)
        self.assertEqual(rows[1], ['primary', '2', '', '2'])

    def test_json_round_trip_for_import(self):
        path = self.dir / "records.json"
        self.assertTrue(DataExporter.export_to_json([r.to_dict() for r in self.records], str(path)))
        items = DataExporter.import_from_json(str(path))
        self.assertEqual(items[0]['primary'], [2, 3, 4, 5, 6, 7])

    def test_import_rejects_non_list(self):
        path = self.dir / "object.json"
        path.write_text(json.dumps({'SSQ': []}), encoding='utf-8')
        self.assertIsNone(DataExporter.import_from_json(str(path)))
        self.assertIsNone(DataExporter.import_from_json(str(self.dir / "missing.json")))

    def test_export_to_bad_path(self):
        path = self.dir / "no_such_dir" / "history.csv"
        self.assertFalse(DataExporter.export_history_to_csv(self.records, str(path)))

    def test_excel(self):
        path = self.dir / "history.xlsx"
        self.assertTrue(DataExporter.export_to_excel(self.records, self.stats, str(path), title='双色球'))
        wb = openpyxl.load_workbook(path)
        self.assertEqual(wb.sheetnames, ['双色球', '号码频率', '热门号码对'])
        self.assertEqual(wb['双色球']['A2'].value, '2026002')
        self.assertEqual(wb['号码频率'].max_row, 1 + 7 + 2)
        self.assertEqual(wb['热门号码对']['D2'].value, 2)


if __name__ == '__main__':
    unittest.main()
