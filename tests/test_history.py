import json
import sqlite3
import unittest
import tempfile
from pathlib import Path

from lottoai.config import APP_CONFIG
from lottoai.core.models import DrawRecord
from lottoai.data.history import HistoryRepository


class TestHistoryRepository(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)
        self.db_path = self.dir / "history.db"
        self.sample_file = self.dir / "sample.json"
        self.sample_file.write_text(json.dumps({
            'SSQ': [
                {'issue': '2026002', 'date': '2026-01-04', 'primary': [33, 1, 2, 3, 4, 5], 'secondary': [16]},
                {'issue': '2026001', 'date': '2026-01-01', 'primary': [1, 2, 3, 4, 5, 40], 'secondary': [1]},
            ],
            'HAPPY8': [
                {'issue': '1', 'date': '2026-01-01', 'primary': list(range(1, 21))},
            ],
        }), encoding='utf-8')

    def tearDown(self):
        self.tmp.cleanup()

    def make_repo(self):
        return HistoryRepository(db_path=self.db_path, sample_file=self.sample_file)

    def test_json_fallback_validates_and_sorts(self):
        repo = self.make_repo()
        self.assertEqual(repo.source, 'json')
        records = repo.get_records('SSQ')
        # 범위를 벗어난 기록(40)은 제외
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].primary_numbers, (1, 2, 3, 4, 5, 33))
        self.assertEqual(repo.count('HAPPY8'), 1)
        self.assertEqual(repo.count('QXC'), 0)

    def test_normalize_rules(self):
        norm = HistoryRepository.normalize_record
        self.assertIsNone(norm('SSQ', {'issue': 'x', 'primary': [1, 2, 3, 4, 5], 'secondary': [1]}))
        self.assertIsNone(norm('SSQ', {'issue': 'x', 'primary': [1, 1, 3, 4, 5, 6], 'secondary': [1]}))
        self.assertIsNone(norm('SSQ', {'issue': 'x', 'primary': [1, 2, 3, 4, 5, 6]}))
        self.assertIsNone(norm('SSQ', {'issue': '', 'primary': [1, 2, 3, 4, 5, 6], 'secondary': [1]}))
        self.assertIsNone(norm('HAPPY8', {'issue': 'x', 'primary': list(range(1, 21)), 'secondary': [1]}))
        self.assertIsNone(norm('DALETOU', {'issue': 'x', 'primary': [1, 2, 3, 4, 'a'], 'secondary': [1, 2]}))

        qxc = norm('QXC', {'issue': '26001', 'primary': [9, 0, 9, 1, 2, 3, 0]})
        self.assertEqual(qxc.primary_numbers, (9, 0, 9, 1, 2, 3, 0))
        self.assertIsNone(qxc.secondary_numbers)

        legacy = norm('SSQ', {'issue': 7, 'redBalls': [6, 5, 4, 3, 2, 1], 'blueBalls': [8]})
        self.assertEqual(legacy.issue, '7')
        self.assertEqual(legacy.secondary_numbers, (8,))

    def test_fractional_numbers_rejected(self):
        norm = HistoryRepository.normalize_record
        self.assertIsNone(norm('SSQ', {'issue': 'x', 'primary': [1.9, 2, 3, 4, 5, 12.7], 'secondary': [1]}))
        self.assertIsNone(norm('SSQ', {'issue': 'x', 'primary': [1, 2, 3, 4, 5, 6], 'secondary': [1.5]}))
        self.assertIsNone(norm('SSQ', {'issue': 'x', 'primary': [1, 2, 3, 4, 5, '6'], 'secondary': [1]}))
        whole = norm('SSQ', {'issue': 'x', 'primary': [1.0, 2, 3, 4, 5, 6], 'secondary': [1]})
        self.assertEqual(whole.primary_numbers, (1, 2, 3, 4, 5, 6))

    def write_db_rows(self, rows):
        with sqlite3.connect(self.db_path) as conn:
            HistoryRepository._ensure_table(conn)
            conn.executemany(
                "INSERT INTO draws (game, issue, date, primary_numbers, secondary_numbers) VALUES (?, ?, ?, ?, ?)",
                rows,
            )

    def test_corrupt_db_row_skipped_not_whole_db(self):
        self.write_db_rows([
            ('SSQ', 'REAL1', '2026-02-01', json.dumps([1, 2, 3, 4, 5, 6]), json.dumps([7])),
            ('SSQ', 'BAD', '2026-02-03', 'not json', json.dumps([7])),
            ('SSQ', 'BAD2', '2026-02-05', json.dumps([1, 2, 3, 4, 5, 6]), '{broken'),
        ])
        repo = self.make_repo()
        self.assertEqual(repo.source, 'db')
        self.assertEqual([r.issue for r in repo.get_records('SSQ')], ['REAL1'])

        self.assertTrue(repo.add_record('SSQ', {
            'issue': 'NEW', 'date': '2026-02-08', 'primary': [8, 9, 10, 11, 12, 13], 'secondary': [2]
        }))
        with sqlite3.connect(self.db_path) as conn:
            issues = sorted(row[0] for row in conn.execute("SELECT issue FROM draws"))
        # 샘플 기록이 사용자 DB 에 섞이지 않음
        self.assertEqual(issues, ['BAD', 'BAD2', 'NEW', 'REAL1'])

    def test_sample_not_written_into_db_with_only_invalid_rows(self):
        self.write_db_rows([
            ('SSQ', 'BAD', '2026-02-03', 'not json', None),
        ])
        repo = self.make_repo()
        self.assertEqual(repo.source, 'json')

        self.assertTrue(repo.add_record('SSQ', {
            'issue': 'NEW', 'date': '2026-02-08', 'primary': [8, 9, 10, 11, 12, 13], 'secondary': [2]
        }))
        with sqlite3.connect(self.db_path) as conn:
            issues = sorted(row[0] for row in conn.execute("SELECT issue FROM draws"))
        self.assertEqual(issues, ['BAD', 'NEW'])

    def test_unknown_game(self):
        repo = self.make_repo()
        with self.assertRaises(KeyError):
            repo.get_records('LOTTO645')

    def test_add_record_seeds_db_and_persists(self):
        repo = self.make_repo()
        added = repo.add_record('SSQ', {
            'issue': '2026003', 'date': '2026-01-06', 'primary': [7, 8, 9, 10, 11, 12], 'secondary': [3]
        })
        self.assertTrue(added)
        self.assertEqual(repo.get_records('SSQ')[0].issue, '2026003')

        with sqlite3.connect(self.db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM draws").fetchone()[0]
        # 샘플 2건(SSQ 1, HAPPY8 1) + 신규 1건
        self.assertEqual(count, 3)

        reloaded = self.make_repo()
        self.assertEqual(reloaded.source, 'db')
        self.assertEqual([r.issue for r in reloaded.get_records('SSQ')], ['2026003', '2026002'])
        self.assertEqual(reloaded.count('HAPPY8'), 1)

    def test_add_duplicate_and_invalid(self):
        repo = self.make_repo()
        duplicate = DrawRecord('2026002', '2026-01-04', (1, 2, 3, 4, 5, 33), (16,))
        self.assertFalse(repo.add_record('SSQ', duplicate))
        self.assertFalse(repo.add_record('SSQ', {'issue': 'bad', 'primary': [1]}))
        self.assertEqual(repo.count('SSQ'), 1)

    def test_import_records(self):
        repo = self.make_repo()
        added = repo.import_records('DALETOU', [
            {'issue': '26001', 'date': '2026-01-01', 'primary': [1, 2, 3, 4, 5], 'secondary': [1, 2]},
            {'issue': '26002', 'date': '2026-01-03', 'primary': [6, 7, 8, 9, 10], 'secondary': [3, 4]},
            {'issue': '26002', 'date': '2026-01-03', 'primary': [6, 7, 8, 9, 10], 'secondary': [3, 4]},
            {'issue': '26003', 'date': '2026-01-05', 'primary': [6, 7, 8, 9, 36], 'secondary': [3, 4]},
        ])
        self.assertEqual(added, 2)
        self.assertEqual([r.issue for r in repo.get_records('DALETOU')], ['26002', '26001'])

    def test_without_db_path_keeps_memory_only(self):
        repo = self.make_repo()
        repo.db_path = None
        self.assertTrue(repo.add_record('QXC', {'issue': '1', 'primary': [1, 1, 1, 1, 1, 1, 1]}))
        self.assertEqual(repo.count('QXC'), 1)
        self.assertFalse(self.db_path.exists())

    def test_missing_sample_file(self):
        repo = HistoryRepository(db_path=self.db_path, sample_file=self.dir / "missing.json")
        self.assertEqual(repo.total_count(), 0)
        self.assertEqual(repo.get_records('SSQ'), [])

    def test_bundled_sample_history_is_valid(self):
        repo = HistoryRepository(db_path=self.db_path, sample_file=APP_CONFIG['SAMPLE_HISTORY_FILE'])
        for game in ('SSQ', 'DALETOU', 'HAPPY8', 'QXC'):
            self.assertGreater(repo.count(game), 0, game)


if __name__ == '__main__':
    unittest.main()
