import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, cast
from lottoai.config import APP_CONFIG, GAME_SPECS, GameSpec, PoolSpec, get_game_spec
from lottoai.core.models import DrawRecord
from lottoai.utils import logger

# ============================================================
# 게임별 역대 추첨 기록 저장소
# ============================================================
class HistoryRepository:
    """게임별 추첨 기록 관리 (SQLite DB 우선, JSON 샘플 폴백)"""

    def __init__(self, db_path: Optional[Path] = None, sample_file: Optional[Path] = None):
        self.db_path: Optional[Path] = db_path if db_path is not None else cast(Path, APP_CONFIG['HISTORY_DB'])
        self.sample_file: Optional[Path] = (
            sample_file if sample_file is not None else cast(Path, APP_CONFIG['SAMPLE_HISTORY_FILE'])
        )
        self.records: Dict[str, List[DrawRecord]] = {key: [] for key in GAME_SPECS}
        self.source = 'empty'
        self._load()

    def _load(self):
        """데이터 로드 - DB 우선, JSON 폴백"""
        if self.db_path and self.db_path.exists():
            if self._load_from_db():
                return
        self._load_from_json()

    def _load_from_db(self) -> bool:
        """SQLite DB에서 데이터 로드"""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute('''
                    SELECT game, issue, date, primary_numbers, secondary_numbers
                    FROM draws
                    ORDER BY game, date DESC, issue DESC
                ''')
                rows = cursor.fetchall()

            if not rows:
                return False

            loaded: Dict[str, List[DrawRecord]] = {key: [] for key in GAME_SPECS}
            invalid_count = 0
            for game, issue, date, primary_json, secondary_json in rows:
                if game not in GAME_SPECS:
                    invalid_count += 1
                    continue
                try:
                    primary = json.loads(primary_json)
                    secondary = json.loads(secondary_json) if secondary_json else None
                except (TypeError, ValueError):
                    invalid_count += 1
                    continue
                record = self.normalize_record(game, {
                    'issue': issue,
                    'date': date,
                    'primary': primary,
                    'secondary': secondary,
                })
                if not record:
                    invalid_count += 1
                    continue
                loaded[game].append(record)

            if invalid_count:
                logger.warning(f"Skipped {invalid_count} invalid draw records from DB")

            if not any(loaded.values()):
                return False

            self.records = loaded
            self.source = 'db'
            logger.info(f"Loaded {self.total_count()} draw records from DB")
            return True

        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Failed to load from DB: {e}")
            return False

    def _load_from_json(self):
        """JSON 샘플 파일에서 로드 (폴백)"""
        try:
            if self.sample_file and self.sample_file.exists():
                with open(self.sample_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                for game in GAME_SPECS:
                    items = data.get(game, [])
                    self.records[game] = [r for r in (self.normalize_record(game, item) for item in items) if r]
                self.source = 'json'
                logger.info(f"Loaded {self.total_count()} draw records from JSON")
        except (OSError, ValueError, AttributeError) as e:
            logger.error(f"Failed to load sample history: {e}")
            self.records = {key: [] for key in GAME_SPECS}

    # ------------------------------------------------------------
    # 검증
    # ------------------------------------------------------------
    @staticmethod
    def _parse_numbers(values: Any, pool: PoolSpec, allow_duplicates: bool) -> Optional[List[int]]:
        if not isinstance(values, (list, tuple)):
            return None
        numbers = []
        for n in values:
            # 소수는 버림 없이 거부 (정수 값의 float 만 허용)
            if isinstance(n, bool) or not isinstance(n, (int, float)):
                return None
            if isinstance(n, float) and not n.is_integer():
                return None
            numbers.append(int(n))
        if len(numbers) != pool.pick:
            return None
        if not allow_duplicates and len(set(numbers)) != len(numbers):
            return None
        if any(n < pool.min_number or n > pool.max_number for n in numbers):
            return None
        return numbers

    @classmethod
    def normalize_record(cls, game: str, item: Dict[str, Any]) -> Optional[DrawRecord]:
        """입력 기록 정규화 및 게임 규칙 검증 (실패 시 None)"""
        spec: GameSpec = get_game_spec(game)
        if not isinstance(item, dict):
            return None

        issue = str(item.get('issue', '')).strip()
        if not issue:
            return None

        primary = cls._parse_numbers(
            item.get('primary', item.get('redBalls')), spec.primary, spec.allow_duplicates
        )
        if primary is None:
            return None

        secondary_raw = item.get('secondary', item.get('blueBalls'))
        secondary: Optional[List[int]] = None
        if spec.secondary is not None:
            secondary = cls._parse_numbers(secondary_raw, spec.secondary, spec.allow_duplicates)
            if secondary is None:
                return None
        elif secondary_raw:
            return None

        # 칠성채는 자리 순서가 의미를 가지므로 정렬하지 않음
        if not spec.allow_duplicates:
            primary = sorted(primary)
            if secondary is not None:
                secondary = sorted(secondary)

        return DrawRecord(
            issue=issue,
            date=str(item.get('date') or ''),
            primary_numbers=tuple(primary),
            secondary_numbers=tuple(secondary) if secondary is not None else None,
        )

    # ------------------------------------------------------------
    # 저장
    # ------------------------------------------------------------
    @staticmethod
    def _ensure_table(conn: sqlite3.Connection):
        conn.execute('''
            CREATE TABLE IF NOT EXISTS draws (
                game TEXT NOT NULL,
                issue TEXT NOT NULL,
                date TEXT,
                primary_numbers TEXT NOT NULL,
                secondary_numbers TEXT,
                PRIMARY KEY (game, issue)
            )
        ''')

    def _save_to_db(self, game: str, records: Iterable[DrawRecord]) -> int:
        """DB에 기록 저장 (신규 삽입 건수 반환, 실패 시 -1)"""
        if not self.db_path:
            return -1

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            inserted = 0
            with sqlite3.connect(self.db_path) as conn:
                self._ensure_table(conn)
                for record in records:
                    cursor = conn.execute('''
                        INSERT OR IGNORE INTO draws
                        (game, issue, date, primary_numbers, secondary_numbers)
                        VALUES (?, ?, ?, ?, ?)
                    ''', (
                        game,
                        record.issue,
                        record.date,
                        json.dumps(list(record.primary_numbers)),
                        json.dumps(list(record.secondary_numbers)) if record.secondary_numbers is not None else None,
                    ))
                    inserted += cursor.rowcount
            return inserted
        except sqlite3.Error as e:
            logger.error(f"Failed to save draw records to DB: {e}")
            return -1

    def _db_has_rows(self) -> bool:
        if not self.db_path or not self.db_path.exists():
            return False
        try:
            with sqlite3.connect(self.db_path) as conn:
                self._ensure_table(conn)
                return conn.execute("SELECT 1 FROM draws LIMIT 1").fetchone() is not None
        except sqlite3.Error as e:
            logger.error(f"Failed to inspect history DB: {e}")
            return True

    def _seed_db_from_memory(self):
        """샘플 데이터로 동작 중이면 DB 첫 저장 시 함께 기록 (기존 DB 가 비어 있을 때만)"""
        if self.source != 'json':
            return
        if self._db_has_rows():
            logger.warning("History DB already has rows; sample records are not written to it")
        else:
            for game, records in self.records.items():
                if records:
                    self._save_to_db(game, records)
        self.source = 'db'

    def add_record(self, game: str, item: Any) -> bool:
        """추첨 기록 추가 (검증 실패 또는 중복이면 False)"""
        if isinstance(item, DrawRecord):
            item = item.to_dict()
        record = self.normalize_record(game, item)
        if not record:
            logger.warning(f"Invalid draw record ignored: game={game}, issue={item.get('issue') if isinstance(item, dict) else item}")
            return False

        if any(r.issue == record.issue for r in self.records[game]):
            return False

        if self.db_path:
            self._seed_db_from_memory()
            if self._save_to_db(game, [record]) < 0:
                return False

        self.records[game].insert(0, record)
        self.records[game].sort(key=lambda r: (r.date, r.issue), reverse=True)
        return True

    def import_records(self, game: str, items: Iterable[Any]) -> int:
        """여러 기록 가져오기 (추가된 건수)"""
        added = 0
        for item in items:
            if self.add_record(game, item):
                added += 1
        logger.info(f"Imported {added} draw records for {game}")
        return added

    def reload(self):
        """저장소에서 다시 로드 (수동 새로고침용)"""
        self.records = {key: [] for key in GAME_SPECS}
        self._load()

    # ------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------
    def get_records(self, game: str) -> List[DrawRecord]:
        get_game_spec(game)
        return list(self.records.get(game, []))

    def get_recent(self, game: str, count: int = 10) -> List[DrawRecord]:
        return self.get_records(game)[:count]

    def count(self, game: str) -> int:
        return len(self.records.get(game, []))

    def total_count(self) -> int:
        return sum(len(v) for v in self.records.values())
