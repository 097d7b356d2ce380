"""
게임별 추첨 기록과 통계를 엑셀 파일로 내보내는 스크립트
"""
import sys
from pathlib import Path
from datetime import datetime

from lottoai.config import DATA_HOME, DEFAULT_GAME, get_game_spec
from lottoai.core.stats import compute_statistics
from lottoai.data.exporter import DataExporter
from lottoai.data.history import HistoryRepository

def export_to_excel(game: str = DEFAULT_GAME, output_path: Path = None):
    """Export one game's history and statistics to an Excel file."""
    spec = get_game_spec(game)
    records = HistoryRepository().get_records(game)
    if not records:
        print(f"내보낼 데이터가 없습니다: {spec.label}")
        return False

    if output_path is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = DATA_HOME / f"{game.lower()}_history_{timestamp}.xlsx"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    stats = compute_statistics(records)
    if DataExporter.export_to_excel(records, stats, str(output_path), spec.label):
        print(f"엑셀 파일 저장 완료: {output_path}")
        print(f"총 {len(records)}개 회차 데이터 내보내기 완료")
        return True
    print("엑셀 내보내기 실패")
    return False

if __name__ == "__main__":
    export_to_excel(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_GAME,
                    Path(sys.argv[2]) if len(sys.argv) > 2 else None)
