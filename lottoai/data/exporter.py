import json
import csv
from typing import Any, List, Dict, Optional, Sequence

import openpyxl
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from lottoai.core.models import DrawRecord, LotteryStatistics
from lottoai.utils import logger

# ============================================================
# 데이터 내보내기/가져오기
# ============================================================
class DataExporter:
    """추첨 기록, 통계, 예측 결과 내보내기/가져오기"""

    @staticmethod
    def _join(numbers: Optional[Sequence[int]]) -> str:
        if not numbers:
            return ''
        return ' '.join(str(n) for n in numbers)

    @staticmethod
    def export_history_to_csv(records: Sequence[DrawRecord], filepath: str) -> bool:
        """추첨 기록 CSV 내보내기"""
        try:
            with open(filepath, 'w', encoding='utf-8-sig', newline='') as f:
                writer = csv.writer(f)
                writer.writerow(["期号", "日期", "主号码", "副号码"])
                for record in records:
                    writer.writerow([
                        record.issue,
                        record.date,
                        DataExporter._join(record.primary_numbers),
                        DataExporter._join(record.secondary_numbers),
                    ])
            logger.info(f"Exported {len(records)} records to {filepath}")
            return True
        except OSError as e:
            logger.error(f"Failed to export CSV: {e}")
            return False

    @staticmethod
    def export_statistics_to_csv(stats: LotteryStatistics, filepath: str) -> bool:
        """빈도/쌍 통계 CSV 내보내기 (섹션 구분 컬럼 포함)"""
        try:
            with open(filepath, 'w', encoding='utf-8-sig', newline='') as f:
                writer = csv.writer(f)
                writer.writerow(["类别", "号码", "号码2", "次数"])
                for item in stats.primary_frequency:
                    writer.writerow(["primary", item.number, '', item.count])
                for item in stats.secondary_frequency:
                    writer.writerow(["secondary", item.number, '', item.count])
                for pair in stats.top_primary_pairs:
                    writer.writerow(["pair", pair.a, pair.b, pair.count])
            logger.info(f"Exported statistics to {filepath}")
            return True
        except OSError as e:
            logger.error(f"Failed to export statistics CSV: {e}")
            return False

    @staticmethod
    def export_to_json(data: Any, filepath: str) -> bool:
        """JSON으로 내보내기"""
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            logger.info(f"Exported JSON to {filepath}")
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Failed to export JSON: {e}")
            return False

    @staticmethod
    def import_from_json(filepath: str) -> Optional[List[Dict[str, Any]]]:
        """JSON에서 추첨 기록 목록 가져오기"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, list):
                logger.error(f"Import file must contain a list: {filepath}")
                return None
            logger.info(f"Imported {len(data)} items from {filepath}")
            return data
        except (OSError, ValueError) as e:
            logger.error(f"Failed to import JSON: {e}")
            return None

    @staticmethod
    def export_to_excel(records: Sequence[DrawRecord], stats: LotteryStatistics,
                        filepath: str, title: str = '开奖数据') -> bool:
        """엑셀 파일로 내보내기 (기록 / 빈도 / 번호 쌍 시트)"""
        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color="7C3AED", end_color="7C3AED", fill_type="solid")
        center = Alignment(horizontal="center", vertical="center")
        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        def write_sheet(ws, headers: List[str], rows: List[List[Any]], widths: List[int]):
            for col, header in enumerate(headers, 1):
                cell = ws.cell(row=1, column=col, value=header)
                cell.font = header_font
                cell.fill = header_fill
                cell.alignment = center
                cell.border = thin_border
            for row_idx, row_data in enumerate(rows, 2):
                for col_idx, value in enumerate(row_data, 1):
                    cell = ws.cell(row=row_idx, column=col_idx, value=value)
                    cell.alignment = center
                    cell.border = thin_border
            for i, width in enumerate(widths, 1):
                ws.column_dimensions[get_column_letter(i)].width = width
            ws.freeze_panes = 'A2'

        try:
            wb = openpyxl.Workbook()
            ws = wb.active
            ws.title = title
            write_sheet(
                ws, ["期号", "日期", "主号码", "副号码"],
                [[r.issue, r.date, DataExporter._join(r.primary_numbers), DataExporter._join(r.secondary_numbers)]
                 for r in records],
                [12, 12, 48, 12],
            )

            freq_ws = wb.create_sheet("号码频率")
            freq_rows = [["主", item.number, item.count] for item in stats.primary_frequency]
            freq_rows += [["副", item.number, item.count] for item in stats.secondary_frequency]
            write_sheet(freq_ws, ["号码池", "号码", "出现次数"], freq_rows, [10, 10, 12])

            pair_ws = wb.create_sheet("热门号码对")
            write_sheet(
                pair_ws, ["排名", "号码A", "号码B", "同时出现次数"],
                [[rank, p.a, p.b, p.count] for rank, p in enumerate(stats.top_primary_pairs, 1)],
                [8, 10, 10, 14],
            )

            wb.save(filepath)
            logger.info(f"Exported Excel workbook to {filepath} ({len(records)} records)")
            return True
        except OSError as e:
            logger.error(f"Failed to export Excel: {e}")
            return False
