from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QGroupBox,
    QTableWidget, QTableWidgetItem, QHeaderView, QAbstractItemView,
    QComboBox, QFileDialog, QMessageBox, QScrollArea, QWidget
)
from PyQt6.QtCore import Qt

from lottoai.config import BALL_COLORS, get_game_spec
from lottoai.core.stats import FrequencyAnalyzer
from lottoai.data.exporter import DataExporter
from lottoai.data.history import HistoryRepository
from lottoai.ui.widgets import BarChart, LottoBall
from lottoai.utils import logger, ThemeManager


def _dialog_stylesheet() -> str:
    t = ThemeManager.get_theme()
    return f"""
        QDialog {{
            background-color: {t['bg_primary']};
        }}
        QGroupBox {{
            font-weight: bold;
            border: 1px solid {t['border']};
            border-radius: 8px;
            margin-top: 10px;
            padding-top: 10px;
            background-color: {t['bg_secondary']};
        }}
        QGroupBox::title {{
            subcontrol-origin: margin;
            padding: 0 8px;
        }}
        QPushButton {{
            background-color: {t['accent']};
            color: white;
            border: none;
            border-radius: 8px;
            font-weight: bold;
            padding: 10px;
        }}
        QPushButton:hover {{
            background-color: {t['accent_hover']};
        }}
        QComboBox {{
            padding: 8px;
            border: 1px solid {t['border']};
            border-radius: 6px;
            background-color: {t['bg_secondary']};
        }}
    """


# ============================================================
# 역대 번호 통계 다이얼로그
# ============================================================
class StatisticsDialog(QDialog):
    """선택한 게임의 번호별 빈도와 동반 출현 TOP 12"""

    def __init__(self, repository: HistoryRepository, game: str, parent=None):
        super().__init__(parent)
        self.repository = repository
        self.game = game
        self.spec = get_game_spec(game)
        self.stats = FrequencyAnalyzer().compute_statistics(repository.get_records(game))

        self.setWindowTitle(f"📈 {self.spec.label} 历史统计")
        self.setMinimumSize(760, 680)
        self._setup_ui()
        self.setStyleSheet(_dialog_stylesheet())

    def _setup_ui(self):
        outer = QVBoxLayout(self)
        outer.setContentsMargins(12, 12, 12, 12)
        t = ThemeManager.get_theme()

        if self.stats.is_empty():
            no_data_label = QLabel("📊 暂无历史开奖数据。\n\n可在「数据管理」中导入 JSON 数据。")
            no_data_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            no_data_label.setStyleSheet(f"color: {t['text_muted']}; font-size: 15px;")
            outer.addWidget(no_data_label)
            close_btn = QPushButton("关闭")
            close_btn.clicked.connect(self.close)
            outer.addWidget(close_btn)
            return

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        content = QWidget()
        layout = QVBoxLayout(content)
        layout.setSpacing(14)

        summary_label = QLabel(f"📊 共 {self.stats.total_draws} 期数据分析结果")
        summary_label.setStyleSheet(f"font-size: 16px; font-weight: bold; color: {t['accent']};")
        layout.addWidget(summary_label)

        # 핫 넘버
        hot_group = QGroupBox("🔥 热号 TOP 10")
        hot_layout = QHBoxLayout(hot_group)
        for item in self.stats.hot_numbers(10):
            hot_layout.addWidget(LottoBall(item.number, 'primary', 30))
            count_label = QLabel(f"({item.count})")
            count_label.setStyleSheet(f"color: {t['text_muted']}; font-size: 11px;")
            hot_layout.addWidget(count_label)
        hot_layout.addStretch()
        layout.addWidget(hot_group)

        # 주번호 빈도
        primary_group = QGroupBox("主号码出现频率")
        primary_layout = QVBoxLayout(primary_group)
        primary_chart = BarChart(BALL_COLORS['primary']['bg'])
        primary_chart.set_items([(str(i.number), i.count) for i in self.stats.primary_frequency[:30]])
        primary_layout.addWidget(primary_chart)
        layout.addWidget(primary_group)

        # 보조번호 빈도
        if self.stats.secondary_frequency:
            secondary_group = QGroupBox("副号码出现频率")
            secondary_layout = QVBoxLayout(secondary_group)
            secondary_chart = BarChart(BALL_COLORS['secondary']['bg'])
            secondary_chart.set_items([(str(i.number), i.count) for i in self.stats.secondary_frequency])
            secondary_layout.addWidget(secondary_chart)
            layout.addWidget(secondary_group)

        # 번호 쌍
        pair_group = QGroupBox(f"热门号码对 TOP {len(self.stats.top_primary_pairs)}")
        pair_layout = QVBoxLayout(pair_group)
        table = QTableWidget(len(self.stats.top_primary_pairs), 3)
        table.setHorizontalHeaderLabels(["排名", "号码对", "同时出现次数"])
        table.verticalHeader().setVisible(False)
        table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        for row, pair in enumerate(self.stats.top_primary_pairs):
            for col, value in enumerate((str(row + 1), f"{pair.a} - {pair.b}", str(pair.count))):
                item = QTableWidgetItem(value)
                item.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
                table.setItem(row, col, item)
        table.setMinimumHeight(min(420, 34 * (len(self.stats.top_primary_pairs) + 1)))
        pair_layout.addWidget(table)
        layout.addWidget(pair_group)

        layout.addStretch()
        scroll.setWidget(content)
        outer.addWidget(scroll)

        close_btn = QPushButton("关闭")
        close_btn.setMinimumHeight(40)
        close_btn.clicked.connect(self.close)
        outer.addWidget(close_btn)


# ============================================================
# 데이터 내보내기/가져오기 다이얼로그
# ============================================================
class ExportImportDialog(QDialog):
    """기록/통계/예측 결과 내보내기, 기록 가져오기"""

    def __init__(self, repository: HistoryRepository, game: str, prediction=None, parent=None):
        super().__init__(parent)
        self.repository = repository
        self.game = game
        self.prediction = prediction
        self.spec = get_game_spec(game)
        self.setWindowTitle(f"📁 {self.spec.label} 数据管理")
        self.setMinimumSize(450, 360)
        self._setup_ui()
        self.setStyleSheet(_dialog_stylesheet())

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(15)
        layout.setContentsMargins(20, 20, 20, 20)
        t = ThemeManager.get_theme()

        export_group = QGroupBox("📤 导出")
        export_layout = QVBoxLayout(export_group)

        data_layout = QHBoxLayout()
        data_layout.addWidget(QLabel("数据:"))
        self.data_combo = QComboBox()
        self.data_combo.addItems(["历史开奖", "统计结果", "预测结果"])
        data_layout.addWidget(self.data_combo)
        data_layout.addStretch()
        export_layout.addLayout(data_layout)

        format_layout = QHBoxLayout()
        format_layout.addWidget(QLabel("格式:"))
        self.format_combo = QComboBox()
        self.format_combo.addItems(["CSV", "JSON", "Excel"])
        format_layout.addWidget(self.format_combo)
        format_layout.addStretch()
        export_layout.addLayout(format_layout)

        export_btn = QPushButton("💾 导出")
        export_btn.clicked.connect(self._export_data)
        export_layout.addWidget(export_btn)
        layout.addWidget(export_group)

        import_group = QGroupBox("📥 导入")
        import_layout = QVBoxLayout(import_group)
        import_desc = QLabel(f"从 JSON 文件导入【{self.spec.label}】开奖数据。\n格式错误或重复的期号会被忽略。")
        import_desc.setStyleSheet(f"color: {t['text_muted']}; font-size: 12px;")
        import_layout.addWidget(import_desc)
        import_btn = QPushButton("📂 选择文件并导入")
        import_btn.clicked.connect(self._import_data)
        import_layout.addWidget(import_btn)
        layout.addWidget(import_group)

        layout.addStretch()
        close_btn = QPushButton("关闭")
        close_btn.setMinimumHeight(40)
        close_btn.clicked.connect(self.close)
        layout.addWidget(close_btn)

    def _export_data(self):
        data_idx = self.data_combo.currentIndex()
        format_idx = self.format_combo.currentIndex()
        records = self.repository.get_records(self.game)
        stats = FrequencyAnalyzer().compute_statistics(records)

        if (data_idx == 0 and not records) or (data_idx == 1 and stats.is_empty()):
            QMessageBox.warning(self, "无数据", "没有可导出的数据。")
            return
        if data_idx == 2 and self.prediction is None:
            QMessageBox.warning(self, "无数据", "请先运行一次预测分析。")
            return
        if data_idx == 2 and format_idx != 1:
            QMessageBox.information(self, "提示", "预测结果仅支持 JSON 格式导出。")
            format_idx = 1

        ext, filter_str = [("csv", "CSV 文件 (*.csv)"), ("json", "JSON 文件 (*.json)"),
                           ("xlsx", "Excel 文件 (*.xlsx)")][format_idx]
        default_name = f"{self.game.lower()}_{['history', 'statistics', 'prediction'][data_idx]}"
        filepath, _ = QFileDialog.getSaveFileName(self, "导出", f"{default_name}.{ext}", filter_str)
        if not filepath:
            return

        if format_idx == 2:
            success = DataExporter.export_to_excel(records, stats, filepath, self.spec.label)
        elif data_idx == 2:
            success = DataExporter.export_to_json(self.prediction.to_dict(), filepath)
        elif format_idx == 1:
            payload = [r.to_dict() for r in records] if data_idx == 0 else {
                'primary_frequency': [{'number': i.number, 'count': i.count} for i in stats.primary_frequency],
                'secondary_frequency': [{'number': i.number, 'count': i.count} for i in stats.secondary_frequency],
                'top_primary_pairs': [{'a': p.a, 'b': p.b, 'count': p.count} for p in stats.top_primary_pairs],
            }
            success = DataExporter.export_to_json(payload, filepath)
        elif data_idx == 0:
            success = DataExporter.export_history_to_csv(records, filepath)
        else:
            success = DataExporter.export_statistics_to_csv(stats, filepath)

        if success:
            QMessageBox.information(self, "完成", f"已保存。\n{filepath}")
        else:
            QMessageBox.warning(self, "错误", "导出失败。")

    def _import_data(self):
        filepath, _ = QFileDialog.getOpenFileName(self, "导入", "", "JSON 文件 (*.json)")
        if not filepath:
            return

        data = DataExporter.import_from_json(filepath)
        if data is None:
            QMessageBox.warning(self, "错误", "读取文件失败。")
            return

        added = self.repository.import_records(self.game, data)
        logger.info(f"Import finished: {added}/{len(data)} records added for {self.game}")
        QMessageBox.information(self, "完成", f"已导入 {added} 条记录。\n(重复或格式错误的记录已忽略)")
