from typing import List, Optional, Sequence, Tuple
from PyQt6.QtWidgets import (
    QWidget, QLabel, QHBoxLayout, QVBoxLayout, QFrame, QGroupBox,
    QPushButton, QSlider, QCheckBox, QButtonGroup, QTableWidget,
    QTableWidgetItem, QHeaderView, QAbstractItemView
)
from PyQt6.QtCore import Qt, pyqtSignal, QRectF
from PyQt6.QtGui import QFont, QPainter, QColor

from lottoai.utils import ThemeManager
from lottoai.config import BALL_COLORS, GAME_SPECS, PARAMETER_RANGES
from lottoai.core.models import DrawRecord, ModelParameters, PredictionResult

# ============================================================
# 번호 공 위젯
# ============================================================
class LottoBall(QLabel):
    """번호 하나를 원형 공으로 표시 (주번호: 빨강, 보조번호: 파랑)"""

    def __init__(self, number: int, pool: str = 'primary', size: int = 32):
        super().__init__(str(number))
        self.number = number
        self.pool = pool
        self._size = size
        self.setFixedSize(size, size)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setFont(QFont('Segoe UI', max(9, size // 3), QFont.Weight.Bold))
        self.update_style()

    def update_style(self):
        colors = BALL_COLORS.get(self.pool, BALL_COLORS['primary'])
        self.setStyleSheet(f"""
            QLabel {{
                background: qradialgradient(cx:0.35, cy:0.25, radius:0.9, fx:0.25, fy:0.15,
                    stop:0 {colors['gradient']}, stop:0.6 {colors['bg']}, stop:1 {colors['bg']});
                color: {colors['text']};
                border-radius: {self._size // 2}px;
            }}
        """)


def ball_row(primary: Sequence[int], secondary: Optional[Sequence[int]] = None, size: int = 28) -> QWidget:
    """주번호 + 보조번호 공을 한 줄로 배치"""
    row = QWidget()
    layout = QHBoxLayout(row)
    layout.setContentsMargins(0, 0, 0, 0)
    layout.setSpacing(4)
    for num in primary:
        layout.addWidget(LottoBall(num, 'primary', size))
    for num in secondary or []:
        layout.addWidget(LottoBall(num, 'secondary', size))
    layout.addStretch()
    return row


# ============================================================
# 게임 선택 탭
# ============================================================
class GameTabs(QWidget):
    gameSelected = pyqtSignal(str)

    def __init__(self, selected: str):
        super().__init__()
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)

        self.group = QButtonGroup(self)
        self.group.setExclusive(True)
        self.buttons = {}
        for key, spec in GAME_SPECS.items():
            btn = QPushButton(spec.label)
            btn.setObjectName("gameTab")
            btn.setCheckable(True)
            btn.setCursor(Qt.CursorShape.PointingHandCursor)
            btn.setChecked(key == selected)
            btn.clicked.connect(lambda _checked, k=key: self.gameSelected.emit(k))
            self.group.addButton(btn)
            self.buttons[key] = btn
            layout.addWidget(btn)
        layout.addStretch()

    def setEnabled(self, enabled: bool):
        for btn in self.buttons.values():
            btn.setEnabled(enabled)


# ============================================================
# 모델 파라미터 설정 패널
# ============================================================
class ConfigPanel(QGroupBox):
    """슬라이더 값은 step 단위 정수로 보관"""
    runRequested = pyqtSignal()

    def __init__(self, params: ModelParameters):
        super().__init__("模型参数配置")
        layout = QVBoxLayout(self)
        layout.setSpacing(10)

        self.iter_label = QLabel()
        self.iter_slider = self._make_slider('simulation_iterations')
        self.epoch_label = QLabel()
        self.epoch_slider = self._make_slider('training_epochs')
        self.weight_label = QLabel()
        self.weight_slider = self._make_slider('recent_data_weight')

        for label, slider in ((self.iter_label, self.iter_slider),
                              (self.epoch_label, self.epoch_slider),
                              (self.weight_label, self.weight_slider)):
            slider.valueChanged.connect(self._update_labels)
            layout.addWidget(label)
            layout.addWidget(slider)

        self.crf_chk = QCheckBox("启用 CRF (条件随机场) 相邻依赖分析")
        layout.addWidget(self.crf_chk)

        self.run_btn = QPushButton("开始智能预测分析")
        self.run_btn.setObjectName("runBtn")
        self.run_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        self.run_btn.clicked.connect(self.runRequested.emit)
        layout.addWidget(self.run_btn)

        self.set_parameters(params)

    @staticmethod
    def _make_slider(name: str) -> QSlider:
        low, high, step = PARAMETER_RANGES[name]
        slider = QSlider(Qt.Orientation.Horizontal)
        slider.setRange(round(low / step), round(high / step))
        slider.setSingleStep(1)
        return slider

    @staticmethod
    def _step(name: str) -> float:
        return PARAMETER_RANGES[name][2]

    def _update_labels(self):
        p = self.get_parameters()
        self.iter_label.setText(f"蒙特卡洛模拟次数: <b>{p.simulation_iterations}</b>")
        self.epoch_label.setText(f"LSTM 训练轮数 (Epochs): <b>{p.training_epochs}</b>")
        self.weight_label.setText(f"近期数据权重: <b>{p.recent_data_weight}</b>")

    def get_parameters(self) -> ModelParameters:
        return ModelParameters(
            simulation_iterations=int(self.iter_slider.value() * self._step('simulation_iterations')),
            training_epochs=int(self.epoch_slider.value() * self._step('training_epochs')),
            recent_data_weight=round(self.weight_slider.value() * self._step('recent_data_weight'), 1),
            use_adjacency_model=self.crf_chk.isChecked(),
        )

    def set_parameters(self, params: ModelParameters):
        self.iter_slider.setValue(round(params.simulation_iterations / self._step('simulation_iterations')))
        self.epoch_slider.setValue(round(params.training_epochs / self._step('training_epochs')))
        self.weight_slider.setValue(round(params.recent_data_weight / self._step('recent_data_weight')))
        self.crf_chk.setChecked(params.use_adjacency_model)
        self._update_labels()

    def set_running(self, running: bool):
        for w in (self.iter_slider, self.epoch_slider, self.weight_slider, self.crf_chk, self.run_btn):
            w.setEnabled(not running)
        self.run_btn.setText("模型运算中..." if running else "开始智能预测分析")


# ============================================================
# 역대 추첨 기록 테이블
# ============================================================
class HistoryTable(QTableWidget):

    def __init__(self):
        super().__init__(0, 3)
        self.setHorizontalHeaderLabels(["期号", "日期", "开奖号码"])
        self.verticalHeader().setVisible(False)
        self.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        header = self.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.ResizeToContents)
        header.setSectionResizeMode(1, QHeaderView.ResizeMode.ResizeToContents)
        header.setSectionResizeMode(2, QHeaderView.ResizeMode.Stretch)

    def set_records(self, records: Sequence[DrawRecord]):
        self.setRowCount(len(records))
        for row, record in enumerate(records):
            self.setItem(row, 0, QTableWidgetItem(record.issue))
            self.setItem(row, 1, QTableWidgetItem(record.date))
            self.setCellWidget(row, 2, ball_row(record.primary_numbers, record.secondary_numbers, size=22))
            self.setRowHeight(row, 30)


# ============================================================
# 막대 차트 (빈도/확률)
# ============================================================
class BarChart(QWidget):
    """(라벨, 값) 목록을 세로 막대로 그림"""

    def __init__(self, color: str = '#EF4444', value_format: str = '{:g}'):
        super().__init__()
        self.color = QColor(color)
        self.value_format = value_format
        self.items: List[Tuple[str, float]] = []
        self.setMinimumHeight(180)

    def set_items(self, items: Sequence[Tuple[str, float]]):
        self.items = list(items)
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        t = ThemeManager.get_theme()
        rect = self.rect().adjusted(8, 8, -8, -24)

        if not self.items:
            painter.setPen(QColor(t['text_muted']))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "暂无数据")
            painter.end()
            return

        max_value = max(v for _, v in self.items) or 1
        slot = rect.width() / len(self.items)
        bar_width = max(4.0, slot * 0.7)

        for i, (label, value) in enumerate(self.items):
            height = rect.height() * (value / max_value)
            x = rect.left() + i * slot + (slot - bar_width) / 2
            y = rect.bottom() - height
            color = QColor(self.color)
            color.setAlphaF(0.45 + 0.55 * (value / max_value))
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(color)
            painter.drawRoundedRect(QRectF(x, y, bar_width, height), 3, 3)

            painter.setPen(QColor(t['text_secondary']))
            painter.drawText(QRectF(x - 6, rect.bottom() + 4, bar_width + 12, 16),
                             Qt.AlignmentFlag.AlignCenter, label)
            if height > 16:
                painter.setPen(QColor('white'))
                painter.drawText(QRectF(x - 6, y + 2, bar_width + 12, 14),
                                 Qt.AlignmentFlag.AlignCenter, self.value_format.format(value))
        painter.end()


# ============================================================
# 예측 결과 뷰
# ============================================================
class PredictionResultView(QWidget):

    def __init__(self, result: PredictionResult):
        super().__init__()
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(14)
        t = ThemeManager.get_theme()

        # 요약
        summary_card = QFrame()
        summary_card.setObjectName("card")
        summary_layout = QVBoxLayout(summary_card)
        title = QLabel("AI 分析摘要")
        title.setStyleSheet("font-size: 17px; font-weight: bold;")
        summary_layout.addWidget(title)
        summary = QLabel(result.analysis_summary)
        summary.setWordWrap(True)
        summary.setStyleSheet(f"color: {t['text_secondary']}; font-size: 14px;")
        summary_layout.addWidget(summary)
        layout.addWidget(summary_card)

        # 추천 조합
        combo_group = QGroupBox("智能推荐组合")
        combo_layout = QVBoxLayout(combo_group)
        for idx, combo in enumerate(result.suggested_combinations, 1):
            row = QHBoxLayout()
            idx_label = QLabel(f"#{idx}")
            idx_label.setStyleSheet(f"color: {t['text_muted']}; font-family: monospace;")
            row.addWidget(idx_label)
            row.addWidget(ball_row(combo.primary, combo.secondary, size=30))
            combo_layout.addLayout(row)
            reason = QLabel(f"推荐理由: {combo.reasoning}")
            reason.setWordWrap(True)
            reason.setStyleSheet(f"color: {t['text_secondary']}; font-style: italic;")
            combo_layout.addWidget(reason)
        layout.addWidget(combo_group)

        # 확률 분포
        top_primary = result.top_primary(15)
        prob_group = QGroupBox(f"高概率号码分布 (Top {len(top_primary)})")
        prob_layout = QVBoxLayout(prob_group)
        primary_chart = BarChart(BALL_COLORS['primary']['bg'], '{:.0f}')
        primary_chart.set_items([(str(p.number), p.probability_percent) for p in top_primary])
        prob_layout.addWidget(primary_chart)

        top_secondary = result.top_secondary(8)
        if top_secondary:
            secondary_chart = BarChart(BALL_COLORS['secondary']['bg'], '{:.0f}')
            secondary_chart.set_items([(str(p.number), p.probability_percent) for p in top_secondary])
            prob_layout.addWidget(secondary_chart)

        note = QLabel(f"基于 {len(top_primary)} 个高频号码的 LSTM 预测权重分布")
        note.setAlignment(Qt.AlignmentFlag.AlignCenter)
        note.setStyleSheet(f"color: {t['text_muted']}; font-size: 12px;")
        prob_layout.addWidget(note)
        layout.addWidget(prob_group)
