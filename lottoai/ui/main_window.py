from typing import Optional

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFrame,
    QScrollArea, QGroupBox
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont, QCloseEvent

from lottoai.config import APP_CONFIG, PredictionServiceConfig, get_game_spec
from lottoai.utils import logger, ThemeManager
from lottoai.core.models import PredictionResult
from lottoai.core.session import AnalysisSession, AnalysisState
from lottoai.core.settings import SettingsManager
from lottoai.data.history import HistoryRepository
from lottoai.net.client import PredictionManager
from lottoai.net.gemini import GeminiPredictionService
from lottoai.ui.widgets import GameTabs, ConfigPanel, HistoryTable, PredictionResultView
from lottoai.ui.dialogs import StatisticsDialog, ExportImportDialog

PLACEHOLDER_TEXT = "等待分析\n\n请在左侧配置模型参数并点击“开始智能预测分析”以生成预测报告。"
DISCLAIMER_TEXT = ("<b>免责声明:</b> 本应用仅用于统计学演示和算法研究，彩票中奖概率极低且为独立随机事件。"
                   "预测结果仅供娱乐，不构成任何投资或购彩建议。请理性购彩。")

# ============================================================
# 메인 애플리케이션 클래스
# ============================================================
class LottoAnalystApp(QWidget):
    def __init__(self, service_config: PredictionServiceConfig,
                 settings: Optional[SettingsManager] = None,
                 repository: Optional[HistoryRepository] = None):
        super().__init__()
        # 매니저 초기화
        self.settings = settings or SettingsManager()
        self.repository = repository or HistoryRepository()
        self.session = AnalysisSession()
        self.prediction_manager = PredictionManager(GeminiPredictionService(service_config), self)
        self.prediction_manager.predictionReady.connect(self._on_prediction_ready)
        self.prediction_manager.errorOccurred.connect(self._on_prediction_error)

        self.selected_game = self.settings.get_selected_game()
        ThemeManager.set_theme(self.settings.get('theme', 'dark'))
        ThemeManager.add_listener(self._on_theme_changed)

        if not service_config.api_key:
            logger.warning("GEMINI_API_KEY is not set; predictions will fail until it is provided")

        self.initUI()
        self._refresh_history()
        self._render_session()
        logger.info("Application started")

    def initUI(self):
        t = ThemeManager.get_theme()
        self.setWindowTitle(f"{APP_CONFIG['APP_NAME']} v{APP_CONFIG['VERSION']}")
        self.setGeometry(100, 100, *APP_CONFIG['WINDOW_SIZE'])

        main_layout = QVBoxLayout()
        main_layout.setSpacing(15)
        main_layout.setContentsMargins(20, 20, 20, 20)

        # 1. 헤더 (제목 + 테마 토글)
        header_layout = QHBoxLayout()
        title_label = QLabel(APP_CONFIG['APP_NAME'])
        title_label.setFont(QFont('Segoe UI', 22, QFont.Weight.Bold))
        title_label.setStyleSheet(f"color: {t['accent']};")
        header_layout.addWidget(title_label)
        header_layout.addStretch()

        powered_label = QLabel("Powered by Gemini • LSTM • Monte Carlo")
        powered_label.setStyleSheet(f"color: {t['text_muted']}; font-size: 11px;")
        header_layout.addWidget(powered_label)

        self.theme_btn = QPushButton()
        self.theme_btn.setFixedSize(64, 32)
        self.theme_btn.clicked.connect(self._toggle_theme)
        header_layout.addWidget(self.theme_btn)
        self._update_theme_button()
        main_layout.addLayout(header_layout)

        body_layout = QHBoxLayout()
        body_layout.setSpacing(20)

        # 2. 왼쪽: 게임 선택 / 파라미터 / 기록
        left_layout = QVBoxLayout()
        left_layout.setSpacing(12)

        self.game_tabs = GameTabs(self.selected_game)
        self.game_tabs.gameSelected.connect(self._on_game_selected)
        left_layout.addWidget(self.game_tabs)

        self.config_panel = ConfigPanel(self.settings.get_model_parameters())
        self.config_panel.runRequested.connect(self.run_analysis)
        left_layout.addWidget(self.config_panel)

        history_group = QGroupBox("近期历史开奖数据 (样本)")
        history_layout = QVBoxLayout(history_group)
        self.history_table = HistoryTable()
        history_layout.addWidget(self.history_table)
        self.history_note = QLabel()
        self.history_note.setStyleSheet(f"color: {t['text_muted']}; font-size: 11px;")
        history_layout.addWidget(self.history_note)
        left_layout.addWidget(history_group, 1)

        tools_layout = QHBoxLayout()
        for text, callback in (("📈 历史统计", self._show_statistics), ("💾 数据管理", self._show_data_manager)):
            btn = QPushButton(text)
            btn.setCursor(Qt.CursorShape.PointingHandCursor)
            btn.clicked.connect(callback)
            tools_layout.addWidget(btn)
        left_layout.addLayout(tools_layout)

        disclaimer = QLabel(DISCLAIMER_TEXT)
        disclaimer.setWordWrap(True)
        disclaimer.setStyleSheet(f"color: {t['text_muted']}; font-size: 11px;")
        left_layout.addWidget(disclaimer)

        left_widget = QWidget()
        left_widget.setLayout(left_layout)
        left_widget.setFixedWidth(440)
        body_layout.addWidget(left_widget)

        # 3. 오른쪽: 결과 영역 (스크롤)
        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(True)
        self.scroll_area.setFrameShape(QFrame.Shape.NoFrame)
        self.results_container = QWidget()
        self.results_layout = QVBoxLayout(self.results_container)
        self.results_layout.setAlignment(Qt.AlignmentFlag.AlignTop)
        self.scroll_area.setWidget(self.results_container)
        body_layout.addWidget(self.scroll_area, 1)

        main_layout.addLayout(body_layout, 1)
        self.setLayout(main_layout)
        self._apply_theme()

    # === 테마 ===

    def _update_theme_button(self):
        self.theme_btn.setText("Light" if ThemeManager.get_theme_name() == 'dark' else "Dark")

    def _toggle_theme(self):
        ThemeManager.toggle_theme()
        self.settings.set('theme', ThemeManager.get_theme_name())

    def _on_theme_changed(self):
        self._update_theme_button()
        self._apply_theme()
        self._render_session()

    def _apply_theme(self):
        self.setStyleSheet(ThemeManager.get_stylesheet())

    # === 게임 / 기록 ===

    def _on_game_selected(self, game: str):
        if self.session.is_running or game == self.selected_game:
            return
        self.selected_game = game
        self.settings.set('selected_game', game)
        self.session.reset()
        self._refresh_history()
        self._render_session()
        logger.info(f"Selected game: {game}")

    def _refresh_history(self):
        records = self.repository.get_records(self.selected_game)
        sample_size = APP_CONFIG['HISTORY_SAMPLE_SIZE']
        self.history_table.set_records(records[:sample_size])
        self.history_note.setText(f"* 共 {len(records)} 期，模型输入使用最近 {min(len(records), sample_size)} 期")

    # === 분석 실행 ===

    def run_analysis(self):
        """예측 분석 실행"""
        if not self.session.start():
            return
        params = self.config_panel.get_parameters()
        self.settings.set_model_parameters(params)
        self.config_panel.set_running(True)
        self.game_tabs.setEnabled(False)
        self._render_session()

        records = self.repository.get_records(self.selected_game)
        self.prediction_manager.request_prediction(self.selected_game, records, params)

    def _finish_running(self):
        self.config_panel.set_running(False)
        self.game_tabs.setEnabled(True)

    def _on_prediction_ready(self, result: PredictionResult):
        if not self.session.is_running:
            return
        self.session.succeed(result)
        self._finish_running()
        self._render_session()

    def _on_prediction_error(self, message: str):
        if not self.session.is_running:
            return
        self.session.fail(message)
        self._finish_running()
        self._render_session()

    def _clear_results(self):
        while self.results_layout.count():
            child = self.results_layout.takeAt(0)
            if child.widget():
                child.widget().deleteLater()

    def _render_session(self):
        """세션 상태에 따라 결과 영역 다시 그리기"""
        self._clear_results()
        state = self.session.state

        if state is AnalysisState.RUNNING:
            params = self.config_panel.get_parameters()
            label = QLabel(
                "正在进行深度运算...\n\n"
                f"Training LSTM Neural Network ({params.training_epochs} epochs)\n"
                f"Running Monte Carlo Simulation ({params.simulation_iterations} iterations)\n"
                "Analyzing Deviation & CRF Dependencies"
            )
            label.setObjectName("placeholderLabel")
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            self.results_layout.addWidget(label)
        elif state is AnalysisState.SUCCEEDED and self.session.result is not None:
            self.results_layout.addWidget(PredictionResultView(self.session.result))
        else:
            if state is AnalysisState.FAILED:
                error_label = QLabel(f"⚠️ {self.session.error}")
                error_label.setObjectName("errorLabel")
                error_label.setWordWrap(True)
                self.results_layout.addWidget(error_label)
            spec = get_game_spec(self.selected_game)
            placeholder = QLabel(f"【{spec.label}】{PLACEHOLDER_TEXT}")
            placeholder.setObjectName("placeholderLabel")
            placeholder.setAlignment(Qt.AlignmentFlag.AlignCenter)
            placeholder.setWordWrap(True)
            self.results_layout.addWidget(placeholder)

    # === 다이얼로그 ===

    def _show_statistics(self):
        dialog = StatisticsDialog(self.repository, self.selected_game, self)
        dialog.exec()

    def _show_data_manager(self):
        dialog = ExportImportDialog(self.repository, self.selected_game, self.session.result, self)
        dialog.exec()
        self._refresh_history()

    def closeEvent(self, event: QCloseEvent):
        """종료 시 워커 정리 및 설정 저장"""
        self.prediction_manager.shutdown()
        self.settings.set_model_parameters(self.config_panel.get_parameters())
        self.settings.save()
        event.accept()
