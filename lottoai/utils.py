import sys
import logging
from typing import Dict
from .config import THEMES

# ============================================================
# 로깅 설정
# ============================================================
def setup_logging():
    """로깅 시스템 초기화"""
    logger = logging.getLogger("LottoAnalyst")
    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # 콘솔 핸들러 (중복 등록 방지)
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger

logger = setup_logging()

# ============================================================
# 테마 시스템
# ============================================================
class ThemeManager:
    """테마 관리자"""
    _current_theme = 'dark'
    _listeners = []

    @classmethod
    def get_theme(cls) -> Dict:
        return THEMES[cls._current_theme]

    @classmethod
    def get_theme_name(cls) -> str:
        return cls._current_theme

    @classmethod
    def set_theme(cls, name: str):
        if name not in THEMES:
            logger.warning(f"Unknown theme ignored: {name}")
            return
        if name == cls._current_theme:
            return
        cls._current_theme = name
        logger.info(f"Theme changed to: {cls._current_theme}")
        for listener in cls._listeners:
            listener()

    @classmethod
    def toggle_theme(cls):
        cls.set_theme('dark' if cls._current_theme == 'light' else 'light')

    @classmethod
    def add_listener(cls, callback):
        cls._listeners.append(callback)

    @classmethod
    def get_stylesheet(cls) -> str:
        t = cls.get_theme()

        return f"""
            /* ===== 기본 위젯 ===== */
            QWidget {{
                background-color: {t['bg_primary']};
                font-family: 'Microsoft YaHei', 'PingFang SC', 'Segoe UI', sans-serif;
                color: {t['text_primary']};
            }}

            /* ===== 그룹박스 ===== */
            QGroupBox {{
                background-color: {t['bg_secondary']};
                border: 1px solid {t['border']};
                border-radius: 12px;
                margin-top: 12px;
                padding-top: 8px;
                font-size: 15px;
                font-weight: bold;
            }}
            QGroupBox::title {{
                subcontrol-origin: margin;
                subcontrol-position: top left;
                padding: 2px 12px;
                left: 12px;
                background-color: {t['accent']};
                color: white;
                border-radius: 4px;
            }}

            /* ===== 슬라이더 ===== */
            QSlider::groove:horizontal {{
                height: 6px;
                background: {t['bg_tertiary']};
                border-radius: 3px;
            }}
            QSlider::handle:horizontal {{
                background: {t['accent']};
                width: 16px;
                margin: -6px 0;
                border-radius: 8px;
            }}
            QSlider::sub-page:horizontal {{
                background: {t['accent']};
                border-radius: 3px;
            }}

            /* ===== 체크박스 ===== */
            QCheckBox {{
                spacing: 10px;
                font-size: 14px;
                color: {t['text_secondary']};
            }}

            /* ===== 버튼 ===== */
            QPushButton {{
                border-radius: 8px;
                font-size: 14px;
                font-weight: bold;
                color: #FFFFFF;
                border: none;
                padding: 8px 16px;
                background-color: {t['bg_tertiary']};
            }}
            QPushButton#runBtn {{
                background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                    stop:0 #2563EB, stop:1 {t['accent']});
                font-size: 16px;
                padding: 14px;
            }}
            QPushButton#runBtn:hover {{
                background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                    stop:0 {t['accent']}, stop:1 #2563EB);
            }}
            QPushButton#gameTab {{
                background-color: {t['bg_secondary']};
                color: {t['text_secondary']};
                border-radius: 6px;
            }}
            QPushButton#gameTab:checked {{
                background-color: #2563EB;
                color: white;
            }}
            QPushButton:disabled {{
                background-color: {t['bg_tertiary']};
                color: {t['text_muted']};
            }}

            /* ===== 테이블 ===== */
            QTableWidget {{
                background-color: {t['bg_secondary']};
                border: 1px solid {t['border']};
                border-radius: 8px;
                gridline-color: {t['border_light']};
            }}
            QHeaderView::section {{
                background-color: {t['bg_tertiary']};
                color: {t['text_primary']};
                border: none;
                padding: 6px;
                font-weight: bold;
            }}

            /* ===== 스크롤 영역 ===== */
            QScrollArea {{
                background-color: {t['bg_secondary']};
                border: 1px solid {t['border']};
                border-radius: 12px;
            }}

            /* ===== 툴팁 ===== */
            QToolTip {{
                background-color: {t['bg_tertiary']};
                color: {t['text_primary']};
                border: 1px solid {t['border']};
                padding: 6px 10px;
                border-radius: 6px;
            }}

            QLabel#placeholderLabel {{
                color: {t['text_muted']};
                font-size: 15px;
                padding: 50px;
            }}
            QLabel#errorLabel {{
                background-color: {t['danger_light']};
                color: {t['danger']};
                border: 1px solid {t['danger']};
                border-radius: 10px;
                padding: 12px;
            }}
            QFrame#card {{
                background-color: {t['card_bg']};
                border: 1px solid {t['border']};
                border-radius: 12px;
            }}
        """
