from pathlib import Path
import os
import sys
from typing import Dict, Mapping, NamedTuple, Optional, Tuple

# ============================================================
# PyInstaller 번들 경로 처리
# ============================================================
def _get_base_path() -> Path:
    """PyInstaller 번들 또는 개발 환경의 기본 경로 반환"""
    if getattr(sys, 'frozen', False):
        return Path(sys._MEIPASS) / "lottoai"
    return Path(__file__).resolve().parent

DATA_HOME = Path.home() / ".lotto_analyst"

# ============================================================
# 상수 정의
# ============================================================
APP_CONFIG = {
    'APP_NAME': '彩票预测分析师',
    'VERSION': '1.2',
    'WINDOW_SIZE': (1180, 860),
    'SETTINGS_FILE': DATA_HOME / "settings.json",
    'HISTORY_DB': DATA_HOME / "lottery_history.db",
    'SAMPLE_HISTORY_FILE': _get_base_path() / "data" / "sample_history.json",
    'HISTORY_SAMPLE_SIZE': 50,
    'TOP_PAIR_LIMIT': 12,
    'API_TIMEOUT': 60,
    'GEMINI_MODEL': 'gemini-3-flash-preview',
    'GEMINI_ENDPOINT': 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent',
    'GEMINI_TEMPERATURE': 0.1,
}


# ============================================================
# 게임 정의 (번호 풀 구성)
# ============================================================
class PoolSpec(NamedTuple):
    min_number: int
    max_number: int
    pick: int


class GameSpec(NamedTuple):
    key: str
    label: str
    primary: PoolSpec
    secondary: Optional[PoolSpec]
    allow_duplicates: bool
    rule_text: str


GAME_SPECS: Dict[str, GameSpec] = {
    'DALETOU': GameSpec(
        key='DALETOU', label='大乐透',
        primary=PoolSpec(1, 35, 5), secondary=PoolSpec(1, 12, 2),
        allow_duplicates=False,
        rule_text='大乐透: 前区1-35 (选5), 后区1-12 (选2)',
    ),
    'SSQ': GameSpec(
        key='SSQ', label='双色球',
        primary=PoolSpec(1, 33, 6), secondary=PoolSpec(1, 16, 1),
        allow_duplicates=False,
        rule_text='双色球: 红球1-33 (选6), 蓝球1-16 (选1)',
    ),
    'HAPPY8': GameSpec(
        key='HAPPY8', label='快乐八',
        primary=PoolSpec(1, 80, 20), secondary=None,
        allow_duplicates=False,
        rule_text='快乐八: 1-80 (选出概率最高的20个)',
    ),
    'QXC': GameSpec(
        key='QXC', label='七星彩',
        primary=PoolSpec(0, 9, 7), secondary=None,
        allow_duplicates=True,
        rule_text='七星彩: 0-9 (分析每一位的分布)',
    ),
}

DEFAULT_GAME = 'SSQ'


def get_game_spec(game: str) -> GameSpec:
    """게임 키로 GameSpec 조회 (알 수 없는 키는 KeyError)"""
    try:
        return GAME_SPECS[game]
    except KeyError:
        raise KeyError(f"Unknown game: {game}") from None


# ============================================================
# 모델 파라미터 (UI 슬라이더 범위)
# ============================================================
DEFAULT_MODEL_PARAMETERS = {
    'simulation_iterations': 10000,
    'training_epochs': 1000,
    'recent_data_weight': 0.7,
    'use_adjacency_model': True,
}

# (min, max, step)
PARAMETER_RANGES: Dict[str, Tuple[float, float, float]] = {
    'simulation_iterations': (1000, 50000, 1000),
    'training_epochs': (100, 10000, 100),
    'recent_data_weight': (0.1, 1.0, 0.1),
}


# ============================================================
# 예측 서비스 설정 (환경변수는 앱 시작 시 한 번만 읽음)
# ============================================================
class PredictionServiceConfig(NamedTuple):
    api_key: str
    model: str = APP_CONFIG['GEMINI_MODEL']
    endpoint: str = APP_CONFIG['GEMINI_ENDPOINT']
    timeout: float = APP_CONFIG['API_TIMEOUT']
    temperature: float = APP_CONFIG['GEMINI_TEMPERATURE']
    history_sample_size: int = APP_CONFIG['HISTORY_SAMPLE_SIZE']


def load_service_config(environ: Optional[Mapping[str, str]] = None) -> PredictionServiceConfig:
    """환경변수에서 예측 서비스 설정 생성 (키가 없으면 빈 문자열)"""
    env = os.environ if environ is None else environ
    api_key = env.get('GEMINI_API_KEY') or env.get('API_KEY') or ''
    model = env.get('LOTTOAI_GEMINI_MODEL') or APP_CONFIG['GEMINI_MODEL']
    return PredictionServiceConfig(api_key=api_key.strip(), model=model)


BALL_COLORS = {
    'primary': {'bg': '#DC2626', 'text': 'white', 'gradient': '#F87171'},
    'secondary': {'bg': '#2563EB', 'text': 'white', 'gradient': '#60A5FA'},
}

THEMES = {
    'light': {
        'name': '浅色',
        'bg_primary': '#FFFFFF',
        'bg_secondary': '#F7F9FC',
        'bg_tertiary': '#EDF1F7',
        'bg_hover': '#E4E9F2',
        'text_primary': '#222B45',
        'text_secondary': '#8F9BB3',
        'text_muted': '#C5CEE0',
        'border': '#E4E9F2',
        'border_light': '#EDF1F7',
        'accent': '#7C3AED',
        'accent_hover': '#6D28D9',
        'accent_light': '#EDE9FE',
        'success': '#00D68F',
        'success_light': '#DBF9ED',
        'warning': '#FFAA00',
        'warning_light': '#FFF5DB',
        'danger': '#FF3D71',
        'danger_light': '#FFD6D9',
        'neutral': '#8F9BB3',
        'card_bg': '#FFFFFF',
        'result_row_alt': '#F7F9FC',
    },
    'dark': {
        'name': '深色',
        'bg_primary': '#111827',
        'bg_secondary': '#1F2937',
        'bg_tertiary': '#374151',
        'bg_hover': '#4B5563',
        'text_primary': '#F9FAFB',
        'text_secondary': '#9CA3AF',
        'text_muted': '#6B7280',
        'border': '#374151',
        'border_light': '#1F2937',
        'accent': '#8B5CF6',
        'accent_hover': '#A78BFA',
        'accent_light': '#2E1065',
        'success': '#10B981',
        'success_light': '#064E3B',
        'warning': '#F59E0B',
        'warning_light': '#4D3400',
        'danger': '#EF4444',
        'danger_light': '#450A0A',
        'neutral': '#6B7280',
        'card_bg': '#1F2937',
        'result_row_alt': '#18212F',
    }
}
