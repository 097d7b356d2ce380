import json
from pathlib import Path
from typing import Any, Dict, Optional
from ..config import APP_CONFIG, DEFAULT_GAME, DEFAULT_MODEL_PARAMETERS, GAME_SPECS
from ..core.models import ModelParameters
from ..utils import logger

class SettingsManager:
    """사용자 설정 관리자 (테마, 선택한 게임, 모델 파라미터)"""

    def __init__(self, settings_file: Optional[Path] = None):
        self.settings_file = settings_file or APP_CONFIG['SETTINGS_FILE']
        self.settings: Dict[str, Any] = {
            'theme': 'dark',
            'selected_game': DEFAULT_GAME,
            'model_parameters': dict(DEFAULT_MODEL_PARAMETERS),
        }
        if self.settings_file:
            self._load()

    def _load(self):
        try:
            if self.settings_file.exists():
                with open(self.settings_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                    # 병합 (누락된 키 보존)
                    params = data.pop('model_parameters', None)
                    self.settings.update(data)
                    if isinstance(params, dict):
                        self.settings['model_parameters'].update(params)
                logger.info("Settings loaded")
        except Exception as e:
            logger.error(f"Failed to load settings: {e}")

    def save(self) -> bool:
        if not self.settings_file:
            return False
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, ensure_ascii=False, indent=2)
            logger.info("Settings saved")
            return True
        except Exception as e:
            logger.error(f"Failed to save settings: {e}")
            return False

    def get(self, key: str, default=None):
        return self.settings.get(key, default)

    def set(self, key: str, value: Any):
        self.settings[key] = value

    def get_selected_game(self) -> str:
        game = self.settings.get('selected_game')
        return game if game in GAME_SPECS else DEFAULT_GAME

    def get_model_parameters(self) -> ModelParameters:
        try:
            return ModelParameters.from_dict(self.settings.get('model_parameters'))
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid saved model parameters, using defaults: {e}")
            return ModelParameters()

    def set_model_parameters(self, params: ModelParameters):
        self.settings['model_parameters'] = params.to_dict()
