from enum import Enum
from typing import Optional
from lottoai.core.models import PredictionResult
from lottoai.utils import logger


class AnalysisState(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


# ============================================================
# 분석 세션 상태 (idle -> running -> succeeded | failed)
# ============================================================
class AnalysisSession:
    """예측 요청 한 건의 진행 상태. 화면 계층이 소유한다."""

    def __init__(self):
        self.state = AnalysisState.IDLE
        self.result: Optional[PredictionResult] = None
        self.error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.state is AnalysisState.RUNNING

    def start(self) -> bool:
        """새 분석 시작 (이미 실행 중이면 False)"""
        if self.is_running:
            return False
        self.state = AnalysisState.RUNNING
        self.result = None
        self.error = None
        return True

    def succeed(self, result: PredictionResult):
        self._require_running('succeed')
        self.state = AnalysisState.SUCCEEDED
        self.result = result

    def fail(self, message: str):
        self._require_running('fail')
        self.state = AnalysisState.FAILED
        self.error = message

    def reset(self):
        self.state = AnalysisState.IDLE
        self.result = None
        self.error = None

    def _require_running(self, action: str):
        if not self.is_running:
            logger.error(f"Invalid session transition: {action} from {self.state.value}")
            raise RuntimeError(f"Cannot {action} analysis in state '{self.state.value}'")
