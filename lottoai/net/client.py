from typing import List, Optional
from PyQt6.QtCore import QThread, pyqtSignal, QObject
from lottoai.utils import logger
from lottoai.core.models import DrawRecord, ModelParameters
from lottoai.net.gemini import GeminiPredictionService, PredictionError, USER_ERROR_MESSAGE

# ============================================================
# 예측 워커 (QThread 기반)
# ============================================================
class PredictionWorker(QThread):
    """예측 서비스를 백그라운드에서 호출하는 워커 스레드"""
    finished = pyqtSignal(object)  # PredictionResult
    error = pyqtSignal(str)

    def __init__(self, service: GeminiPredictionService, game: str,
                 history: List[DrawRecord], parameters: ModelParameters):
        super().__init__()
        self.service = service
        self.game = game
        self.history = history
        self.parameters = parameters
        self._is_cancelled = False

    def cancel(self):
        self._is_cancelled = True

    def run(self):
        try:
            request = self.service.build_request(self.game, self.history, self.parameters)
            result = self.service.predict(request)
        except PredictionError as e:
            logger.error(f"Prediction failed for {self.game}: {type(e).__name__}: {e}")
            if not self._is_cancelled:
                self.error.emit(e.user_message)
            return
        except Exception as e:
            logger.error(f"Unknown error during prediction for {self.game}: {e}")
            if not self._is_cancelled:
                self.error.emit(USER_ERROR_MESSAGE)
            return

        if self._is_cancelled:
            logger.info(f"Prediction for {self.game} discarded (cancelled)")
            return
        self.finished.emit(result)


# ============================================================
# 예측 매니저 (QThread 워커 관리)
# ============================================================
class PredictionManager(QObject):
    """예측 요청 관리자 (한 번에 하나의 요청만 유효)"""

    predictionReady = pyqtSignal(object)
    errorOccurred = pyqtSignal(str)

    def __init__(self, service: GeminiPredictionService, parent=None):
        super().__init__(parent)
        self.service = service
        self._current_worker: Optional[PredictionWorker] = None
        self._retired: List[PredictionWorker] = []

    def request_prediction(self, game: str, history: List[DrawRecord], parameters: ModelParameters):
        """예측 요청 (진행 중인 요청은 결과를 버림)"""
        self.cancel()

        worker = PredictionWorker(self.service, game, history, parameters)
        worker.finished.connect(self.predictionReady.emit)
        worker.error.connect(self.errorOccurred.emit)
        self._current_worker = worker
        worker.start()

    def is_running(self) -> bool:
        return bool(self._current_worker and self._current_worker.isRunning())

    def cancel(self):
        """요청 취소 (HTTP 호출은 중단할 수 없으므로 결과만 무시)"""
        if self._current_worker and self._current_worker.isRunning():
            self._current_worker.cancel()
            # 스레드 종료 전 객체가 해제되지 않도록 참조 유지
            self._retired.append(self._current_worker)
        self._retired = [w for w in self._retired if w.isRunning()]
        self._current_worker = None

    def shutdown(self, timeout_ms: int = 3000) -> bool:
        """종료 시 모든 워커 취소 후 최대 timeout_ms 까지 대기 (모두 끝났으면 True)"""
        workers = list(self._retired)
        if self._current_worker is not None:
            workers.append(self._current_worker)
        for worker in workers:
            worker.cancel()

        stopped = True
        for worker in workers:
            if worker.isRunning() and not worker.wait(timeout_ms):
                stopped = False

        self._retired = [w for w in workers if w.isRunning()]
        self._current_worker = None
        if not stopped:
            logger.warning(f"{len(self._retired)} prediction worker(s) still running at shutdown")
        return stopped
