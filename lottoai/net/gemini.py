"""
Gemini 기반 예측 서비스
요청 페이로드를 프롬프트로 만들어 전송하고, 응답 JSON을 PredictionResult 로 검증/변환
"""
import json
from typing import Any, Dict, List, Optional, Sequence

import requests

from lottoai.config import GAME_SPECS, PredictionServiceConfig, get_game_spec
from lottoai.core.models import (
    BallProbability, DrawRecord, ModelParameters, PredictionRequest,
    PredictionResult, SuggestedCombination
)
from lottoai.utils import logger

USER_ERROR_MESSAGE = "分析失败，请检查 API Key 或重试。"


# ============================================================
# 오류 정의
# ============================================================
class PredictionError(Exception):
    """예측 서비스 호출 실패 (화면에는 user_message 하나만 노출)"""
    user_message = USER_ERROR_MESSAGE


class MissingCredentialError(PredictionError):
    pass


class ServiceUnavailableError(PredictionError):
    pass


class MalformedResponseError(PredictionError):
    pass


# ============================================================
# 응답 스키마 (Gemini responseSchema)
# ============================================================
_PROBABILITY_SCHEMA = {
    'type': 'OBJECT',
    'properties': {
        'number': {'type': 'NUMBER'},
        'probability': {'type': 'NUMBER', 'description': 'Probability percentage (0-100)'},
        'deviation': {'type': 'NUMBER', 'description': 'Statistical deviation score'},
    },
    'required': ['number', 'probability', 'deviation'],
}

_COMBINATION_SCHEMA = {
    'type': 'OBJECT',
    'properties': {
        'red': {'type': 'ARRAY', 'items': {'type': 'NUMBER'}},
        'blue': {'type': 'ARRAY', 'items': {'type': 'NUMBER'}},
        'reasoning': {'type': 'STRING'},
    },
    'required': ['red', 'reasoning'],
}

RESPONSE_SCHEMA = {
    'type': 'OBJECT',
    'properties': {
        'analysisSummary': {
            'type': 'STRING',
            'description': 'Brief summary of the analysis in Chinese, mentioning the models used '
                           '(LSTM, Monte Carlo, CRF) and data deviation findings.',
        },
        'redBallProbabilities': {'type': 'ARRAY', 'items': _PROBABILITY_SCHEMA},
        'blueBallProbabilities': {'type': 'ARRAY', 'items': _PROBABILITY_SCHEMA},
        'suggestedCombinations': {'type': 'ARRAY', 'items': _COMBINATION_SCHEMA},
    },
    'required': ['analysisSummary', 'redBallProbabilities', 'suggestedCombinations'],
}


# ============================================================
# 요청/프롬프트
# ============================================================
def build_request(game: str, history: Sequence[DrawRecord], parameters: ModelParameters,
                  sample_size: int = 50) -> PredictionRequest:
    """앞쪽(최신) sample_size 개 기록만 담은 요청 생성"""
    get_game_spec(game)
    return PredictionRequest(
        game=game,
        history_sample=tuple(history[:sample_size]),
        parameters=parameters,
    )


def format_history_line(record: DrawRecord) -> str:
    line = f"Issue {record.issue}: Red[{', '.join(str(n) for n in record.primary_numbers)}]"
    if record.secondary_numbers:
        line += f" Blue[{', '.join(str(n) for n in record.secondary_numbers)}]"
    return line


def build_prompt(request: PredictionRequest) -> str:
    spec = get_game_spec(request.game)
    params = request.parameters
    history_str = '\n'.join(format_history_line(r) for r in request.history_sample)
    rules = '\n'.join(f"    - {g.rule_text}" for g in GAME_SPECS.values())
    crf = '启用 CRF 模型' if params.use_adjacency_model else '忽略 CRF 模型'

    return f"""
    作为一名彩票数据科学家，请使用下面提供的历史开奖数据，对【{spec.label}】进行建模和预测。

    请按以下流程分析：

    1. **数据喂养**: 把历史数据作为训练集输入预测模型。
    2. **蒙特卡洛模拟**: 执行 {params.simulation_iterations} 次随机游走模拟，观察号码的收敛趋势和概率分布。
    3. **LSTM**: 训练 {params.training_epochs} 轮，捕捉时间序列中的非线性依赖，近期数据权重为 {params.recent_data_weight}，识别冷热号交替模式。
    4. **CRF (条件随机场)**: {crf}，分析号码之间的相邻依赖和转移概率。
    5. **偏差修正**: 计算近期数据相对理论概率的偏离度（标准差），并据此对预测结果加权修正。

    历史数据 (输入样本):
    {history_str}

    请输出下一期预测。号码规则:
{rules}

    请返回严格的JSON格式数据，包含：
    - 每个号码的出号概率 (0-100) 与偏离度。
    - 分析摘要，说明模型如何根据近期偏离度进行修正。
    - 3组高置信度推荐组合及推荐理由。
    """


# ============================================================
# 응답 검증
# ============================================================
def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponseError(f"{field} is not a number: {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise MalformedResponseError(f"{field} is not an integer: {value!r}")
    return int(value)


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponseError(f"{field} is not a number: {value!r}")
    return float(value)


def _parse_probabilities(items: Any, field: str) -> List[BallProbability]:
    if not isinstance(items, list):
        raise MalformedResponseError(f"{field} must be a list")
    result = []
    for item in items:
        if not isinstance(item, dict):
            raise MalformedResponseError(f"{field} entry must be an object")
        probability = _as_float(item.get('probability'), f"{field}.probability")
        if not 0 <= probability <= 100:
            raise MalformedResponseError(f"{field}.probability out of range: {probability}")
        result.append(BallProbability(
            number=_as_int(item.get('number'), f"{field}.number"),
            probability_percent=probability,
            deviation_score=_as_float(item.get('deviation'), f"{field}.deviation"),
        ))
    return result


def _parse_numbers(items: Any, field: str) -> List[int]:
    if not isinstance(items, list):
        raise MalformedResponseError(f"{field} must be a list")
    return [_as_int(n, field) for n in items]


def parse_prediction(game: str, payload: Any) -> PredictionResult:
    """모델 응답 JSON을 PredictionResult 로 변환 (형식 위반 시 MalformedResponseError)"""
    if not isinstance(payload, dict):
        raise MalformedResponseError("Response root must be an object")

    summary = payload.get('analysisSummary')
    if not isinstance(summary, str):
        raise MalformedResponseError("analysisSummary is missing")

    if 'redBallProbabilities' not in payload:
        raise MalformedResponseError("redBallProbabilities is missing")
    primary = _parse_probabilities(payload['redBallProbabilities'], 'redBallProbabilities')
    secondary = _parse_probabilities(payload.get('blueBallProbabilities') or [], 'blueBallProbabilities')

    combos_raw = payload.get('suggestedCombinations')
    if not isinstance(combos_raw, list):
        raise MalformedResponseError("suggestedCombinations is missing")

    combinations = []
    for combo in combos_raw:
        if not isinstance(combo, dict):
            raise MalformedResponseError("suggestedCombinations entry must be an object")
        reasoning = combo.get('reasoning')
        if not isinstance(reasoning, str):
            raise MalformedResponseError("suggestedCombinations.reasoning is missing")
        blue = combo.get('blue')
        combinations.append(SuggestedCombination(
            primary=tuple(_parse_numbers(combo.get('red'), 'suggestedCombinations.red')),
            secondary=tuple(_parse_numbers(blue, 'suggestedCombinations.blue')) if blue else None,
            reasoning=reasoning,
        ))

    return PredictionResult(
        game=game,
        analysis_summary=summary,
        primary_probabilities=primary,
        secondary_probabilities=secondary,
        suggested_combinations=combinations,
    )


# ============================================================
# 서비스 클라이언트
# ============================================================
class GeminiPredictionService:
    """Gemini generateContent REST API 호출"""

    def __init__(self, config: PredictionServiceConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def build_request(self, game: str, history: Sequence[DrawRecord],
                      parameters: ModelParameters) -> PredictionRequest:
        return build_request(game, history, parameters, self.config.history_sample_size)

    def _build_body(self, request: PredictionRequest) -> Dict[str, Any]:
        return {
            'contents': [{'role': 'user', 'parts': [{'text': build_prompt(request)}]}],
            'generationConfig': {
                'responseMimeType': 'application/json',
                'responseSchema': RESPONSE_SCHEMA,
                'temperature': self.config.temperature,
            },
        }

    @staticmethod
    def _extract_text(data: Any) -> str:
        try:
            parts = data['candidates'][0]['content']['parts']
            text = ''.join(p.get('text', '') for p in parts)
        except (KeyError, IndexError, TypeError, AttributeError):
            raise ServiceUnavailableError("No candidates in response") from None
        if not text.strip():
            raise ServiceUnavailableError("Empty response from model")
        return text

    def predict(self, request: PredictionRequest) -> PredictionResult:
        if not self.config.api_key:
            raise MissingCredentialError("API key is missing. Set GEMINI_API_KEY in the environment.")

        url = self.config.endpoint.format(model=self.config.model)
        logger.info(f"Requesting prediction for {request.game} "
                    f"({len(request.history_sample)} records, model={self.config.model})")

        try:
            response = self.session.post(
                url,
                headers={
                    'Content-Type': 'application/json',
                    'x-goog-api-key': self.config.api_key,
                },
                json=self._build_body(request),
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Network error during prediction: {e}")
            raise ServiceUnavailableError(str(e)) from e

        if response.status_code in (401, 403):
            logger.error(f"Credential rejected: HTTP {response.status_code}")
            raise MissingCredentialError(f"Credential rejected (HTTP {response.status_code})")
        if response.status_code != 200:
            logger.error(f"Prediction service error: HTTP {response.status_code} {response.text[:200]}")
            raise ServiceUnavailableError(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Response is not JSON. First 200 chars: {response.text[:200]}")
            raise MalformedResponseError("Response body is not JSON") from e

        text = self._extract_text(data)
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"Model output is not JSON: {text[:200]}")
            raise MalformedResponseError("Model output is not JSON") from e

        result = parse_prediction(request.game, payload)
        logger.info(f"Prediction received for {request.game}: "
                    f"{len(result.primary_probabilities)} primary, {len(result.suggested_combinations)} combinations")
        return result
