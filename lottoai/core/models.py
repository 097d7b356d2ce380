"""
도메인 타입 정의
추첨 기록, 통계 결과, 예측 요청/응답
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from lottoai.config import DEFAULT_MODEL_PARAMETERS, PARAMETER_RANGES


# ============================================================
# 추첨 기록
# ============================================================
@dataclass(frozen=True)
class DrawRecord:
    """한 회차의 추첨 결과 (읽기 전용)"""
    issue: str
    date: str
    primary_numbers: Tuple[int, ...]
    secondary_numbers: Optional[Tuple[int, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, 'primary_numbers', tuple(self.primary_numbers))
        if self.secondary_numbers is not None:
            object.__setattr__(self, 'secondary_numbers', tuple(self.secondary_numbers))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'issue': self.issue,
            'date': self.date,
            'primary': list(self.primary_numbers),
        }
        if self.secondary_numbers is not None:
            data['secondary'] = list(self.secondary_numbers)
        return data


# ============================================================
# 통계 결과
# ============================================================
@dataclass(frozen=True)
class NumberCount:
    number: int
    count: int


@dataclass(frozen=True)
class PairCount:
    """정규화된 번호 쌍 (a < b)"""
    a: int
    b: int
    count: int


@dataclass(frozen=True)
class LotteryStatistics:
    primary_frequency: Tuple[NumberCount, ...] = ()
    secondary_frequency: Tuple[NumberCount, ...] = ()
    top_primary_pairs: Tuple[PairCount, ...] = ()
    total_draws: int = 0

    def hot_numbers(self, n: int = 10) -> Tuple[NumberCount, ...]:
        """가장 많이 나온 번호 N개"""
        return self.primary_frequency[:n]

    def cold_numbers(self, n: int = 10) -> Tuple[NumberCount, ...]:
        """가장 적게 나온 번호 N개 (출현한 번호 중)"""
        if n <= 0:
            return ()
        return self.primary_frequency[-n:]

    def is_empty(self) -> bool:
        return not (self.primary_frequency or self.secondary_frequency or self.top_primary_pairs)


# ============================================================
# 모델 파라미터 (외부 서비스로 그대로 전달)
# ============================================================
# 슬라이더 계산값 (0.1 * n) 의 부동소수 오차 허용치
_WEIGHT_EPSILON = 1e-9


def _positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a positive integer: {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{field_name} must be a whole number: {value}")
    if value < 1:
        raise ValueError(f"{field_name} must be a positive integer: {value}")
    return int(value)


@dataclass(frozen=True)
class ModelParameters:
    simulation_iterations: int = DEFAULT_MODEL_PARAMETERS['simulation_iterations']
    training_epochs: int = DEFAULT_MODEL_PARAMETERS['training_epochs']
    recent_data_weight: float = DEFAULT_MODEL_PARAMETERS['recent_data_weight']
    use_adjacency_model: bool = DEFAULT_MODEL_PARAMETERS['use_adjacency_model']

    def __post_init__(self):
        # 변환 전에 검증 (소수 반복 횟수, 하한 미만 가중치는 거부)
        iterations = _positive_int(self.simulation_iterations, 'simulation_iterations')
        epochs = _positive_int(self.training_epochs, 'training_epochs')
        low, high, _ = PARAMETER_RANGES['recent_data_weight']
        raw_weight = self.recent_data_weight
        if isinstance(raw_weight, bool) or not isinstance(raw_weight, (int, float)):
            raise ValueError(f"recent_data_weight must be a number: {raw_weight!r}")
        if not low - _WEIGHT_EPSILON <= raw_weight <= high + _WEIGHT_EPSILON:
            raise ValueError(f"recent_data_weight must be within [{low}, {high}]: {raw_weight}")
        weight = round(float(raw_weight), 2)
        object.__setattr__(self, 'simulation_iterations', iterations)
        object.__setattr__(self, 'training_epochs', epochs)
        object.__setattr__(self, 'recent_data_weight', weight)
        object.__setattr__(self, 'use_adjacency_model', bool(self.use_adjacency_model))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'simulation_iterations': self.simulation_iterations,
            'training_epochs': self.training_epochs,
            'recent_data_weight': self.recent_data_weight,
            'use_adjacency_model': self.use_adjacency_model,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ModelParameters':
        """저장된 설정에서 생성 (누락된 키는 기본값)"""
        merged = dict(DEFAULT_MODEL_PARAMETERS)
        if data:
            merged.update({k: v for k, v in data.items() if k in DEFAULT_MODEL_PARAMETERS})
        return cls(**merged)


# ============================================================
# 예측 요청/응답
# ============================================================
@dataclass(frozen=True)
class PredictionRequest:
    game: str
    history_sample: Tuple[DrawRecord, ...]
    parameters: ModelParameters


@dataclass(frozen=True)
class BallProbability:
    number: int
    probability_percent: float
    deviation_score: float


@dataclass(frozen=True)
class SuggestedCombination:
    primary: Tuple[int, ...]
    reasoning: str
    secondary: Optional[Tuple[int, ...]] = None


@dataclass
class PredictionResult:
    game: str
    analysis_summary: str
    primary_probabilities: List[BallProbability] = field(default_factory=list)
    secondary_probabilities: List[BallProbability] = field(default_factory=list)
    suggested_combinations: List[SuggestedCombination] = field(default_factory=list)

    def top_primary(self, n: int = 15) -> List[BallProbability]:
        return sorted(self.primary_probabilities, key=lambda p: p.probability_percent, reverse=True)[:n]

    def top_secondary(self, n: int = 8) -> List[BallProbability]:
        return sorted(self.secondary_probabilities, key=lambda p: p.probability_percent, reverse=True)[:n]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'game': self.game,
            'analysis_summary': self.analysis_summary,
            'primary_probabilities': [
                {'number': p.number, 'probability': p.probability_percent, 'deviation': p.deviation_score}
                for p in self.primary_probabilities
            ],
            'secondary_probabilities': [
                {'number': p.number, 'probability': p.probability_percent, 'deviation': p.deviation_score}
                for p in self.secondary_probabilities
            ],
            'suggested_combinations': [
                {
                    'primary': list(c.primary),
                    'secondary': list(c.secondary) if c.secondary is not None else None,
                    'reasoning': c.reasoning,
                }
                for c in self.suggested_combinations
            ],
        }
