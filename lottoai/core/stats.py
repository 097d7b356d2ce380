from typing import Dict, Iterable, List, Tuple
from lottoai.config import APP_CONFIG
from lottoai.core.models import DrawRecord, LotteryStatistics, NumberCount, PairCount

TOP_PAIR_LIMIT: int = APP_CONFIG['TOP_PAIR_LIMIT']

# ============================================================
# 역대 추첨 번호 빈도 분석
# ============================================================
class FrequencyAnalyzer:
    """추첨 기록으로부터 번호별 출현 빈도와 동반 출현 쌍 계산

    매 호출마다 전체를 새로 계산하며 상태를 갖지 않는다.
    동률 정렬 기준: 빈도는 (횟수 내림차순, 번호 오름차순),
    쌍은 (횟수 내림차순, a 오름차순, b 오름차순).
    쌍 횟수는 두 번호를 모두 포함한 회차 수이므로 total_draws 를 넘지 않는다.
    번호의 범위 검증은 하지 않는다 (HistoryRepository 에서 수행).
    """

    def __init__(self, top_pair_limit: int = TOP_PAIR_LIMIT):
        self.top_pair_limit = top_pair_limit

    def compute_statistics(self, records: Iterable[DrawRecord]) -> LotteryStatistics:
        primary_counts: Dict[int, int] = {}
        secondary_counts: Dict[int, int] = {}
        pair_counts: Dict[Tuple[int, int], int] = {}
        total_draws = 0

        for record in records:
            total_draws += 1
            for num in record.primary_numbers:
                primary_counts[num] = primary_counts.get(num, 0) + 1

            if record.secondary_numbers:
                for num in record.secondary_numbers:
                    secondary_counts[num] = secondary_counts.get(num, 0) + 1

            # 한 회차에서 쌍은 한 번만 센다 (칠성채 중복 숫자, 같은 값끼리는 쌍이 아님)
            nums = sorted(set(record.primary_numbers))
            for i in range(len(nums)):
                for j in range(i + 1, len(nums)):
                    pair = (nums[i], nums[j])
                    pair_counts[pair] = pair_counts.get(pair, 0) + 1

        sorted_pairs = sorted(pair_counts.items(), key=lambda x: (-x[1], x[0]))

        return LotteryStatistics(
            primary_frequency=self._to_frequency(primary_counts),
            secondary_frequency=self._to_frequency(secondary_counts),
            top_primary_pairs=tuple(
                PairCount(a=a, b=b, count=count)
                for (a, b), count in sorted_pairs[:self.top_pair_limit]
            ),
            total_draws=total_draws,
        )

    @staticmethod
    def _to_frequency(counts: Dict[int, int]) -> Tuple[NumberCount, ...]:
        ordered: List[Tuple[int, int]] = sorted(counts.items(), key=lambda x: (-x[1], x[0]))
        return tuple(NumberCount(number=num, count=count) for num, count in ordered)


def compute_statistics(records: Iterable[DrawRecord]) -> LotteryStatistics:
    """기본 설정(TOP 12 쌍)으로 통계 계산"""
    return FrequencyAnalyzer().compute_statistics(records)
