import sys
from lottoai.config import DEFAULT_GAME, get_game_spec
from lottoai.core.stats import compute_statistics
from lottoai.data.history import HistoryRepository

game = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_GAME
spec = get_game_spec(game)

repo = HistoryRepository()
stats = compute_statistics(repo.get_records(game))
print(f'{spec.label}: {stats.total_draws} draws (source: {repo.source})')
print(f'Hot numbers (top 5): {[(i.number, i.count) for i in stats.hot_numbers(5)]}')
if stats.secondary_frequency:
    print(f'Secondary (top 5): {[(i.number, i.count) for i in stats.secondary_frequency[:5]]}')
for rank, pair in enumerate(stats.top_primary_pairs, 1):
    print(f'  #{rank:2d} {pair.a:2d}-{pair.b:2d}: {pair.count}')
