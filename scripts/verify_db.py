import sqlite3
from lottoai.config import APP_CONFIG, GAME_SPECS

DB_PATH = APP_CONFIG['HISTORY_DB']

def verify():
    if not DB_PATH.exists():
        print(f"Database not found at {DB_PATH}")
        return

    try:
        with sqlite3.connect(DB_PATH) as conn:
            cursor = conn.cursor()

            cursor.execute("SELECT game, COUNT(*) FROM draws GROUP BY game")
            counts = dict(cursor.fetchall())

            for game, spec in GAME_SPECS.items():
                cursor.execute(
                    "SELECT issue, date, primary_numbers, secondary_numbers FROM draws "
                    "WHERE game = ? ORDER BY date DESC, issue DESC LIMIT 1", (game,)
                )
                last_row = cursor.fetchone()
                print(f"{spec.label} ({game}): {counts.get(game, 0)} rows")
                if last_row:
                    print(f"  Latest draw: {last_row}")

            unknown = set(counts) - set(GAME_SPECS)
            if unknown:
                print(f"Unknown game keys in DB: {sorted(unknown)}")
    except sqlite3.Error as e:
        print(f"Error reading database: {e}")

if __name__ == "__main__":
    verify()
