import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from motorhub.config import get_settings
from motorhub.database import create_db_engine, init_schema


def main() -> None:
    engine = create_db_engine(get_settings().database_url)
    try:
        init_schema(engine)
    finally:
        engine.dispose()
    print("Database initialized with the Motorhub schema and haversine_km function.")


if __name__ == "__main__":
    main()
