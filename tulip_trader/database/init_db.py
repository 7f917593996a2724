"""Create the rankings tables."""

from tulip_trader.config import get_config
from tulip_trader.database.operations import init_database

if __name__ == "__main__":
    url = get_config().database_url
    print(f"Initializing rankings database at {url}...")
    init_database(url)
    print("Database initialized successfully!")
