"""Create the marketplace tables and seed the default categories.

Usage: ``python init_db.py`` with POSTGRES_URL set (a .env file works too).
"""
from marketplace import crud
from marketplace.config import Settings
from marketplace.db import Base, make_engine, make_session_factory
import marketplace.models  # noqa: F401


def main():
    settings = Settings.from_env()
    engine = make_engine(settings.database_url, settings.db_pool_size, settings.db_max_overflow)
    Base.metadata.create_all(bind=engine)
    print("Tables created.")

    session = make_session_factory(engine)()
    try:
        added = crud.seed_categories(session)
    finally:
        session.close()
        engine.dispose()
    print(f"Seeded {added} new categories.")


if __name__ == "__main__":
    main()
