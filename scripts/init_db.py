"""Create the WeaveIt schema and report optional column support."""

from src.weaveit.config import load_config


def main() -> None:
    config = load_config()
    print(f"Database initialized at {config.database_url}.")
    if not config.schema_features.trial_expiry:
        print(
            "account.trial_expires_at is missing: trial expiry stays disabled "
            "until `alembic upgrade head` adds it."
        )
    config.engine.dispose()


if __name__ == "__main__":
    main()
