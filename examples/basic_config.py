"""Basic example: load settings from a bucket and follow changes."""

import json
import time

from remote_config import ConfigurationSource, InMemoryStore, on_change


def create_example_config(store: InMemoryStore, version: str) -> None:
    """Upload an example settings.json to the store."""
    config = {
        "name": "MyApplication",
        "version": version,
        "database": {"host": "db.example.com", "port": 5432},
        "server": {"host": "0.0.0.0", "port": 8080, "workers": 4},
        "features": {"new_dashboard": True},
    }
    store.put("example-config", "settings.json", json.dumps(config, indent=2))
    print(f"Uploaded settings.json v{version}")


def main():
    # Swap in S3Store() (or omit the store argument) to read a real bucket
    store = InMemoryStore()
    create_example_config(store, "1.0.0")

    source = ConfigurationSource("example-config", "settings.json", reload_after=0.5)

    with source.build(store) as provider:

        def on_settings_changed():
            print(f"Configuration changed: version is now {provider.get('version')}")

        with on_change(provider.get_reload_token, on_settings_changed):
            provider.load()
            print(f"Connecting to database at {provider['database:host']}:{provider['database:port']}")

            create_example_config(store, "2.0.0")
            time.sleep(1.5)

            # A serverless handler would do this before returning
            provider.wait_for_reload_to_complete(timeout=5)


if __name__ == "__main__":
    main()
