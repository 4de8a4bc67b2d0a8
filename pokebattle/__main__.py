"""Allow ``python -m pokebattle``."""

from pokebattle.cli.app import app

if __name__ == "__main__":
    app()
