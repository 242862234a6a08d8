"""Module entrypoint for `python -m sheetsift`."""

from sheetsift.cli.app import main


if __name__ == "__main__":  # pragma: no cover - exercised via CLI tests
    main()
