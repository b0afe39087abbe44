"""Entry point for ``python -m percona_telemetry``."""

from percona_telemetry.cli import main

if __name__ == "__main__":
    main()
