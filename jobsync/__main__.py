"""Allow running JobSync with `python -m jobsync`."""

from .cli import run

if __name__ == "__main__":
    run()
