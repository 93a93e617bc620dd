"""bindstore entry point.

Usage:
    python -m bindstore
"""

from bindstore.main import run

if __name__ == "__main__":
    run()
