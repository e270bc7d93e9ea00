"""Rankcast v1.0 — CLI entry point."""

import logging
import sys
from datetime import date
from pathlib import Path

from rankcast import generate_report, generate_schedule_report, predict, schedule_for_history
from rankcast.pipeline import load_history

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    path = Path(sys.argv[1] if len(sys.argv) > 1 else "test_data.json")

    print(generate_report(predict(path)))
    if path.exists():
        print()
        print(generate_schedule_report(schedule_for_history(load_history(path), date.today())))
