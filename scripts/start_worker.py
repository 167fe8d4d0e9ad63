#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker for the KANVA background jobs.
#
# Usage:
#   # Worker only (jobs queued from the admin endpoints)
#   python scripts/start_worker.py
#
#   # Worker plus embedded beat scheduler (single-instance deployments)
#   python scripts/start_worker.py --beat
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app worker -Q default,notifications --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app


def main():
    """Start the Celery worker."""
    parser = argparse.ArgumentParser(description="Start the KANVA Celery worker")
    parser.add_argument("--beat", action="store_true", help="also run the periodic job scheduler")
    parser.add_argument("--concurrency", type=int, default=2, help="worker processes")
    args = parser.parse_args()

    print("=" * 60)
    print("KANVA Celery Worker")
    print("=" * 60)
    print()
    print(f"Queues: default, notifications | beat: {'on' if args.beat else 'off'}")
    print("Press Ctrl+C to stop")
    print()

    argv = [
        "worker",
        "--loglevel=info",
        f"--concurrency={args.concurrency}",
        "--queues=default,notifications",
    ]
    if args.beat:
        argv.append("--beat")

    celery_app.worker_main(argv)


if __name__ == "__main__":
    main()
