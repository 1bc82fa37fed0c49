#!/usr/bin/env python3
"""Fill an account's hotel with demo rooms, guests, bookings, payments and locks."""
import argparse
import logging
import random
import sys

from common.database import Base, SessionLocal, engine
from common.demo_data import DemoDataError, seed_demo_data
from common.models import User


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email", help="Account that should own the demo data")
    parser.add_argument("--rooms", type=int, default=20)
    parser.add_argument("--guests", type=int, default=30)
    parser.add_argument("--locks", type=int, default=10)
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible data")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == args.email.lower()).first()
        if not user:
            print(f"No account registered for {args.email}", file=sys.stderr)
            return 1
        summary = seed_demo_data(
            db,
            user,
            rooms_count=args.rooms,
            guests_count=args.guests,
            locks_count=args.locks,
            rng=random.Random(args.seed),
        )
    except DemoDataError as exc:
        print(exc, file=sys.stderr)
        return 1
    finally:
        db.close()

    for key, value in summary.items():
        print(f"{key}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
