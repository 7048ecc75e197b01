"""Create an evidence tag.

Usage:
    python -m evidence_engine.scripts.create_tag --name "Mentoring" [--color #6f42c1] [--description TEXT] [--created-by ID]
"""

from __future__ import annotations

import argparse
import sys

from evidence_engine.db.session import SessionLocal
from evidence_engine.errors import ConflictError, ValidationError
from evidence_engine.services.tag_registry import create_tag


def main() -> None:
    parser = argparse.ArgumentParser(description="Create an evidence tag")
    parser.add_argument("--name", required=True, help="Tag name (required, unique ignoring case)")
    parser.add_argument("--color", default=None, help="Hex color like #007bff")
    parser.add_argument("--description", default=None, help="What the tag means")
    parser.add_argument(
        "--created-by",
        type=int,
        default=None,
        help="ID of the user creating the tag",
    )
    args = parser.parse_args()

    name = args.name.strip()
    if not name:
        print("Error: tag name cannot be empty.")
        sys.exit(1)

    db = SessionLocal()
    try:
        try:
            tag = create_tag(
                db,
                name,
                color=args.color,
                description=args.description.strip() if args.description else None,
                creator=args.created_by,
            )
        except (ConflictError, ValidationError) as exc:
            print(f"Error: {exc.message}")
            sys.exit(1)
        print(f"Tag '{tag.name}' created successfully (id={tag.id}).")
    finally:
        db.close()


if __name__ == "__main__":
    main()
