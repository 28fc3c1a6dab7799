#!/usr/bin/env python
"""Script to register an already-hosted photo in the Firebase photo records."""
from __future__ import annotations

import argparse

from pixelrelay.dependencies import get_photo_store
from pixelrelay.models import PhotoRecord


def main() -> None:
    parser = argparse.ArgumentParser(description="Add a photo record served by /get-photo")
    parser.add_argument("--photo_url", required=True)
    parser.add_argument("--username", default="")
    parser.add_argument("--title", default="")
    args = parser.parse_args()

    record = PhotoRecord(photo_url=args.photo_url, username=args.username, title=args.title)
    photo_id = get_photo_store().add_photo(record)
    print(f"Created photo record {photo_id}:")
    print(record.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
