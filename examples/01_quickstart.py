#!/usr/bin/env python3
"""Example: Quickstart for doccodec

Minimal working example: encode a document into a BSON tree, print the
tree as Extended JSON, decode it back, and manage the document's _id.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install doccodec
"""
from __future__ import annotations

import datetime
import uuid

import doccodec
from doccodec.bsonio import BsonTreeSerializer
from doccodec.model import DBRef

DOCUMENT = {
    "name": "widget",
    "size": 3,
    "price": 9.5,
    "tags": ["blue", "small"],
    "owner": DBRef("users", 42),
    "created": datetime.datetime(2024, 1, 2, 3, 4, 5),
    "token": uuid.UUID("12345678-1234-5678-1234-567812345678"),
    "_id": 1,
}


def main() -> None:
    print(f"doccodec version: {doccodec.__version__}")

    # Step 1: Encode into a structured tree (the _id field moves to the front)
    tree = doccodec.encode(DOCUMENT)
    print(f"Encoded fields: {list(tree)}")

    # Step 2: Show the tree as Extended JSON
    print(BsonTreeSerializer().to_json(tree))

    # Step 3: Decode it back
    document = doccodec.decode(tree)
    print(f"Decoded owner: {document['owner']!r}")
    print(f"Round trip equal: {document == DOCUMENT}")

    # Step 4: Identifier helpers
    fresh = doccodec.generate_id({"name": "gadget"})
    print(f"Generated _id: {fresh['_id']}")
    print(f"_id as BSON value: {doccodec.get_id(document)!r}")


if __name__ == "__main__":
    main()
