#!/usr/bin/env python3
"""
Populate the similarity index from a JSON movie catalog.

Each catalog entry is an object with item_id (TMDB id), title, year, genres,
rating, runtime, overview and traits (axis -> 0..1). The embedded text is
title, genres and overview; the rest is stored as payload/metadata for
filtering and for the surprise and refinement stages.

Requires:
  - OPENAI_API_KEY in env (or --openai-key)
  - Qdrant: QDRANT_URL (default ":memory:", which only lives for this run)
  - Pinecone: PINECONE_API_KEY and PINECONE_INDEX_NAME / PINECONE_INDEX_HOST

Usage:
  From repo root:
    python -m server.scripts.populate_index --catalog data/catalog_sample.json
    python -m server.scripts.populate_index --target pinecone --catalog movies.json --limit 500
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

from pinecone import Pinecone

from engine.models.profile import AXES

from ..services.embedding_client import OpenAIEmbedder
from ..services.qdrant_index import DEFAULT_COLLECTION, QdrantSimilarityIndex

PINECONE_BATCH = 100


def embed_text(item: Dict[str, Any]) -> str:
    genres = ", ".join(item.get("genres") or [])
    year = f" ({item['year']})" if item.get("year") else ""
    return f"{item.get('title', '')}{year}. {genres}. {item.get('overview', '')}".strip()


def normalize_item(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Keep catalog fields the engine reads; traits limited to known axes."""
    item_id = raw.get("item_id") or raw.get("id")
    if item_id is None:
        raise ValueError(f"Catalog entry has no item_id: {raw.get('title')!r}")
    traits = {a: float(v) for a, v in (raw.get("traits") or {}).items() if a in AXES}
    return {
        "item_id": str(item_id),
        "title": raw.get("title"),
        "year": raw.get("year"),
        "genres": list(raw.get("genres") or []),
        "rating": raw.get("rating"),
        "runtime": raw.get("runtime"),
        "overview": raw.get("overview") or "",
        "traits": traits,
    }


def pinecone_metadata(item: Dict[str, Any]) -> Dict[str, Any]:
    """Pinecone metadata must be flat: traits become trait_<axis>, nulls are dropped."""
    md = {k: v for k, v in item.items() if k not in ("traits", "overview") and v is not None}
    for axis, value in item["traits"].items():
        md[f"trait_{axis}"] = value
    return md


async def populate_qdrant(items: List[Dict[str, Any]], vectors: List[List[float]], args) -> int:
    index = QdrantSimilarityIndex(
        embedder=args.embedder,
        url=args.qdrant_url,
        collection=args.collection,
    )
    await index.ensure_collection(recreate=args.recreate)
    return await index.upsert_items(items, vectors)


def populate_pinecone(items: List[Dict[str, Any]], vectors: List[List[float]], args) -> int:
    pc = Pinecone(api_key=args.pinecone_key)
    if args.index_host:
        index = pc.Index(host=args.index_host)
    else:
        index = pc.Index(args.index_name)
    written = 0
    for i in range(0, len(items), PINECONE_BATCH):
        batch = [
            {"id": item["item_id"], "values": vector, "metadata": pinecone_metadata(item)}
            for item, vector in zip(items[i:i + PINECONE_BATCH], vectors[i:i + PINECONE_BATCH])
        ]
        index.upsert(vectors=batch, namespace=args.namespace)
        written += len(batch)
        print(f"  upserted {written}/{len(items)}")
    return written


def main() -> int:
    parser = argparse.ArgumentParser(description="Populate the similarity index from a JSON catalog")
    parser.add_argument("--catalog", type=Path, required=True, help="JSON list of catalog items")
    parser.add_argument("--target", choices=("qdrant", "pinecone"), default="qdrant")
    parser.add_argument("--limit", type=int, default=None, help="Max items to process (default: all)")
    parser.add_argument("--openai-key", default=None)
    parser.add_argument("--qdrant-url", default=os.getenv("QDRANT_URL") or ":memory:")
    parser.add_argument("--collection", default=os.getenv("QDRANT_COLLECTION", DEFAULT_COLLECTION))
    parser.add_argument("--recreate", action="store_true", help="Drop and recreate the Qdrant collection")
    parser.add_argument("--pinecone-key", default=os.getenv("PINECONE_API_KEY"))
    parser.add_argument("--index-name", default=os.getenv("PINECONE_INDEX_NAME", "whatnext-movies"))
    parser.add_argument("--index-host", default=os.getenv("PINECONE_INDEX_HOST"))
    parser.add_argument("--namespace", default=os.getenv("PINECONE_NAMESPACE", ""))
    args = parser.parse_args()

    if not args.catalog.is_file():
        print(f"Catalog not found: {args.catalog}", file=sys.stderr)
        return 1
    with open(args.catalog) as f:
        raw_items = json.load(f)
    if args.limit:
        raw_items = raw_items[: args.limit]
    try:
        items = [normalize_item(r) for r in raw_items]
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    print(f"Loaded {len(items)} items from {args.catalog}")

    try:
        args.embedder = OpenAIEmbedder(api_key=args.openai_key)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    vectors = args.embedder.embed_batch([embed_text(item) for item in items])
    print(f"Embedded {len(vectors)} items with {args.embedder.model}")

    if args.target == "pinecone":
        if not args.pinecone_key:
            print("PINECONE_API_KEY is required for --target pinecone", file=sys.stderr)
            return 1
        written = populate_pinecone(items, vectors, args)
    else:
        if args.qdrant_url == ":memory:":
            print("QDRANT_URL not set: writing to an in-memory collection that ends with this process")
            args.qdrant_url = None
        written = asyncio.run(populate_qdrant(items, vectors, args))
    print(f"Done: {written} items written to {args.target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
