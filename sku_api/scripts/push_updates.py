# Push a file of SKU updates to the update-by-sku endpoint in batches.
# Usage: python -m sku_api.scripts.push_updates updates.json [--chunk 50] [--url ...]
#        (.json = array of update objects, .csv = header row with field names)
# Requires: requests, python-dotenv

import os
import csv
import json
import argparse
import requests
from dotenv import load_dotenv

load_dotenv()

API_URL = os.getenv("SKU_API_URL", "http://localhost:8000/wc/v3/products/update-by-sku")
API_USER = os.getenv("API_USER", "")
API_PASS = os.getenv("API_PASS", "")

# CSV cells are strings; these columns are sent with their JSON types
_BOOL_COLS = {"manage_stock", "featured", "on_sale"}
_INT_COLS = {"stock_quantity"}
_LIST_COLS = {"images", "categories", "tags"}


def _csv_value(col, raw):
    raw = (raw or "").strip()
    if col in _BOOL_COLS:
        return raw.lower() in {"1", "true", "yes", "y", "on"}
    if col in _INT_COLS:
        return int(raw)
    if col in _LIST_COLS:
        return json.loads(raw)
    return raw


def load_updates(path):
    if path.lower().endswith(".csv"):
        with open(path, newline="", encoding="utf-8") as f:
            rows = []
            for row in csv.DictReader(f):
                # blank cells mean "don't touch"; sale_price must be sent explicitly to clear it
                rows.append({k: _csv_value(k, v) for k, v in row.items() if k and (v or "").strip()})
            return rows
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return data if isinstance(data, list) else [data]


def chunked(items, size):
    for i in range(0, len(items), size):
        yield items[i:i + size]


def push(session, url, updates, chunk=50):
    """POST updates in chunks; returns merged {updated, failed, results}."""
    totals = {"updated": 0, "failed": 0, "results": []}
    for part in chunked(updates, max(1, chunk)):
        resp = session.post(url, json=part, timeout=120)
        resp.raise_for_status()
        data = resp.json()
        totals["updated"] += data.get("updated", 0)
        totals["failed"] += data.get("failed", 0)
        totals["results"].extend(data.get("results", []))
    return totals


def main(argv=None):
    parser = argparse.ArgumentParser(description="Push SKU updates to the update-by-sku endpoint")
    parser.add_argument("path")
    parser.add_argument("--url", default=API_URL)
    parser.add_argument("--chunk", type=int, default=50)
    args = parser.parse_args(argv)

    session = requests.Session()
    if API_USER and API_PASS:
        session.auth = (API_USER, API_PASS)

    updates = load_updates(args.path)
    totals = push(session, args.url, updates, chunk=args.chunk)
    print(f"updated={totals['updated']} failed={totals['failed']}")
    for r in totals["results"]:
        if r.get("error"):
            print(f"  ✗ {r.get('sku')}: {r['error']}")
    return 0 if totals["failed"] == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
