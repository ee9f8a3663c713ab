"""
seed_redirects.py: load the sample configurations (or a JSONL export) into the configured store

Usage:
  SEO_STORAGE_BACKEND=jsonbin JSONBIN_API_KEY=... JSONBIN_BIN_ID=... python seed_redirects.py
  python seed_redirects.py --backend firestore --owner alice --file redirects.jsonl

Each line of --file is a JSON object with title, description, targetUrl and
optional image, keywords, siteName, type. Records are created through
RedirectManager, so they are validated and get fresh ids and timestamps.
"""
import argparse
import json
import logging
import time
from datetime import datetime, timezone

from seo_redirect.errors import RedirectValidationError, StorageUnavailable
from seo_redirect.manager.redirect_manager import RedirectManager
from seo_redirect.models import EDITABLE_FIELDS, RedirectConfig
from seo_redirect.samples import sample_records
from seo_redirect.storage.storage_factory import get_storage

log = logging.getLogger("seed_redirects")


def now_iso():
    return datetime.now(timezone.utc).isoformat()


def _sample_fields():
    for record in sample_records():
        config = RedirectConfig.model_validate(record)
        yield config.model_dump(include=set(EDITABLE_FIELDS), exclude_none=True)


def _file_fields(path):
    """Yield one dict per JSONL line; unparseable or non-object lines are logged and skipped."""
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                fields = json.loads(line)
            except json.JSONDecodeError as exc:
                log.warning("Skipping line %d: invalid JSON (%s)", lineno, exc)
                continue
            if not isinstance(fields, dict):
                log.warning("Skipping line %d: expected a JSON object", lineno)
                continue
            yield fields


def seed(manager, rows, owner_id=None):
    """Create each row through the manager; returns (created, attempted).

    Invalid rows are skipped; the run stops at the first storage failure.
    """
    ok = 0
    total = 0
    for fields in rows:
        total += 1
        try:
            config = manager.create(fields, owner_id=owner_id)
        except RedirectValidationError as exc:
            log.warning("Skipping row %d: %s", total, exc)
            continue
        except StorageUnavailable as exc:
            log.error("Storage unavailable after %d rows: %s", ok, exc)
            break
        ok += 1
        print(json.dumps({"id": config.id, "targetUrl": config.target_url}))
    return ok, total


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--backend", default=None, help="memory | jsonbin | firestore (default: SEO_STORAGE_BACKEND)")
    ap.add_argument("--owner", default=None, help="owner id for multi-tenant backends")
    ap.add_argument("--file", default=None, help="JSONL file of configurations (default: built-in samples)")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    manager = RedirectManager(storage=get_storage(args.backend))
    if manager.multi_tenant and not args.owner:
        ap.error(f"--owner is required for the {manager.storage.name} backend")

    start_iso = now_iso()
    t0 = time.perf_counter()
    rows = _file_fields(args.file) if args.file else _sample_fields()
    ok, total = seed(manager, rows, owner_id=args.owner)

    dt = time.perf_counter() - t0
    print(f"START: {start_iso}")
    print(f"END:   {now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"CREATED: {ok}/{total} configurations on {manager.storage.name}")


if __name__ == "__main__":
    main()
