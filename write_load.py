"""
write_load.py: async load script that creates redirect configurations via the admin API

Usage:
  python write_load.py --base http://127.0.0.1:8000 --user admin --password admin \
      --count 200 --concurrency 20 --out redirects_created.jsonl

After the run the script lists /api/redirects and reports how many of the
created ids are actually present. With the JSONBin backend, overlapping
writers can lose records (whole-blob last-writer-wins), so `missing` > 0 is
expected there at concurrency > 1.
"""
import argparse
import asyncio
import json
import random
import time
from datetime import datetime, timezone

import httpx

TYPES = ["website", "product", "article", "service"]


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _payload(idx: int) -> dict:
    return {
        "title": f"Load test page {idx}",
        "description": f"Generated by write_load.py at {_now_iso()}",
        "targetUrl": f"https://example.com/load/{idx}?r={random.randint(0, 1_000_000)}",
        "type": random.choice(TYPES),
    }


async def _create_one(client: httpx.AsyncClient, base: str, out_file, idx: int):
    try:
        r = await client.post(f"{base}/api/redirects", json=_payload(idx), timeout=30)
        r.raise_for_status()
        data = r.json()
    except (httpx.HTTPError, ValueError):
        return None
    if out_file:
        out_file.write(json.dumps({"id": data["id"], "targetUrl": data["targetUrl"]}) + "\n")
    return data["id"]


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--user", default="admin")
    parser.add_argument("--password", default="admin")
    parser.add_argument("--count", type=int, default=200)
    parser.add_argument("--concurrency", type=int, default=20)
    parser.add_argument("--out", default="redirects_created.jsonl")
    args = parser.parse_args()

    start_iso = _now_iso()
    t0 = time.perf_counter()
    created = []

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    auth = httpx.BasicAuth(args.user, args.password)
    with open(args.out, "w", encoding="utf-8") as out_f:
        async with httpx.AsyncClient(limits=limit, auth=auth) as client:
            sem = asyncio.Semaphore(args.concurrency)

            async def _task(i):
                async with sem:
                    rid = await _create_one(client, args.base, out_f, i)
                    if rid:
                        created.append(rid)

            await asyncio.gather(*(_task(i) for i in range(args.count)))

            listed = await client.get(f"{args.base}/api/redirects", timeout=30)
            listed.raise_for_status()
            present = {item["id"] for item in listed.json()}

    dt = time.perf_counter() - t0
    end_iso = _now_iso()
    missing = [rid for rid in created if rid not in present]
    print(f"START:   {start_iso}")
    print(f"END:     {end_iso}")
    print(f"TOTAL:   {dt:.3f} s")
    print(f"OPS:     writes={args.count}, ok={len(created)}, fail={args.count - len(created)}")
    print(f"LISTED:  present={len(created) - len(missing)}, missing={len(missing)}")
    if dt > 0:
        print(f"TPS:     {len(created)/dt:.1f} req/s")


if __name__ == "__main__":
    asyncio.run(main())
