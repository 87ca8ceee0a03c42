#!/usr/bin/env python3
"""Bootstrap the pipeline once and dump what it sees.

Fetches every live source (or only synthetic data with ``--offline``), runs
one analytics pass and prints a per-type summary, the degraded categories
and the largest clusters. With ``--json`` the full snapshot message is
printed instead, exactly as a WebSocket subscriber would receive it.

Usage
-----
::

    python scripts/dump_snapshot.py
    python scripts/dump_snapshot.py --offline --seed 7 --json --output snapshot.json

Options::

    --offline            Synthetic data only, no network access
    --seed N             Seed for synthetic data
    --json               Output the snapshot as JSON
    --output FILE        Write output to FILE instead of stdout
    --top N              Number of clusters and anomalies listed (default: 10)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections import Counter
from pathlib import Path

import aiohttp

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pygeotrack import GeoTrackConfig, build_orchestrator  # noqa: E402
from pygeotrack._transport import HttpTransport  # noqa: E402
from pygeotrack.models import SnapshotMessage  # noqa: E402
from pygeotrack.orchestrator import Orchestrator  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _summary(orchestrator: Orchestrator, snapshot: SnapshotMessage, top: int) -> str:
    data = snapshot.data
    lines = [_section("Entities")]
    by_type = Counter(entity.type.value for entity in data.entities)
    by_provenance = Counter(str(entity.metadata.get("provenance", "?")) for entity in data.entities)
    for name, count in sorted(by_type.items()):
        lines.append(f"  {name:<16} {count:>6}")
    lines.append(f"  {'total':<16} {len(data.entities):>6}")
    lines.append("  provenance: " + ", ".join(f"{name}={count}" for name, count in sorted(by_provenance.items())))

    store = orchestrator.store
    lines.append(_section("Sources"))
    live = sorted(category.value for category, flag in store.live_capable.items() if flag)
    degraded = sorted(category.value for category in store.degraded_categories)
    lines.append(f"  live:     {', '.join(live) or '-'}")
    lines.append(f"  degraded: {', '.join(degraded) or '-'}")

    lines.append(_section(f"Clusters ({len(data.clusters)})"))
    largest = sorted(data.clusters, key=lambda cluster: len(cluster.entity_ids), reverse=True)[:top]
    for cluster in largest:
        lines.append(
            f"  {cluster.id:<12} size={len(cluster.entity_ids):<4} "
            f"at ({cluster.centroid.lat:7.2f}, {cluster.centroid.lng:8.2f}) radius={cluster.radius:6.1f}km"
        )

    lines.append(_section(f"Anomalies ({len(data.anomalies)})"))
    for anomaly in data.anomalies[:top]:
        lines.append(f"  [{anomaly.severity.value:<8}] {anomaly.kind.value:<16} {anomaly.entity_id}: {anomaly.message}")
    return "\n".join(lines)


async def _run(args: argparse.Namespace) -> str:
    config = GeoTrackConfig.from_env(
        seed=args.seed,
        live_sources_enabled=not args.offline,
    )
    if args.offline:
        orchestrator = build_orchestrator(config, None)
        snapshot = await orchestrator.initialize()
    else:
        async with aiohttp.ClientSession() as session:
            orchestrator = build_orchestrator(config, HttpTransport(session))
            snapshot = await orchestrator.initialize()

    if args.json:
        return json.dumps(snapshot.to_wire(), indent=2)
    return _summary(orchestrator, snapshot, args.top)


def main() -> None:
    parser = argparse.ArgumentParser(description="Bootstrap pygeotrack once and dump the snapshot.")
    parser.add_argument("--offline", action="store_true", help="Synthetic data only")
    parser.add_argument("--seed", type=int, default=None, help="Seed for synthetic data")
    parser.add_argument("--json", action="store_true", help="Output the snapshot as JSON")
    parser.add_argument("--output", type=Path, default=None, help="Write output to FILE")
    parser.add_argument("--top", type=int, default=10, help="Clusters and anomalies to list")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    output = asyncio.run(_run(args))
    if args.output is not None:
        args.output.write_text(output + "\n", encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(output)


if __name__ == "__main__":
    main()
