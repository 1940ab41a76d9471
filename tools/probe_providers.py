"""Call every provider once per capability and print what came back.

Bypasses the cache, toggles and circuit breaker so an operator can see the
raw state of each integration ("needs an API key" vs "vendor is down").

Usage:
    python -m tools.probe_providers
    python -m tools.probe_providers --league 78 --provider openligadb
    python -m tools.probe_providers --write-health
"""

import argparse
import asyncio
import sys
import time
from pathlib import Path

# Ensure backend is on sys.path so `sportsfeed.*` imports work
_backend = Path(__file__).resolve().parent.parent / "backend"
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from sportsfeed.providers.base import FetchParams, Operation, StickyStrategyCache
from sportsfeed.providers.errors import ProviderConfigError, ProviderError, ProviderRequestError
from sportsfeed.services.normalizer import normalize_many
from sportsfeed.services.provider_health import provider_health
from sportsfeed.services.sports_aggregator import build_default_registry


async def _probe(adapter, operation: Operation, params: FetchParams, write_health: bool) -> tuple[str, str]:
    if not adapter.is_configured():
        if write_health:
            await provider_health.record_misconfigured(adapter.name, "credentials missing")
        return "CONFIG", "credentials missing"
    try:
        raw = await adapter.fetch(operation, params)
    except ProviderConfigError as exc:
        if write_health:
            await provider_health.record_misconfigured(adapter.name, str(exc))
        return "CONFIG", str(exc)
    except ProviderRequestError as exc:
        if write_health:
            await provider_health.mark_failure(adapter.name, exc.status_code, str(exc))
        return "FAIL", str(exc)
    except ProviderError as exc:
        if write_health:
            await provider_health.mark_failure(adapter.name, None, str(exc))
        return "FAIL", str(exc)

    records = normalize_many(raw)
    if not records:
        if write_health:
            await provider_health.record_empty(adapter.name, f"empty {operation.value} result")
        return "EMPTY", f"{len(raw)} raw records"
    if write_health:
        await provider_health.mark_success(adapter.name, f"{len(records)} {operation.value} records")
    return "OK", f"{len(records)} records, first: {records[0].model_dump(exclude={'raw'})}"


async def run(league: str, season: str | None, only: str | None, include_demo: bool, write_health: bool) -> int:
    if write_health:
        import sportsfeed.database as _db

        await _db.connect_db()

    sticky = StickyStrategyCache()
    registry = build_default_registry(sticky, include_demo=include_demo)
    failures = 0
    try:
        for adapter in registry:
            if only and adapter.name != only.strip().lower():
                continue
            for operation in sorted(adapter.capabilities, key=lambda op: op.value):
                params = FetchParams(
                    league_id=None if operation == Operation.LEAGUES else league,
                    season=season if operation == Operation.STANDINGS else None,
                )
                started = time.monotonic()
                status, detail = await _probe(adapter, operation, params, write_health)
                elapsed = time.monotonic() - started
                if status in {"FAIL", "CONFIG"}:
                    failures += 1
                print(f"{adapter.name:<14} {operation.value:<10} {status:<6} {elapsed:6.2f}s  {detail[:160]}")
        if sticky.snapshot():
            print(f"sticky strategies: {sticky.snapshot()}")
    finally:
        for adapter in registry:
            await adapter.aclose()
        if write_health:
            import sportsfeed.database as _db

            await _db.close_db()
    return failures


def main() -> None:
    parser = argparse.ArgumentParser(description="Probe every sports data provider once per capability.")
    parser.add_argument("--league", type=str, default="39", help="League id or alias (default: 39 / Premier League).")
    parser.add_argument("--season", type=str, default=None, help="Optional season for standings.")
    parser.add_argument("--provider", type=str, default=None, help="Only probe this provider.")
    parser.add_argument("--demo", action="store_true", help="Include the demo provider.")
    parser.add_argument("--write-health", action="store_true", help="Record results in the provider_health store.")
    args = parser.parse_args()
    failures = asyncio.run(run(args.league, args.season, args.provider, args.demo, args.write_health))
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
