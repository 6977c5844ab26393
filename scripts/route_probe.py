#!/usr/bin/env python3
"""Call the live routing oracle through pyfleet.

Exercises the same code path as the ``computeRoute`` / ``optimizeRoute``
callables, printing the parsed result as JSON. Useful for checking a
token or a profile without deploying.

Usage
-----
Set the oracle token and run::

    export FLEET_ORACLE_TOKEN="sk...."
    python scripts/route_probe.py route 40.0,-73.0 40.7,-74.0
    python scripts/route_probe.py optimize 40.0,-73.0 40.3,-73.5 40.7,-74.0

Points are ``lat,lng``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from pyfleet import CallContext, FleetCallableError, FleetConfig, RouteOracleClient, compute_route, optimize_route


def _point(text: str) -> dict[str, float]:
    try:
        lat_text, lng_text = text.split(",", 1)
        return {"lat": float(lat_text), "lng": float(lng_text)}
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected lat,lng but got {text!r}") from exc


async def main() -> int:
    parser = argparse.ArgumentParser(description="Query the routing oracle with the pyfleet client.")
    parser.add_argument("mode", choices=("route", "optimize"), help="Directions or optimized trip")
    parser.add_argument("points", nargs="+", type=_point, help="lat,lng points (origin first, destination last)")
    parser.add_argument("--profile", help="Routing profile (default: from FLEET_ROUTING_PROFILE or 'driving')")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.profile:
        overrides["routing_profile"] = args.profile
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    if args.verbose:
        overrides["api_trace_enabled"] = True
    config = FleetConfig.from_env(**overrides)

    context = CallContext(auth_uid="route-probe")
    async with RouteOracleClient(config) as oracle:
        try:
            if args.mode == "route":
                if len(args.points) != 2:
                    parser.error("route takes exactly two points")
                origin, destination = args.points
                payload = {
                    "originLat": origin["lat"],
                    "originLng": origin["lng"],
                    "destLat": destination["lat"],
                    "destLng": destination["lng"],
                }
                result = await compute_route(oracle, payload, context)
            else:
                result = await optimize_route(oracle, {"waypoints": args.points}, context)
        except FleetCallableError as exc:
            print(json.dumps(exc.to_payload(), indent=2), file=sys.stderr)
            return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
