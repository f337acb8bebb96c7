from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from perkboard.service.health import HealthChecker
from perkboard.service.perks import PerksService
from perkboard.service.results import ServiceResult
from perkboard.service.vendors import VendorsService
from perkboard.upstream.client import GetProvenClient

logger = logging.getLogger("perks_report")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Query the GetProven perks catalog and print JSON.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("stats", help="Active perk count and total savings.")

    featured = subparsers.add_parser("featured", help="Featured perks.")
    featured.add_argument("--limit", type=int, default=4)

    recommended = subparsers.add_parser("recommended", help="One perk per category.")
    recommended.add_argument("--limit", type=int, default=3)
    recommended.add_argument("--exclude", action="append", default=[])

    perk = subparsers.add_parser("perk", help="Look up a perk by id or slug.")
    perk.add_argument("id_or_slug")

    similar = subparsers.add_parser("similar", help="Perks similar to an offer.")
    similar.add_argument("offer_id")
    similar.add_argument("--limit", type=int, default=3)

    vendor = subparsers.add_parser("vendor", help="Vendor profile with clients and contacts.")
    vendor.add_argument("vendor_id")
    vendor.add_argument("--admin", action="store_true")

    subparsers.add_parser("categories", help="Perk categories.")

    health = subparsers.add_parser("health", help="Upstream health probe.")
    health.add_argument("--admin", action="store_true")
    return parser.parse_args(argv)


def run_command(args: argparse.Namespace, client: GetProvenClient) -> dict[str, Any]:
    perks = PerksService(client)
    command = args.command

    if command == "stats":
        return ServiceResult.ok(perks.get_dashboard_stats()).to_dict()
    if command == "featured":
        return perks.get_featured_perks(args.limit).to_dict()
    if command == "recommended":
        return perks.get_recommended_perks(args.exclude, args.limit).to_dict()
    if command == "perk":
        return perks.get_perk(args.id_or_slug).to_dict()
    if command == "similar":
        return perks.find_similar_perks(args.offer_id, args.limit).to_dict()
    if command == "vendor":
        return VendorsService(client).get_vendor_detail(args.vendor_id, admin=args.admin).to_dict()
    if command == "categories":
        return perks.list_categories().to_dict()
    if command == "health":
        report = HealthChecker(client).check()
        return {"success": report.status != "down", "data": report.to_dict(admin=args.admin)}
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    with GetProvenClient.from_env() as client:
        if not client.settings.has_token:
            logger.warning("GETPROVEN_API_TOKEN is not set; upstream calls will fail.")
        payload = run_command(args, client)

    print(json.dumps(payload, indent=2, sort_keys=True))
    return 0 if payload.get("success") else 1


if __name__ == "__main__":
    raise SystemExit(main())
