"""CLI entrypoint for community_map."""

from __future__ import annotations

import argparse
import asyncio
import json

from community_map.logging_config import setup_logging
from community_map.models import GroupRecord


def main() -> None:
    setup_logging()

    parser = argparse.ArgumentParser(prog="community-map")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve")

    groups_parser = sub.add_parser("groups")
    groups_parser.add_argument("--type", dest="group_type", default="all",
                               choices=["all", "community", "affinity"])
    groups_parser.add_argument("--json", action="store_true")

    sub.add_parser("stats")

    resolve_parser = sub.add_parser("resolve")
    resolve_parser.add_argument("location", nargs="*")
    resolve_parser.add_argument("--name", default="")
    resolve_parser.add_argument("--description", default="")

    args = parser.parse_args()

    if args.command == "serve":
        _serve()
    elif args.command == "groups":
        asyncio.run(_groups(args.group_type, args.json))
    elif args.command == "stats":
        asyncio.run(_stats())
    elif args.command == "resolve":
        _resolve(args.location, args.name, args.description)


def _serve() -> None:
    import uvicorn

    from community_map.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "community_map.api:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=(settings.env == "development"),
        log_level=settings.log_level.lower(),
    )


async def _groups(group_type: str, as_json: bool) -> None:
    from community_map.pipeline import filter_groups, get_groups

    groups = filter_groups(await get_groups(), group_type)
    if as_json:
        print(json.dumps([g.model_dump(mode="json", by_alias=True) for g in groups], indent=2))
        return
    for group in groups:
        _print_group(group)
    print(f"\n{len(groups)} groups")


async def _stats() -> None:
    from community_map.pipeline import get_groups, group_stats

    stats = group_stats(await get_groups())
    print(json.dumps(stats.model_dump(by_alias=True), indent=2))


def _resolve(location: list[str], name: str, description: str) -> None:
    from community_map.classifier import GroupClassifier
    from community_map.resolver import LocationResolver

    resolved = LocationResolver().resolve([" ".join(location)] if location else [], name)
    group_type = GroupClassifier().classify(name, description)

    print(f"Group type:    {group_type.value}")
    print(f"Match:         {resolved.match.value}")
    print(f"Place:         {resolved.place or '-'}")
    print(f"Neighborhood:  {resolved.neighborhood}")
    print(f"Address:       {resolved.address}")
    if resolved.coordinates is not None:
        lat, lng = resolved.coordinates
        print(f"Coords:        {lat:.4f}, {lng:.4f} (around {resolved.anchor[0]:.4f}, {resolved.anchor[1]:.4f})")
    else:
        print("Coords:        (unresolved, would be distributed)")


def _print_group(group: GroupRecord) -> None:
    lat, lng = group.coordinates
    print(f"- {group.name} [{group.group_type.value}]")
    print(f"    {group.location.neighborhood}: {lat:.4f}, {lng:.4f}")
    print(f"    {group.meeting_day}, {group.member_count} members")


if __name__ == "__main__":
    main()
