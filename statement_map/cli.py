"""CLI entry point for the statement map."""

import argparse
import logging
import sys
from pathlib import Path

from statement_map.config import load_config
from statement_map.connection_index import build_connection_index
from statement_map.loader import DatasetLoadError, load_dataset
from statement_map.search import normalize_query, search_locations


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Statement Map")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    # build command
    build_parser = sub.add_parser("build", help="Export the interactive map as HTML")
    build_parser.add_argument("-o", "--output", type=Path, default=None, help="Output HTML path")

    # search command
    search_parser = sub.add_parser("search", help="Search statements by id or place name")
    search_parser.add_argument("query", help="Statement number, id, or place name")

    # connections command
    conn_parser = sub.add_parser("connections", help="List connections for a statement")
    conn_parser.add_argument("statement", help="Statement id or number")

    # stats command
    sub.add_parser("stats", help="Show dataset and index stats")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    config = load_config(args.config)
    try:
        dataset = load_dataset(config)
    except DatasetLoadError as e:
        print(f"Unable to load statement data: {e}", file=sys.stderr)
        return 1

    if args.command == "build":
        from statement_map.output.folium_map import export_map

        index = build_connection_index(dataset.locations, dataset.connections)
        path = export_map(dataset, index, config, args.output)
        print(f"Output: {path}")

    elif args.command == "search":
        results = search_locations(
            dataset.locations, args.query, config.search.id_prefix, config.search.pad_width,
        )
        if not results:
            print("No statements found matching your search")
            return 0
        for r in results:
            extra = f" [{len(r.locations)} locations]" if len(r.locations) > 1 else ""
            print(f"  {r.statement}{extra}: {r.place} ({r.entity})")

    elif args.command == "connections":
        statement = normalize_query(args.statement, config.search.id_prefix, config.search.pad_width)
        conns = dataset.connections_for(statement)
        if not conns:
            print(f"No connections for {statement}")
            return 0
        print(f"Connections for {statement} ({len(conns)}):")
        for c in conns:
            print(f"  {c.id}: {c.from_statement} --[{c.type} {c.strength}]--> {c.to_statement}")
            if c.label:
                print(f"    {c.label}")

    elif args.command == "stats":
        index = build_connection_index(dataset.locations, dataset.connections)
        lines = sum(len(layer.lines) for layer in index.layers.values())
        print(
            f"  {len(dataset.statements)} statements, {len(dataset.locations)} locations, "
            f"{len(dataset.connections)} connections"
        )
        print(f"  {len(index.layers)} connection layers, {lines} lines, {index.skipped} skipped")
        for warning in index.warnings:
            print(f"    {warning}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
