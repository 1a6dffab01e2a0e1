"""
EduOrbit CLI: build, edit and query a topic graph stored in SQLite.

Usage::

    python -m eduorbit --db ./data/eduorbit.db --seed 42 load syllabus.txt
    python -m eduorbit path "React Basics" "Context"
    python -m eduorbit link "Props" "Hooks" --reject-cycles
    python -m eduorbit complete "React Basics"
    python -m eduorbit status "Hooks" ORBIT
    python -m eduorbit recommend --limit 3
    python -m eduorbit stats
    python -m eduorbit export ./data/export.json
    python -m eduorbit sessions

Topics may be referenced by id or by exact name. Exit code 0 on
success, 1 on any reported error.
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from eduorbit import progress, storage
from eduorbit.config import DEFAULT_CONFIG, OrbitConfig, load_config, save_config
from eduorbit.dag_validator import CycleError, compute_metrics, find_cycle, validate_dag
from eduorbit.graph_ops import add_edge, resolve_node, update_node_status
from eduorbit.layout import calculate_orbits
from eduorbit.models import TopicNode
from eduorbit.path_finder import compute_path
from eduorbit.syllabus_parser import parse_syllabus
from eduorbit.utils import make_rng, setup_logging, timed

logger = logging.getLogger(__name__)


# =========================================================================
# Helpers
# =========================================================================


def _fail(msg: str, *args) -> None:
    logger.error(msg, *args)
    raise SystemExit(1)


def _open_store(db_path: str):
    storage.migrate_db(db_path)
    return storage.get_connection(db_path)


def _require_session(conn, key: str) -> storage.SessionData:
    data = storage.load_session(conn, key)
    if data is None:
        _fail("No session %r found. Run `load` first.", key)
    return data


def _require_node(nodes: List[TopicNode], ref: str) -> TopicNode:
    node = resolve_node(nodes, ref)
    if node is None:
        _fail("Unknown topic %r.", ref)
    return node


def _save(conn, data: storage.SessionData, key: str, **update) -> None:
    storage.save_session(conn, data.model_copy(update=update), key)


# =========================================================================
# Commands
# =========================================================================


def cmd_load(args, conn, config: OrbitConfig) -> None:
    with open(args.syllabus, "r", encoding="utf-8") as fh:
        text = fh.read()
    with timed("Parse syllabus"):
        nodes, edges = parse_syllabus(text, estimated_time=config.default_estimated_time)
    if not nodes:
        _fail("No topics found in %s.", args.syllabus)

    with timed("Layout"):
        nodes = calculate_orbits(nodes, edges, rng=make_rng(args.seed), config=config)

    data = storage.SessionData(nodes=nodes, edges=edges, syllabus_text=text)
    storage.save_session(conn, data, args.session)
    logger.info("✅ Loaded %d topics, %d edges.", len(nodes), len(edges))


def cmd_path(args, conn, config: OrbitConfig) -> None:
    data = _require_session(conn, args.session)
    start = _require_node(data.nodes, args.start)
    end = _require_node(data.nodes, args.end)

    with timed("Path search"):
        path = compute_path(
            data.nodes, data.edges, start.id, end.id,
            fallback_time=config.search_fallback_time,
        )
    if path is None:
        _fail("No path from %r to %r.", start.name, end.name)

    names = {n.id: n.name for n in data.nodes}
    print(" → ".join(names[nid] for nid in path.node_ids))
    print(f"Total time: {path.total_time} min")


def cmd_link(args, conn, config: OrbitConfig) -> None:
    data = _require_session(conn, args.session)
    source = _require_node(data.nodes, args.source)
    target = _require_node(data.nodes, args.target)

    try:
        nodes, edges = add_edge(
            data.nodes, data.edges, source.id, target.id,
            rng=make_rng(args.seed), config=config,
            reject_cycles=args.reject_cycles,
        )
    except CycleError:
        _fail("Linking %r → %r would create a cycle.", source.name, target.name)

    if len(edges) == len(data.edges):
        logger.info("Edge %r → %r already exists.", source.name, target.name)
        return
    _save(conn, data, args.session, nodes=nodes, edges=edges)


def cmd_complete(args, conn, config: OrbitConfig) -> None:
    data = _require_session(conn, args.session)
    node = _require_node(data.nodes, args.topic)
    if args.undo:
        nodes = progress.mark_incomplete(data.nodes, node.id)
    else:
        nodes = progress.mark_complete(data.nodes, node.id)
    _save(conn, data, args.session, nodes=nodes)


def cmd_status(args, conn, config: OrbitConfig) -> None:
    data = _require_session(conn, args.session)
    node = _require_node(data.nodes, args.topic)
    nodes = update_node_status(data.nodes, node.id, args.status)
    _save(conn, data, args.session, nodes=nodes)


def cmd_study(args, conn, config: OrbitConfig) -> None:
    data = _require_session(conn, args.session)
    node = _require_node(data.nodes, args.topic)
    nodes = progress.add_study_time(data.nodes, node.id, args.minutes)
    if args.note is not None:
        nodes = progress.add_note(nodes, node.id, args.note)
    if args.resource:
        url, _, title = args.resource.partition("|")
        nodes = progress.add_resource(nodes, node.id, url.strip(), title.strip() or url.strip())
    _save(conn, data, args.session, nodes=nodes)


def cmd_recommend(args, conn, config: OrbitConfig) -> None:
    data = _require_session(conn, args.session)
    for node in progress.recommended_topics(data.nodes, limit=args.limit):
        print(f"[depth {node.depth}] {node.name}")


def cmd_stats(args, conn, config: OrbitConfig) -> None:
    data = _require_session(conn, args.session)
    report = {
        "progress": progress.summarize(data.nodes),
        "graph": compute_metrics(data.nodes, data.edges),
    }
    if not validate_dag(data.nodes, data.edges):
        names = {n.id: n.name for n in data.nodes}
        cycle = [names.get(nid, nid) for nid in find_cycle(data.edges)]
        report["graph"]["cycle"] = cycle
        logger.warning("⚠ Dependency cycle: %s", " → ".join(cycle))
    print(json.dumps(report, indent=2))


def cmd_export(args, conn, config: OrbitConfig) -> None:
    data = _require_session(conn, args.session)
    os.makedirs(os.path.dirname(os.path.abspath(args.out)), exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as fh:
        fh.write(storage.export_data(data.nodes, data.edges, data.syllabus_text))
    logger.info("📄 Exported → %s", args.out)


def cmd_import(args, conn, config: OrbitConfig) -> None:
    with open(args.infile, "r", encoding="utf-8") as fh:
        raw = fh.read()
    try:
        data = storage.import_data(raw)
    except storage.StorageError as exc:
        _fail("Failed to import %s: %s", args.infile, exc)
    storage.save_session(conn, data, args.session)


def cmd_reset(args, conn, config: OrbitConfig) -> None:
    storage.delete_session(conn, args.session)


def cmd_sessions(args, conn, config: OrbitConfig) -> None:
    for key in storage.list_sessions(conn):
        print(key)


# =========================================================================
# CLI
# =========================================================================


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="python -m eduorbit",
        description="Orbital prerequisite graph: load, link, plan, track.",
    )
    parser.add_argument("--db", default="./data/eduorbit.db")
    parser.add_argument("--session", default=storage.DEFAULT_SESSION_KEY)
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed the layout jitter for reproducible positions.")
    parser.add_argument("--config", type=str, default=None,
                        help="Load layout/search settings from a config JSON.")
    parser.add_argument("--save-config", type=str, default=None,
                        help="Save current settings to a config JSON and exit.")
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("load", help="Parse a syllabus file and lay it out.")
    p.add_argument("syllabus")
    p.set_defaults(func=cmd_load)

    p = sub.add_parser("path", help="Cheapest study path between two topics.")
    p.add_argument("start")
    p.add_argument("end")
    p.set_defaults(func=cmd_path)

    p = sub.add_parser("link", help="Add a prerequisite edge SOURCE → TARGET.")
    p.add_argument("source")
    p.add_argument("target")
    p.add_argument("--reject-cycles", action="store_true")
    p.set_defaults(func=cmd_link)

    p = sub.add_parser("complete", help="Mark a topic completed.")
    p.add_argument("topic")
    p.add_argument("--undo", action="store_true", help="Mark incomplete instead.")
    p.set_defaults(func=cmd_complete)

    p = sub.add_parser("status", help="Set a topic status directly.")
    p.add_argument("topic")
    p.add_argument("status", choices=["ORBIT", "COMPLETED", "LOCKED"])
    p.set_defaults(func=cmd_status)

    p = sub.add_parser("study", help="Log study minutes, a note or a resource.")
    p.add_argument("topic")
    p.add_argument("--minutes", type=int, default=0)
    p.add_argument("--note", type=str, default=None)
    p.add_argument("--resource", type=str, default=None, help="URL|Title")
    p.set_defaults(func=cmd_study)

    p = sub.add_parser("recommend", help="Topics ready to study next.")
    p.add_argument("--limit", type=int, default=5)
    p.set_defaults(func=cmd_recommend)

    p = sub.add_parser("stats", help="Progress statistics and graph metrics.")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("export", help="Write the session as JSON.")
    p.add_argument("out")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Replace the session from a JSON export.")
    p.add_argument("infile")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("reset", help="Delete the stored session.")
    p.set_defaults(func=cmd_reset)

    p = sub.add_parser("sessions", help="List stored session keys, newest first.")
    p.set_defaults(func=cmd_sessions)

    return parser, parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry-point."""
    parser, args = _parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    config = load_config(args.config) if args.config else DEFAULT_CONFIG

    # --save-config: just dump settings and exit
    if args.save_config:
        save_config(config, args.save_config)
        return

    if args.command is None:
        parser.print_help()
        raise SystemExit(1)

    conn = _open_store(args.db)
    try:
        args.func(args, conn, config)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
    sys.exit(0)
