import argparse
import asyncio
import json
import logging

from algorithms import WeightConverter
from client import WorkoutClient
from config import configure_logging, load_settings
from offline_queue import ActionQueue
from rest_api import WorkoutAPI
from sync_engine import SyncEngine
from sync_schemas import ActionKind

logger = logging.getLogger(__name__)


def serve(db_path: str, yaml_path: str, host: str, port: int) -> None:
    import uvicorn

    api = WorkoutAPI(db_path=db_path, yaml_path=yaml_path, start_sweeper=True)
    uvicorn.run(api.app, host=host, port=port)


def sweep(db_path: str, yaml_path: str) -> int:
    """Close stale in-progress sessions once and report how many were closed."""
    api = WorkoutAPI(db_path=db_path, yaml_path=yaml_path)
    closed = api.close_stale_sessions()
    print(f"Closed {closed} stale session(s)")
    return closed


def demo_data(db_path: str, yaml_path: str) -> None:
    """Populate the database with a demo program if it has none."""
    api = WorkoutAPI(db_path=db_path, yaml_path=yaml_path)
    if api.programs.fetch_all("SELECT id FROM programs LIMIT 1;"):
        print("Database already contains programs")
        return
    program_id = api.programs.create("Demo Strength")
    day_id = api.days.create(program_id, "Push")
    for name, sets_count in (("Bench Press", 3), ("Overhead Press", 3), ("Dips", 2)):
        api.day_exercises.add(day_id, api.exercises.ensure(name), sets_count)
    print(f"Demo data inserted: program {program_id}, day {day_id}")


async def _list_queue(queue: ActionQueue) -> None:
    for action in await queue.list_all():
        print(
            f"{action.id}  {action.action.value:<16} retries={action.retry_count}  "
            f"{json.dumps(action.payload)}"
        )


async def _run_sync(engine: SyncEngine, watch: bool) -> None:
    if not watch:
        report = await engine.sync()
        print(
            f"synced={report['synced']} retried={report['retried']} "
            f"discarded={report['discarded']} pending={engine.pending_count}"
        )
        return
    engine.start()
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await engine.stop()


def build_engine(queue_path: str, yaml_path: str) -> SyncEngine:
    settings = load_settings(yaml_path)
    transport = WorkoutClient(settings.server_url, settings.request_timeout)
    return SyncEngine(
        ActionQueue(queue_path),
        transport,
        max_retries=settings.max_retry_count,
        interval=settings.sync_interval_seconds,
        online=transport.health(),
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Workout tracker utility commands")
    parser.add_argument("--yaml", default="settings.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    srv = sub.add_parser("serve")
    srv.add_argument("--db", default=None)
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)

    swp = sub.add_parser("sweep")
    swp.add_argument("--db", default=None)

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default=None)

    que = sub.add_parser("queue")
    que.add_argument("--queue", default=None)
    que.add_argument("op", choices=["list", "count", "clear", "add"])
    que.add_argument("--action", choices=[k.value for k in ActionKind])
    que.add_argument("--payload", default="{}")

    syn = sub.add_parser("sync")
    syn.add_argument("--queue", default=None)
    syn.add_argument("--watch", action="store_true")

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lbs"], required=True)

    args = parser.parse_args()
    settings = load_settings(args.yaml)
    configure_logging(settings.log_level)

    if args.cmd == "serve":
        serve(args.db or settings.db_path, args.yaml, args.host, args.port)
    elif args.cmd == "sweep":
        sweep(args.db or settings.db_path, args.yaml)
    elif args.cmd == "demo":
        demo_data(args.db or settings.db_path, args.yaml)
    elif args.cmd == "queue":
        queue = ActionQueue(args.queue or settings.queue_path)
        if args.op == "list":
            asyncio.run(_list_queue(queue))
        elif args.op == "count":
            print(asyncio.run(queue.count()))
        elif args.op == "clear":
            asyncio.run(queue.clear())
        else:
            if not args.action:
                parser.error("queue add requires --action")
            print(asyncio.run(queue.enqueue(args.action, json.loads(args.payload))))
    elif args.cmd == "sync":
        engine = build_engine(args.queue or settings.queue_path, args.yaml)
        if not engine.is_online:
            logger.warning("Server %s unreachable, nothing sent", settings.server_url)
            return
        try:
            asyncio.run(_run_sync(engine, args.watch))
        except KeyboardInterrupt:
            pass
    elif args.cmd == "convert":
        if args.unit == "kg":
            print(f"{args.weight} kg = {WeightConverter.kg_to_lbs(args.weight):.2f} lbs")
        else:
            print(f"{args.weight} lbs = {WeightConverter.lbs_to_kg(args.weight):.2f} kg")


if __name__ == "__main__":
    main()
