import argparse
import json

from loguru import logger
from sqlalchemy import create_engine

from src.config import get_settings
from src.db.database import Base, ensure_sqlite_dir

settings = get_settings()


def init_database():
    """初始化資料庫"""
    import src.models  # noqa: F401

    ensure_sqlite_dir(settings.sync_database_url)
    engine = create_engine(settings.sync_database_url)
    Base.metadata.create_all(engine)
    logger.info("Database initialized")


def generate_vapid_keys():
    """Print a fresh VAPID key pair in the format the settings expect."""
    from cryptography.hazmat.primitives import serialization
    from py_vapid import Vapid01
    from py_vapid.utils import b64urlencode

    vapid = Vapid01()
    vapid.generate_keys()
    public_key = b64urlencode(
        vapid.public_key.public_bytes(
            serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
        )
    )
    private_key = b64urlencode(
        vapid.private_key.private_numbers().private_value.to_bytes(32, "big")
    )

    print("Add these to your .env file:\n")
    print(f"VAPID_PUBLIC_KEY={public_key}")
    print(f"VAPID_PRIVATE_KEY={private_key}")
    print("VAPID_SUBJECT=mailto:your-email@example.com")


def _print_result(result):
    print(json.dumps(result, ensure_ascii=False, indent=2, default=str))


def main():
    parser = argparse.ArgumentParser(description="Fleet Alerts CLI")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    subparsers.add_parser("init", help="Initialize database")

    # serve command
    subparsers.add_parser("serve", help="Start API server")

    # seed command
    subparsers.add_parser("seed", help="Seed demo user, vehicles and documents")

    # scan command
    scan_parser = subparsers.add_parser("scan", help="Run the expiry scan now")
    scan_parser.add_argument("--user", "-u", help="Only scan this user's documents")
    scan_parser.add_argument(
        "--thresholds-only",
        action="store_true",
        help="With --user, only notify documents on a 30/15/7/3/1 day threshold",
    )

    # master command
    master_parser = subparsers.add_parser("master", help="Run the master cron dispatcher")
    master_parser.add_argument("--hour", type=int, help="Pretend the current hour is HOUR")

    # remind command
    remind_parser = subparsers.add_parser("remind", help="Send the daily reminder now")
    remind_parser.add_argument("--user", "-u", help="Only remind this user")

    # vapid-keys command
    subparsers.add_parser("vapid-keys", help="Generate a VAPID key pair")

    args = parser.parse_args()

    if args.command == "init":
        init_database()
    elif args.command == "serve":
        import uvicorn

        uvicorn.run(
            "src.main:app",
            host=settings.api_host,
            port=settings.api_port,
            reload=settings.debug,
        )
    elif args.command == "seed":
        from src.db.seed import seed_demo_data

        seed_demo_data()
    elif args.command == "scan":
        from src.scheduler import jobs

        if args.user:
            _print_result(jobs.check_user_documents(
                    args.user, thresholds_only=args.thresholds_only
                ))
        else:
            _print_result(jobs.check_expiring_documents())
    elif args.command == "master":
        from src.scheduler.dispatcher import run_master
        from src.scheduler.jobs import local_now

        now = local_now()
        if args.hour is not None:
            if not 0 <= args.hour <= 23:
                parser.error("--hour must be between 0 and 23")
            now = now.replace(hour=args.hour, minute=0, second=0, microsecond=0)
        _print_result(run_master(now))
    elif args.command == "remind":
        from src.scheduler import jobs

        if args.user:
            _print_result(jobs.send_user_reminder(args.user))
        else:
            _print_result(jobs.send_daily_reminder())
    elif args.command == "vapid-keys":
        generate_vapid_keys()
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
