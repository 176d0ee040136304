import argparse
import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

from vibe_magazine.adapters.clock import FixedClock
from vibe_magazine.adapters.sqlite.migrator import SQLiteMigrator
from vibe_magazine.components.analytics import DashboardInput, EngagementReport, run_dashboard
from vibe_magazine.context import ServiceContext
from vibe_magazine.domain.entities import Magazine, UserProfile
from vibe_magazine.domain.errors import UpstreamError
from vibe_magazine.rules.loader import load_rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

DATA_DIR = os.environ.get("VIBE_DATA_DIR", "./data")
DB_PATH = str(Path(DATA_DIR) / "vibe.db")
RULES_PATH = os.environ.get("VIBE_RULES_PATH", "vibe_rules.yaml")


def get_context() -> ServiceContext:
    if not Path(RULES_PATH).exists():
        logger.error("Rules file %s not found.", RULES_PATH)
        sys.exit(1)

    rules = load_rules(Path(RULES_PATH))
    return ServiceContext.create(DB_PATH, rules)


def handle_init_db(args: argparse.Namespace) -> None:
    Path(DATA_DIR).mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(DB_PATH).run_migrations()
    if applied:
        print(f"Applied {len(applied)} migration(s) to {DB_PATH}: {', '.join(applied)}")
    else:
        print(f"Database {DB_PATH} is up to date.")


def handle_bootstrap_superadmin(ctx: ServiceContext, args: argparse.Namespace) -> None:
    """Create the first top-tier account; the admin functions need one to exist."""
    top = ctx.policy.top_tier
    min_length = ctx.rules.users.password_min_length
    if len(args.password) < min_length:
        logger.error("Password must be at least %d characters long", min_length)
        sys.exit(1)

    try:
        identity = ctx.identity_provider.create_user(
            email=args.email,
            password=args.password,
            email_confirm=True,
            metadata={"username": args.username, "display_name": args.username, "role": top},
        )
        ctx.profile_repo.insert(
            UserProfile(
                id=identity.id,
                username=args.username,
                email=identity.email,
                display_name=args.username,
                role=top,  # type: ignore[arg-type]
            )
        )
    except UpstreamError as e:
        logger.error("Bootstrap failed: %s", e.message)
        sys.exit(1)

    print(f"Created {top} {identity.email} ({identity.id})")


def handle_add_magazine(ctx: ServiceContext, args: argparse.Namespace) -> None:
    magazine = Magazine(id=args.id, title=args.title, created_at=datetime.now(UTC))
    ctx.magazine_repo.add(magazine)
    print(f"Magazine '{magazine.title}' saved as {magazine.id}.")


def format_report(report: EngagementReport, window: str, limit: int) -> str:
    lines = [
        f"Engagement report ({window}, generated {report.generated_at:%Y-%m-%d %H:%M} UTC)",
        "",
        f"  Views:    {report.total('visit')}",
        f"  Likes:    {report.total('like')}",
        f"  Comments: {report.total('comment')}",
        f"  Saves:    {report.total('save')}",
        "",
        f"Top magazines (max {limit}):",
    ]
    for m in report.magazines[:limit]:
        lines.append(
            f"  {m.title:<23} {m.total_engagement:>6} total"
            f"  {m.visits:>5} views  {m.engagement_rate:5.1f}% ({m.rate_band})"
        )
    lines.append("")
    lines.append("Daily activity:")
    for bucket in report.timeline:
        lines.append(f"  {bucket.label:<12} {bucket.total:>6}")
    return "\n".join(lines)


def handle_analytics_report(ctx: ServiceContext, args: argparse.Namespace) -> None:
    clock = FixedClock(datetime.fromisoformat(args.as_of)) if args.as_of else ctx.clock
    out = run_dashboard(
        DashboardInput(window=args.window),
        event_repo=ctx.event_repo,
        magazine_repo=ctx.magazine_repo,
        time_port=clock,
        rules=ctx.rules.analytics,
    )
    if not out.success:
        for error in out.errors:
            logger.error(error.message)
        sys.exit(1)

    print(format_report(out.report, out.window, ctx.rules.analytics.top_magazines_limit))


def main() -> None:
    parser = argparse.ArgumentParser(description="Vibe Magazine admin CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # init-db
    subparsers.add_parser("init-db", help="Create or migrate the SQLite database")

    # bootstrap-superadmin
    bootstrap_parser = subparsers.add_parser(
        "bootstrap-superadmin", help="Create the first superadmin account"
    )
    bootstrap_parser.add_argument("--email", required=True)
    bootstrap_parser.add_argument("--username", required=True)
    bootstrap_parser.add_argument("--password", required=True)

    # add-magazine
    magazine_parser = subparsers.add_parser("add-magazine", help="Register a magazine issue")
    magazine_parser.add_argument("id", help="Magazine identifier")
    magazine_parser.add_argument("title", help="Magazine title")

    # analytics-report
    report_parser = subparsers.add_parser(
        "analytics-report", help="Print the engagement dashboard as text"
    )
    report_parser.add_argument("--window", default=None, help="Window key, e.g. 7d, 30d, 90d")
    report_parser.add_argument("--as-of", default=None, help="ISO timestamp to report at")

    args = parser.parse_args()

    if args.command == "init-db":
        handle_init_db(args)
        return

    ctx = get_context()

    if args.command == "bootstrap-superadmin":
        handle_bootstrap_superadmin(ctx, args)
    elif args.command == "add-magazine":
        handle_add_magazine(ctx, args)
    elif args.command == "analytics-report":
        handle_analytics_report(ctx, args)


if __name__ == "__main__":
    main()
