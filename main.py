"""CLI entry point for the candidate dashboard."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from candidate_ai.core.config import AI_MODELS, Settings
from candidate_ai.core.db import init_db
from candidate_ai.core.schemas import Candidate
from candidate_ai.pipeline.dashboard import DashboardContext
from candidate_ai.pipeline.filters import ALL_ROLES

DEFAULT_CONFIG_PATH = "config/settings.yaml"


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to settings YAML file (default: {DEFAULT_CONFIG_PATH} if present)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="CandidateAI - rank, compare and annotate candidate evaluations",
    )
    subparsers = parser.add_subparsers(dest="command")

    dashboard_parser = subparsers.add_parser("dashboard", help="Show the overview")
    dashboard_parser.add_argument("--top", type=int, default=10, help="Leaderboard size")
    _add_common(dashboard_parser)

    candidates_parser = subparsers.add_parser("candidates", help="Browse candidates")
    candidates_parser.add_argument("--search", default="", help="Match name or role")
    candidates_parser.add_argument("--role", default=ALL_ROLES, help="Exact role filter")
    _add_common(candidates_parser)

    show_parser = subparsers.add_parser("show", help="Show one candidate in detail")
    show_parser.add_argument("candidate_id")
    _add_common(show_parser)

    rankings_parser = subparsers.add_parser("rankings", help="Show the full ranking table")
    rankings_parser.add_argument("--top", type=int, default=None, help="Limit rows")
    _add_common(rankings_parser)

    evaluate_parser = subparsers.add_parser("evaluate", help="Run AI evaluation")
    evaluate_parser.add_argument("candidate_ids", nargs="+")
    evaluate_parser.add_argument("--model", default=None, help="Override the configured model")
    _add_common(evaluate_parser)

    compare_parser = subparsers.add_parser(
        "compare", help="Toggle candidates in the comparison set, then show it",
    )
    compare_parser.add_argument("candidate_ids", nargs="*")
    _add_common(compare_parser)

    note_parser = subparsers.add_parser("note", help="Read or write a private note")
    note_parser.add_argument("candidate_id")
    note_parser.add_argument("text", nargs="?", default=None)
    _add_common(note_parser)

    settings_parser = subparsers.add_parser("settings", help="Show or change settings")
    settings_parser.add_argument("--model", choices=sorted(AI_MODELS), default=None)
    settings_parser.add_argument(
        "--auto-evaluate",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Evaluate candidates automatically when selected",
    )
    settings_parser.add_argument("--theme", choices=["light", "dark"], default=None)
    _add_common(settings_parser)

    reset_parser = subparsers.add_parser(
        "reset", help="Regenerate evaluations and wipe notes and comparisons",
    )
    reset_parser.add_argument("--yes", action="store_true", help="Confirm the reset")
    _add_common(reset_parser)

    export_parser = subparsers.add_parser("export", help="Export the ranked dataset")
    export_parser.add_argument("--format", choices=["json"], default="json")
    _add_common(export_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        args.command = "dashboard"
        args.top = 10
        args.config = None
        args.verbose = False

    return args


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(config: str | None) -> Settings:
    """Load settings from --config, the default path, or built-in defaults."""
    if config is not None:
        return Settings.from_yaml(config)
    if Path(DEFAULT_CONFIG_PATH).exists():
        return Settings.from_yaml(DEFAULT_CONFIG_PATH)
    return Settings()


def _candidate_line(dashboard: DashboardContext, c: Candidate) -> str:
    ranking = dashboard.get_ranking(c.id)
    score = f"{ranking.total_score:5.1f}  #{ranking.rank}" if ranking else "  -  "
    return f"{c.id:>6}  {c.name:<24} {c.role:<26} {c.experience_years:>2}y  {score}"


def cmd_dashboard(dashboard: DashboardContext, args: argparse.Namespace) -> None:
    summary = dashboard.summary(top=args.top)
    print(f"Total candidates: {summary.total_candidates}")
    print(f"Avg. score:       {summary.average_score:.1f}")
    print(f"AI evaluations:   {summary.evaluation_count}")
    print(f"\nTop {len(summary.leaderboard)} leaderboard:")
    for r in summary.leaderboard:
        c = dashboard.get_candidate(r.candidate_id)
        print(f"  {r.rank:>3}. {c.name:<24} {r.total_score:5.1f}")


def cmd_candidates(dashboard: DashboardContext, args: argparse.Namespace) -> None:
    matches = dashboard.filter_candidates(query=args.search, role=args.role)
    print(f"{len(matches)} candidates")
    for c in matches:
        print(_candidate_line(dashboard, c))


def cmd_show(dashboard: DashboardContext, args: argparse.Namespace) -> None:
    asyncio.run(dashboard.select(args.candidate_id))
    c = dashboard.get_candidate(args.candidate_id)
    print(f"{c.name} ({c.id}) - {c.role}, {c.experience_years} years")
    print(f"Skills: {', '.join(c.skills)}")
    print("Achievements:")
    for a in c.achievements:
        print(f"  - {a}")
    print(f"Bio: {c.bio}")

    evaluation = dashboard.get_evaluation(c.id)
    ranking = dashboard.get_ranking(c.id)
    if evaluation is None:
        print("Not evaluated yet.")
    else:
        if ranking is not None:
            print(f"Rank #{ranking.rank} ({ranking.total_score:.1f})")
        print(f"  Crisis management: {evaluation.crisis_management_score:.1f}")
        print(f"  Sustainability:    {evaluation.sustainability_score:.1f}")
        print(f"  Team motivation:   {evaluation.team_motivation_score:.1f}")
        print(f"  Summary: {evaluation.summary}")
        print(f"  Last evaluated: {evaluation.last_evaluated.isoformat(timespec='seconds')}")

    note = dashboard.get_note(c.id)
    if note:
        print(f"Note: {note}")


def cmd_rankings(dashboard: DashboardContext, args: argparse.Namespace) -> None:
    rankings = dashboard.rankings
    if args.top is not None:
        rankings = rankings[: args.top]
    for r in rankings:
        c = dashboard.get_candidate(r.candidate_id)
        e = dashboard.get_evaluation(r.candidate_id)
        if e is None:
            continue
        print(
            f"{r.rank:>3}. {c.name:<24} total={r.total_score:5.1f} "
            f"crisis={e.crisis_management_score:5.1f} "
            f"green={e.sustainability_score:5.1f} "
            f"motiv={e.team_motivation_score:5.1f}"
        )


def cmd_evaluate(dashboard: DashboardContext, args: argparse.Namespace) -> None:
    results = asyncio.run(dashboard.evaluate_many(args.candidate_ids, model=args.model))
    for candidate_id, evaluation in zip(args.candidate_ids, results):
        if evaluation is None:
            print(f"{candidate_id}: evaluation already in progress")
            continue
        ranking = dashboard.get_ranking(candidate_id)
        rank = f"#{ranking.rank}" if ranking else "-"
        print(f"{candidate_id}: {rank} {evaluation.summary}")


def cmd_compare(dashboard: DashboardContext, args: argparse.Namespace) -> None:
    for candidate_id in args.candidate_ids:
        added = dashboard.toggle_compare(candidate_id)
        print(f"{'Added' if added else 'Removed'} {candidate_id}")

    compared = dashboard.compared_candidates()
    print(f"Comparing {len(compared)} candidates")
    for c in compared:
        e = dashboard.get_evaluation(c.id)
        if e is None:
            print(f"  {c.name:<24} not evaluated")
            continue
        print(
            f"  {c.name:<24} crisis={e.crisis_management_score:5.1f} "
            f"green={e.sustainability_score:5.1f} motiv={e.team_motivation_score:5.1f}"
        )


def cmd_note(dashboard: DashboardContext, args: argparse.Namespace) -> None:
    if args.text is None:
        print(dashboard.get_note(args.candidate_id) or "(no note)")
        return
    dashboard.set_note(args.candidate_id, args.text)
    print(f"Note saved for {args.candidate_id}")


def cmd_settings(settings: Settings, args: argparse.Namespace) -> None:
    """Print settings, or apply changes and write them back to YAML."""
    data = settings.model_dump()
    if args.model is not None:
        data["evaluation"]["model"] = args.model
    if args.auto_evaluate is not None:
        data["evaluation"]["auto_evaluate"] = args.auto_evaluate
    if args.theme is not None:
        data["ui"]["theme"] = args.theme
    updated = Settings.model_validate(data)

    if updated != settings:
        path = args.config or DEFAULT_CONFIG_PATH
        updated.to_yaml(path)
        print(f"Settings written to {path}")

    print(f"  Model: {updated.evaluation.model} ({AI_MODELS.get(updated.evaluation.model, 'custom')})")
    print(f"  Provider: {updated.evaluation.provider}")
    print(f"  Auto-evaluate: {updated.evaluation.auto_evaluate}")
    print(f"  Theme: {updated.ui.theme}")


def cmd_reset(dashboard: DashboardContext, args: argparse.Namespace) -> None:
    if not args.yes:
        print("Refusing to reset without --yes", file=sys.stderr)
        sys.exit(1)
    dashboard.reset()
    print(f"Reset {len(dashboard.evaluations)} evaluations; notes and comparisons cleared.")


def cmd_export(dashboard: DashboardContext, args: argparse.Namespace) -> None:
    print(export_json(dashboard))


def export_json(dashboard: DashboardContext) -> str:
    """Export candidates with their evaluation, ranking and note as JSON."""
    data = []
    for c in dashboard.candidates:
        evaluation = dashboard.get_evaluation(c.id)
        ranking = dashboard.get_ranking(c.id)
        data.append({
            **c.model_dump(mode="json", by_alias=True),
            "evaluation": evaluation.model_dump(mode="json", by_alias=True) if evaluation else None,
            "ranking": ranking.model_dump(mode="json", by_alias=True) if ranking else None,
            "note": dashboard.get_note(c.id),
        })
    return json.dumps(data, indent=2)


_COMMANDS = {
    "dashboard": cmd_dashboard,
    "candidates": cmd_candidates,
    "show": cmd_show,
    "rankings": cmd_rankings,
    "evaluate": cmd_evaluate,
    "compare": cmd_compare,
    "note": cmd_note,
    "reset": cmd_reset,
    "export": cmd_export,
}


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValidationError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "settings":
        try:
            cmd_settings(settings, args)
        except ValidationError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        return

    conn = init_db(settings.database.path)
    try:
        with DashboardContext(settings, conn) as dashboard:
            _COMMANDS[args.command](dashboard, args)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
