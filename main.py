"""Main entry point for the dayplan scheduling engine."""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

import yaml

from dayplan.engine.filtering import MANDATORY_FILTERS, SORT_MODES, filter_templates, sort_templates
from dayplan.engine.lanes import LaneAssigner
from dayplan.engine.recurrence import RecurrenceEngine
from dayplan.engine.scheduler import SchedulingEngine
from dayplan.errors import DayplanError
from dayplan.fixtures.generator import TemplateGenerator
from dayplan.models.schedule import TimelineBlock
from dayplan.models.task import Settings
from dayplan.utils.config import load_config, get_default_config
from dayplan.utils.datetime_utils import format_date, parse_date, to_minutes
from dayplan.utils.loader import load_day_file


def _load_config(config_path: str) -> dict:
    return load_config(config_path) if Path(config_path).exists() else get_default_config()


def run_schedule(args, config: dict):
    """Build and print the schedule for one date."""
    templates, instances, override = load_day_file(args.data)
    engine = SchedulingEngine(config, recurrence=RecurrenceEngine(args.holiday))
    result = engine.build_schedule(
        args.date,
        templates,
        instances,
        Settings.from_config(config),
        daily_override=override,
        current_time=args.now,
    )

    print(result.to_human_readable())

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(result.to_dict(), f, indent=2, default=str)
        print(f"\nSchedule saved to: {args.output}")

    return result


def run_lanes(args, config: dict):
    """Schedule a date, then lay its blocks out in timeline lanes."""
    result = run_schedule(args, config)
    if not result.success:
        return result

    blocks = [
        TimelineBlock(to_minutes(b.start_time), to_minutes(b.end_time), b.template_id)
        for b in result.schedule
    ]
    assigner = LaneAssigner(config)
    if args.max_lanes:
        assigner.max_lanes = args.max_lanes

    print(f"\nLanes (max {assigner.max_lanes}):")
    for block, lane in zip(blocks, assigner.assign(blocks)):
        where = "hidden" if lane.hidden else f"lane {lane.lane_index}"
        print(f"  {block.id:<20} {where}")
    return result


def run_expand(args, config: dict):
    """Print the occurrences of each template's rule in a date range."""
    templates, _, _ = load_day_file(args.data)
    engine = RecurrenceEngine(args.holiday)
    end = args.end or args.date

    for template in templates:
        dates = engine.expand(template.recurrence_rule, args.date, end, template.created_on)
        following = engine.next_occurrence(template.recurrence_rule, end, template.created_on)
        print(f"{template.id} ({template.task_name}):")
        if template.recurrence_rule is None:
            print("  no recurrence; a candidate every day")
            continue
        print(f"  {', '.join(format_date(d) for d in dates) or 'no occurrences'}")
        if following:
            print(f"  next after {end}: {format_date(following)}")


def run_validate(args, config: dict) -> int:
    """Validate every template's recurrence rule; returns the failure count."""
    templates, _, _ = load_day_file(args.data)
    engine = RecurrenceEngine()
    failures = 0

    for template in templates:
        result = engine.validate_rule(template.recurrence_rule)
        if result.is_valid:
            continue
        failures += 1
        print(f"{template.id}: invalid recurrence rule")
        for error in result.errors:
            print(f"  - {error}")

    print(f"{len(templates) - failures}/{len(templates)} templates valid")
    return failures


def run_templates(args, config: dict):
    """List templates through the library filters."""
    templates, _, _ = load_day_file(args.data)
    shown = sort_templates(
        filter_templates(templates, query=args.query, mandatory=args.mandatory, time_windows=args.window),
        args.sort,
    )
    for t in shown:
        when = (t.default_time or "no time") if t.is_fixed else t.time_window
        flag = "mandatory" if t.is_mandatory else "skippable"
        print(f"  [{t.priority}] {t.task_name:<30} {when:<10} {t.duration_minutes:>4}m  {flag}")
    print(f"{len(shown)} of {len(templates)} templates")


def run_generate(args, config: dict):
    """Write a generated template set to a YAML file."""
    generator = TemplateGenerator(seed=args.seed, config=config)
    day = parse_date(args.date)
    templates, instances = generator.generate_day(day, args.count)

    document = {
        'templates': [t.to_dict() for t in templates],
        'instances': [vars(i) for i in instances],
    }
    with open(args.output, 'w') as f:
        yaml.safe_dump(document, f, sort_keys=False)

    print(f"Generated {len(templates)} templates")
    print(f"Generated {len(instances)} instances")
    print(f"Templates saved to: {args.output}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Daily task scheduling engine"
    )
    parser.add_argument(
        'command',
        choices=['schedule', 'lanes', 'expand', 'validate', 'templates', 'generate-templates'],
        help='Command to run'
    )
    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )
    parser.add_argument(
        '--data',
        type=str,
        default='templates.yaml',
        help='Templates/instances file, YAML or JSON (default: templates.yaml)'
    )
    parser.add_argument(
        '--date',
        type=str,
        default=format_date(date.today()),
        help='Target date YYYY-MM-DD (default: today)'
    )
    parser.add_argument('--end', type=str, help='Range end date for expand')
    parser.add_argument('--now', type=str, help='Current time HH:MM; nothing flexible is placed before it')
    parser.add_argument('--holiday', action='append', default=[], help='Holiday date for business_days rules')
    parser.add_argument('--max-lanes', type=int, help='Override the timeline lane cap')
    parser.add_argument('--query', type=str, help='Filter templates by name/description')
    parser.add_argument('--mandatory', choices=MANDATORY_FILTERS, default='all')
    parser.add_argument('--window', action='append', help='Filter flexible templates by time window')
    parser.add_argument('--sort', choices=SORT_MODES, default='name')
    parser.add_argument('--seed', type=int, default=42, help='Seed for generate-templates')
    parser.add_argument('--count', type=int, help='Template count for generate-templates')
    parser.add_argument('--output', type=str, help='Output file (JSON for schedule, YAML for generate)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        config = _load_config(args.config)

        if args.command == 'schedule':
            result = run_schedule(args, config)
            return 0 if result.success else 1
        elif args.command == 'lanes':
            result = run_lanes(args, config)
            return 0 if result.success else 1
        elif args.command == 'expand':
            run_expand(args, config)
        elif args.command == 'validate':
            return 1 if run_validate(args, config) else 0
        elif args.command == 'templates':
            run_templates(args, config)
        elif args.command == 'generate-templates':
            if not args.output:
                args.output = 'templates.yaml'
            run_generate(args, config)
    except (FileNotFoundError, ValueError, DayplanError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
