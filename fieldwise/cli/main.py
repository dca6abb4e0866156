"""CLI: fieldwise classify, config validate."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from ..config import load_config, validate_config
from ..engine import FieldwiseEngine
from ..types import ClassificationRun, FieldDescriptor

BRAINS = ("keyword", "generative", "auto", "compare")


def _run_to_dict(run: ClassificationRun) -> dict:
    return {
        "classifier": run.classifier,
        "state": run.state.value,
        "latency_ms": run.latency_ms,
        "decision": run.decision.to_dict() if run.decision else None,
        "error": run.error,
    }


async def _classify(engine: FieldwiseEngine, descriptor: FieldDescriptor, brain: str) -> dict:
    if brain == "compare":
        comparison = await engine.compare(descriptor)
        return {
            "field": descriptor.name,
            "rule_based": _run_to_dict(comparison.rule_based),
            "generative": _run_to_dict(comparison.generative),
        }
    if brain == "auto":
        decision = await engine.classify(descriptor)
        return {"field": descriptor.name, "decision": decision.to_dict()}
    run = await engine.run(descriptor, brain=brain)
    return {"field": descriptor.name, **_run_to_dict(run)}


def cmd_classify(args):
    """Classify one field and print the decision as JSON."""
    engine = FieldwiseEngine(config_path=args.config)

    if args.brain == "generative" and engine.generative is None:
        print("No generative provider configured.", file=sys.stderr)
        sys.exit(1)

    descriptor = FieldDescriptor(
        name=args.name,
        kind=args.kind,
        nearby_context=args.context or "",
    )
    output = asyncio.run(_classify(engine, descriptor, args.brain))
    print(json.dumps(output, indent=2, ensure_ascii=False))


def cmd_config_validate(args):
    """Validate config file."""
    config = load_config(args.config)
    errors = validate_config(config)
    if errors:
        print("Config errors:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        sys.exit(1)
    print("Config is valid.")
    print(f"  Geo strategy:  {config.rules.geo_strategy}")
    print(f"  Generative:    {'enabled' if config.generative.enabled else 'disabled'}"
          f" (provider: {config.generative.provider or 'none'})")
    print(f"  Max turns:     {config.generative.max_turns}")
    print(f"  Providers:     {', '.join(config.providers) or 'none'}")


def main():
    parser = argparse.ArgumentParser(
        prog="fieldwise",
        description="Pick the input control strategy for a form field",
    )
    parser.add_argument("--config", "-c", help="Path to config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log classifier activity to stderr")

    subparsers = parser.add_subparsers(dest="command")

    # classify
    classify_parser = subparsers.add_parser("classify", help="Classify a field name")
    classify_parser.add_argument("name", help="Field label or prompt text")
    classify_parser.add_argument("--kind", "-k", default="text", help="Field type hint")
    classify_parser.add_argument("--context", help="Text surrounding the field")
    classify_parser.add_argument(
        "--brain", "-b", choices=BRAINS, default="keyword",
        help="Classifier to use (auto = generative with keyword fallback)",
    )

    # config validate
    config_parser = subparsers.add_parser("config", help="Config operations")
    config_sub = config_parser.add_subparsers(dest="config_command")
    config_sub.add_parser("validate", help="Validate config file")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "classify":
        cmd_classify(args)
    elif args.command == "config":
        if args.config_command == "validate":
            cmd_config_validate(args)
        else:
            print("Usage: fieldwise config validate")
            sys.exit(1)


if __name__ == "__main__":
    main()
