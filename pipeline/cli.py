# cli.py
import argparse
import json
import sys
from typing import List, Optional

from models.schemas import InputSource, OutputFormat, ValidatorSettings
from pipeline.engine import EngineConfig, run_validation, write_report
from utils.logger import get_logger, log_stage

EXIT_OK = 0
EXIT_INVALID_TARGETS = 1
EXIT_UNREADABLE_INPUT = 2
EXIT_UNWRITABLE_OUTPUT = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate scan targets (IPs, CIDRs, IP ranges, IPv6, domains) before submission."
    )
    parser.add_argument("--config", help="Path to a YAML file with 'settings' and 'sources'")
    parser.add_argument(
        "--input",
        action="append",
        default=[],
        help="File with targets, one or more per line ('-' for stdin). Repeatable.",
    )
    parser.add_argument(
        "--target",
        action="append",
        default=[],
        help="Inline target text (same separators as files). Repeatable.",
    )
    parser.add_argument("--format", choices=[f.value for f in OutputFormat], help="Report format")
    parser.add_argument("--output", help="Also write the JSON report to this path")
    parser.add_argument("--log-level", help="Logging level (default from config, else INFO)")
    parser.add_argument(
        "--no-fail",
        action="store_true",
        help="Exit 0 even when invalid targets are found.",
    )
    return parser


def _collect_sources(args: argparse.Namespace, settings: ValidatorSettings) -> List[InputSource]:
    sources: List[InputSource] = []
    for location in args.input:
        name = "stdin" if location == "-" else location
        sources.append(InputSource(name=name, type="file", location=location))
    for index, content in enumerate(args.target, start=1):
        sources.append(InputSource(name=f"inline-{index}", type="inline", content=content))
    if not sources:
        sources = list(settings.sources)
    if not sources:
        sources = [InputSource(name="stdin", type="file", location="-")]
    return sources


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = args.log_level or "INFO"
    logger = get_logger("cli", log_level, "cli.log")

    settings = ValidatorSettings()
    if args.config:
        try:
            settings = EngineConfig.load_settings(args.config, logger)
        except Exception as e:
            logger.error("Unable to load config '%s': %s", args.config, e)
            raise

    log_level = args.log_level or settings.log_level
    logger = get_logger("cli", log_level, "cli.log")
    output_format = OutputFormat(args.format) if args.format else settings.output_format
    fail_on_errors = settings.fail_on_errors and not args.no_fail
    sources = _collect_sources(args, settings)

    logger.info(
        "CLI invocation | sources=%d format=%s output=%s fail_on_errors=%s",
        len(sources),
        output_format.value,
        args.output,
        fail_on_errors,
    )

    try:
        with log_stage(logger, "cli_total"):
            report = run_validation(sources=sources, log_level=log_level)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.error("Unable to read targets: %s", e)
        print(f"error: unable to read targets: {e}", file=sys.stderr)
        return EXIT_UNREADABLE_INPUT

    if output_format is OutputFormat.JSON:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        text = report.render_text()
        if text:
            print(text)

    if args.output:
        try:
            write_report(report, args.output, logger)
        except OSError as e:
            logger.error("Unable to write report to '%s': %s", args.output, e)
            print(f"error: unable to write report: {e}", file=sys.stderr)
            return EXIT_UNWRITABLE_OUTPUT

    if report.errors and fail_on_errors:
        return EXIT_INVALID_TARGETS
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
