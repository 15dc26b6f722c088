"""Entry point for running the CLI as a module."""

import argparse
import asyncio
import sys

from marketing_hub.core.generator import ContentGenerator, GenerationHandle

from .runner import StartFn, main


def _master_content(args: argparse.Namespace) -> StartFn:
    def start(generator: ContentGenerator) -> GenerationHandle:
        return generator.start_generating_master_content(
            args.campaign_id, args.workspace_id, args.language
        )

    return start


def _variants(args: argparse.Namespace) -> StartFn:
    def start(generator: ContentGenerator) -> GenerationHandle:
        return generator.start_generating_variants(
            args.master_content_id, args.platforms, args.workspace_id, args.language
        )

    return start


def _batch(args: argparse.Namespace) -> StartFn:
    def start(generator: ContentGenerator) -> GenerationHandle:
        return generator.start_batch_generating_posts(
            args.campaign_id,
            args.platforms,
            args.num_masters,
            args.workspace_id,
            args.language,
        )

    return start


def _worksheet(args: argparse.Namespace) -> StartFn:
    def start(generator: ContentGenerator) -> GenerationHandle:
        return generator.start_generating_worksheet(
            args.business_description,
            args.target_audience,
            args.pain_points,
            args.usp,
            args.language,
        )

    return start


def _brand_identity(args: argparse.Namespace) -> StartFn:
    def start(generator: ContentGenerator) -> GenerationHandle:
        return generator.start_generating_brand_identity(args.worksheet_id, args.language)

    return start


def _strategy(args: argparse.Namespace) -> StartFn:
    def start(generator: ContentGenerator) -> GenerationHandle:
        return generator.start_generating_marketing_strategy(
            args.worksheet_id,
            args.brand_identity_id,
            args.customer_profile_id,
            args.goal,
            args.language,
        )

    return start


def _content_briefs(args: argparse.Namespace) -> StartFn:
    def start(generator: ContentGenerator) -> GenerationHandle:
        return generator.start_generating_content_briefs(
            args.campaign_id, args.workspace_id, args.angles_per_stage, args.language
        )

    return start


def _customer_profile(args: argparse.Namespace) -> StartFn:
    def start(generator: ContentGenerator) -> GenerationHandle:
        return generator.start_generating_customer_profile(
            args.brand_identity_id, args.language
        )

    return start


def _chat(args: argparse.Namespace) -> StartFn:
    def start(generator: ContentGenerator) -> GenerationHandle:
        return generator.start_chat(args.message, args.thread_id)

    return start


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Run AI content generation against the marketing agent backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Agent backend URL (default: from config, http://localhost:8000)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines on stderr",
    )
    parser.add_argument(
        "--show-chunks",
        action="store_true",
        help="Print a row for every streamed text chunk",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("health", help="Check whether the backend is reachable")

    def operation(name: str, help_text: str, build) -> argparse.ArgumentParser:
        sub = commands.add_parser(name, help=help_text)
        sub.set_defaults(build=build)
        return sub

    def language(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--language",
            default=None,
            help="Output language (default: from config, Vietnamese)",
        )

    sub = operation("master-content", "Generate master content", _master_content)
    sub.add_argument("--campaign-id", required=True)
    sub.add_argument("--workspace-id", required=True)
    language(sub)

    sub = operation("variants", "Generate platform variants", _variants)
    sub.add_argument("--master-content-id", required=True)
    sub.add_argument("--platforms", nargs="+", required=True)
    sub.add_argument("--workspace-id", required=True)
    language(sub)

    sub = operation("batch", "Batch-generate posts with variants", _batch)
    sub.add_argument("--campaign-id", required=True)
    sub.add_argument("--workspace-id", required=True)
    sub.add_argument("--platforms", nargs="+", required=True)
    sub.add_argument("--num-masters", type=int, default=1)
    language(sub)

    sub = operation("worksheet", "Generate a business worksheet", _worksheet)
    sub.add_argument("--business-description", required=True)
    sub.add_argument("--target-audience", required=True)
    sub.add_argument("--pain-points", required=True)
    sub.add_argument("--usp", required=True, help="Unique selling proposition")
    language(sub)

    sub = operation("brand-identity", "Generate a brand identity", _brand_identity)
    sub.add_argument("--worksheet-id", required=True)
    language(sub)

    sub = operation("strategy", "Generate a marketing strategy", _strategy)
    sub.add_argument("--worksheet-id", required=True)
    sub.add_argument("--brand-identity-id", required=True)
    sub.add_argument("--customer-profile-id", required=True)
    sub.add_argument("--goal", required=True)
    language(sub)

    sub = operation("content-briefs", "Generate content briefs", _content_briefs)
    sub.add_argument("--campaign-id", required=True)
    sub.add_argument("--workspace-id", required=True)
    sub.add_argument("--angles-per-stage", type=int, default=2)
    language(sub)

    sub = operation(
        "customer-profile", "Generate a customer profile", _customer_profile
    )
    sub.add_argument("--brand-identity-id", required=True)
    language(sub)

    sub = operation("chat", "Send a message to the marketing agents", _chat)
    sub.add_argument("--message", required=True)
    sub.add_argument("--thread-id", required=True)

    return parser.parse_args(argv)


def cli_entry() -> None:
    """CLI entry point."""
    args = parse_args()
    start = args.build(args) if args.command != "health" else None

    try:
        exit_code = asyncio.run(
            main(
                start,
                base_url=args.base_url,
                debug=args.debug,
                json_logs=args.json_logs,
                show_chunks=args.show_chunks,
            )
        )
    except KeyboardInterrupt:
        sys.exit(130)
    sys.exit(exit_code)


if __name__ == "__main__":
    cli_entry()
