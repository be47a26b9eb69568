#!/usr/bin/env python3
"""
Visibility Scan Runner

Runs one AI visibility scan from the command line and prints the
prompt x model matrix.

Usage:
    # Set environment variables first (or put them in .env):
    export OPENAI_API_KEY=your_key
    export GOOGLE_GEMINI_API_KEY=your_key
    export PERPLEXITY_API_KEY=your_key

    # Run scan:
    python scripts/run_scan.py https://acme.io --industry saas

    # Custom prompts (exactly 5), without storing the result:
    python scripts/run_scan.py acme.io --no-save \
        --prompt "Best CRM?" --prompt "Top CRM for startups" ...
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


async def run_scan(url: str, industry: str = None, prompts: list = None, save: bool = True):
    """Run one scan and print the result matrix."""
    from llmcheck.integrations import ModelClients
    from llmcheck.utils.config import get_settings
    from llmcheck.visibility import InvalidScanRequest, format_results

    async with ModelClients(get_settings()) as clients:
        clients.log_status()
        scanner = clients.create_scanner()

        try:
            output = await scanner.run_visibility_scan(url, industry, prompts)
        except InvalidScanRequest as e:
            print(f"ERROR: {e}")
            return None

    print()
    print(f"AI visibility for {output.normalized_url}")
    print(f"Found in {output.total_found}/{output.total_queries} answers "
          f"({output.visibility_rate:.0%})")
    print("=" * 60)

    for row in format_results(output.results, output.prompts):
        print(f"\n{row['prompt']}")
        for model in ("chatgpt", "gemini", "perplexity"):
            cell = row[model]
            if cell["error"]:
                status = "error"
            elif cell["found"]:
                status = f"FOUND (score {cell['score']}, {cell['prominence']})"
            else:
                status = "-"
            print(f"  {model:<11} {status}")
            if cell["snippet"]:
                print(f"              {cell['snippet']}")

    answered = [r for r in output.results if not r.error]
    if save and not answered:
        print("\nEvery query failed, scan not saved")
    elif save:
        from llmcheck.database import VisibilityStore, get_db_context, init_db

        init_db()
        with get_db_context() as db:
            scan = VisibilityStore(db).save_scan(
                url,
                industry,
                output.total_found,
                output.total_queries,
                answered,
                scanned_at=output.scanned_at,
                prompts=output.prompts,
            )
            print(f"\nSaved as scan {scan.id}")

    return output


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run an AI visibility scan across ChatGPT, Gemini and Perplexity"
    )
    parser.add_argument(
        "url",
        help="Site to scan (e.g., https://acme.io)"
    )
    parser.add_argument(
        "--industry",
        default=None,
        choices=["ecommerce", "saas", "media", "education", "healthcare", "other"],
        help="Industry prompt set (default: other)"
    )
    parser.add_argument(
        "--prompt",
        action="append",
        dest="prompts",
        default=None,
        help="Custom prompt (repeat exactly 5 times)"
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Print results without storing the scan"
    )

    args = parser.parse_args()

    load_dotenv()

    result = asyncio.run(run_scan(
        url=args.url,
        industry=args.industry,
        prompts=args.prompts,
        save=not args.no_save,
    ))

    if result is None:
        sys.exit(1)


if __name__ == "__main__":
    main()
