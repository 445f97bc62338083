#!/usr/bin/env python3
"""
CLI script to build the Bot API schema.

Downloads the documentation page (or reads a saved copy with --file), parses
every method and object, and prints the schema as JSON.

Environment (a .env file is loaded first):
  TG_API_URL         documentation page URL
  TG_CURRENCIES_URL  payments currencies.json URL
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from tg_api_schema.exceptions import FetchError, ScrapeError
from tg_api_schema.fetcher import fetch_currencies
from tg_api_schema.main import SchemaBuilder


def main():
    parser = argparse.ArgumentParser(description="Build a JSON schema of the Telegram Bot API")
    parser.add_argument("--file", "-f", help="Saved documentation page to parse instead of downloading")
    parser.add_argument("--output", "-o", help="Output JSON file")
    parser.add_argument("--no-currencies", action="store_true", help="Skip the currencies download")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    builder = SchemaBuilder(log_level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        if args.file:
            currencies = [] if args.no_currencies else fetch_currencies()
            schema = builder.build_from_file(args.file, currencies)
        else:
            schema = builder.build_from_url(include_currencies=not args.no_currencies)
    except FetchError as e:
        print(f"✗ {e.message}", file=sys.stderr)
        print(json.dumps(e.to_response(), indent=2), file=sys.stderr)
        sys.exit(1)
    except ScrapeError as e:
        print(f"✗ Page structure not recognised: {e.message}", file=sys.stderr)
        if e.details:
            print(f"  {e.details}", file=sys.stderr)
        sys.exit(1)

    # ensure_ascii=False keeps emoji enum values readable
    output = json.dumps(schema.model_dump(mode="json", by_alias=True, exclude_none=True),
                        indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"✓ {len(schema.methods)} methods, {len(schema.objects)} objects → {args.output}")
    else:
        print(output)


if __name__ == "__main__":
    main()
