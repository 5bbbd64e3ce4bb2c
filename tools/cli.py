#!/usr/bin/env python3
# =============================================================================
# CLI Tool for the Message Handler
# =============================================================================
# Runs a payload through the same handler the Lambda uses.
#
# Usage:
#   python tools/cli.py --sample sqs
#   python tools/cli.py --json '{"Records": [{"body": "hi"}]}'
#   python tools/cli.py --file event.json
# =============================================================================

import argparse
import json
import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.app.event_handler import handle
from src.runtime.deps import create_deps
from src.runtime.errors import HandlerError

SAMPLES = {
    "sqs": {
        "Records": [
            {"messageId": "sample-1", "eventSource": "aws:sqs", "body": "hello from sqs"},
            {"messageId": "sample-2", "eventSource": "aws:sqs", "body": "second message"},
        ]
    },
    "sns": {
        "Records": [
            {"EventSource": "aws:sns", "Sns": {"MessageId": "sample-1", "Message": "hello from sns"}},
        ]
    },
    "eventbridge": {
        "id": "sample-1",
        "source": "custom.cli",
        "detail-type": "sample.event",
        "detail": {"hello": "eventbridge"},
    },
}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Invoke the message handler locally",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --sample sqs
  %(prog)s --sample eventbridge --verbose
  %(prog)s --json '{"Records": [{"Sns": {"Message": "x"}}]}'
  %(prog)s --file event.json
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--json", "-j", help="JSON payload")
    source.add_argument("--file", "-f", help="JSON file to load payload from")
    source.add_argument("--sample", "-s", choices=sorted(SAMPLES), help="Built-in sample payload")
    parser.add_argument("--region", "-r", help="AWS region")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show handler logs")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Undecoded bytes, so malformed input is reported as a decode error
    if args.file:
        with open(args.file, "rb") as f:
            payload = f.read()
    elif args.json:
        payload = args.json.encode("utf-8")
    else:
        payload = SAMPLES[args.sample]

    deps = create_deps(region=args.region)

    try:
        result = handle(payload, deps)
    except HandlerError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
