#!/usr/bin/env python3
"""
Levine Links - enhanced newsletter wrapper

Reads a newsletter (an HTML file, or a JSON file with the parsed message),
wraps it and writes the enhanced HTML plus its metadata to the output
directory as <date>.html and <date>.json.
"""

import os
import sys
import json
import logging
import argparse
from datetime import datetime, timezone

from levine_links.config import load_config
from levine_links.mail_handling.parser import NewsletterParser
from levine_links.wrap.wrapper import wrap_newsletter

logger = logging.getLogger(__name__)


def setup_logging(config):
    """Configure the root logger from the ``logging`` config section."""
    handlers = [logging.StreamHandler()]
    log_file = config.get('file')
    if log_file:
        os.makedirs(os.path.dirname(log_file) or '.', exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, str(config.get('level', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def read_message(path, subject=None):
    """Load the message to wrap from *path*."""
    with open(path, 'r', encoding='utf-8', errors='replace') as file:
        raw = file.read()

    if path.lower().endswith('.json'):
        message = json.loads(raw)
        if not isinstance(message, dict):
            raise ValueError(f"expected a JSON object, got {type(message).__name__}")
    else:
        message = {'html': raw}

    if subject:
        message['subject'] = subject
    return message


def write_outputs(output_dir, parsed, result):
    """Write the wrapped newsletter and its metadata."""
    os.makedirs(output_dir, exist_ok=True)
    date = parsed['date']

    html_path = os.path.join(output_dir, f"{date}.html")
    with open(html_path, 'w', encoding='utf-8') as file:
        file.write(result.html)

    meta_path = os.path.join(output_dir, f"{date}.json")
    with open(meta_path, 'w', encoding='utf-8') as file:
        json.dump({
            'date': date,
            'subject': parsed['subject'],
            'preview': result.preview,
            'ogImage': result.og_image,
            'processedAt': datetime.now(timezone.utc).isoformat(),
        }, file, indent=2)

    return html_path, meta_path


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Wrap a forwarded newsletter with link enrichment.")
    parser.add_argument('input', help="HTML file, or JSON file with subject/date/html/text")
    parser.add_argument('--subject', help="Subject to use instead of the message's")
    parser.add_argument('--limit', type=int, help="Only the last N unique links (paywalled or not) are eligible for a summary")
    parser.add_argument('--config', help="Path to config.yaml")
    parser.add_argument('--output', help="Output directory")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    config = load_config(args.config)
    setup_logging(config['logging'])

    logger.info("Levine Links starting up")

    try:
        message = read_message(args.input, args.subject)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read {args.input}: {e}")
        return 1

    parsed = NewsletterParser().parse(message)
    if parsed['skip']:
        return 0

    logger.info(f"Processing: {parsed['subject']} ({parsed['date']})")
    result = wrap_newsletter(
        parsed['html'],
        api_key=config['summarizer']['api_key'],
        limit=args.limit,
        config=config,
    )

    output_dir = args.output or config['output']['directory']
    html_path, meta_path = write_outputs(output_dir, parsed, result)
    logger.info(f"Done: {parsed['subject']} -> {html_path}, {meta_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
