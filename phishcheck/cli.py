"""
Command-line front end: analyze files and/or text, print JSON.
"""
import argparse
import logging
import logging.config
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from phishcheck.config import logging_config
from phishcheck.exceptions import ExtractionError, NoInputError
from phishcheck.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)

EXIT_NO_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='phishcheck',
        description='Score documents for phishing / social-engineering intent (offline heuristics)'
    )
    parser.add_argument('files', nargs='*', type=Path, help='PDF, image, .eml or .txt files')
    parser.add_argument('--text', help='Text to analyze alongside the files')
    parser.add_argument('--stdin', action='store_true', help='Read additional text from standard input')
    parser.add_argument('--indent', type=int, default=2, help='JSON indentation (default: 2)')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.config.dictConfig(logging_config)

    uploads = []
    unreadable = []
    for path in args.files:
        try:
            content = path.read_bytes()
        except OSError as e:
            logger.error(f"Cannot read {path}: {e}")
            unreadable.append(ExtractionError(path.name, f"Cannot read file: {e.strerror or e}"))
            continue
        content_type, _ = mimetypes.guess_type(path.name)
        uploads.append((path.name, content, content_type))

    pasted = [args.text or '']
    if args.stdin:
        pasted.append(sys.stdin.read())
    pasted_text = '\n'.join(part for part in pasted if part)

    try:
        analysis = AnalysisService().analyze_documents(uploads, pasted_text, unreadable)
    except NoInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        for failure in e.failures:
            print(f"  {failure.source}: {failure.detail}", file=sys.stderr)
        return EXIT_NO_INPUT

    print(analysis.model_dump_json(indent=args.indent))
    return 0


if __name__ == '__main__':
    sys.exit(main())
