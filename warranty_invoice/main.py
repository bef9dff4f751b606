"""
Warranty Invoice Extraction - Command-Line Entry Point.

Runs the extraction pipeline over one invoice or a directory of
invoices and writes one ExtractionResult JSON file per document.

Usage:
    Command Line:
        warranty-invoice --input invoice.jpg --output results/
        warranty-invoice --input ./invoices/ --output ./results/ --no-ai

    Python:
        from warranty_invoice.main import run_extraction
        results = run_extraction("invoice.jpg")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from warranty_invoice.config import ConfigurationManager
from warranty_invoice.utils.exceptions import InvoiceExtractionError
from warranty_invoice.utils.helpers import ensure_directory, safe_filename
from warranty_invoice.utils.logger import ROOT_LOGGER_NAME, get_logger, set_level, setup_logger_from_config


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Warranty claim invoice extraction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Process single invoice:
        warranty-invoice --input invoice.jpg --output results/

    Process directory, offline only:
        warranty-invoice --input ./invoices/ --output ./results/ --no-ai
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Input file or directory containing invoices"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default="outputs",
        help="Output directory for JSON results (default: outputs)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Disable the AI fallback tiers"
    )

    parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Search input directory recursively"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)
    logger = setup_logger_from_config()

    if args.debug:
        set_level("DEBUG")
    elif args.quiet:
        set_level("WARNING")

    logger.info("=" * 60)
    logger.info("WARRANTY INVOICE EXTRACTION")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output}")

    return config


def collect_inputs(input_path: str, recursive: bool = False) -> List[Path]:
    """
    Resolve the input argument to a list of documents.

    Raises:
        FileNotFoundError: If input path doesn't exist.
    """
    from warranty_invoice.input_handler import InputHandler

    path = Path(input_path)
    if not path.exists():
        raise FileNotFoundError(f"Input path not found: {path}")

    if path.is_file():
        return [path]
    return InputHandler().discover(path, recursive=recursive)


def run_extraction(
    input_path: str,
    output_dir: Optional[str] = None,
    use_ai: bool = True,
    recursive: bool = False
) -> List[Dict[str, Any]]:
    """
    Run the extraction pipeline over a file or directory.

    Documents that fail are logged and skipped so one bad scan does not
    stop a batch.

    Args:
        input_path: Path to input file or directory.
        output_dir: Directory for <name>.json results; None to skip writing.
        use_ai: Whether the AI fallback tiers may be used.
        recursive: Search directories recursively.

    Returns:
        List of result dictionaries, one per successfully extracted file.

    Example:
        >>> results = run_extraction("invoices/", "outputs/")
        >>> for r in results:
        ...     print(r['invoiceNumber'], r['confidence'])
    """
    from warranty_invoice.extraction.pipeline import InvoiceExtractionPipeline
    from warranty_invoice.input_handler import InputHandler

    logger = get_logger(__name__)

    files = collect_inputs(input_path, recursive=recursive)
    logger.info(f"Processing {len(files)} file(s)...")

    input_handler = InputHandler()
    pipeline = InvoiceExtractionPipeline(use_ai=use_ai)

    out_path = ensure_directory(output_dir) if output_dir else None
    results = []

    for file_path in files:
        logger.info(f"Processing: {file_path.name}")
        try:
            document = input_handler.load(file_path)
            result = pipeline.extract(document)
        except InvoiceExtractionError as e:
            logger.error(f"Error processing {file_path.name}: {e}")
            continue

        logger.info(
            f"  Extracted: Invoice #{result.invoice_number or 'N/A'}, "
            f"total {result.costs.total:.2f}, confidence {result.confidence}, "
            f"source {result.source.value}"
        )
        for warning in result.warnings:
            logger.warning(f"  {file_path.name}: {warning}")

        if out_path is not None:
            target = out_path / f"{safe_filename(file_path.stem)}.json"
            target.write_text(result.to_json(), encoding='utf-8')
            logger.debug(f"Wrote {target}")

        results.append(result.to_dict())

    return results


def main(argv: Optional[List[str]] = None) -> int:
    """
    Console entry point.

    Returns:
        0 when at least one invoice was extracted, 1 when none were or
        the arguments were invalid, 130 on Ctrl-C.
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        results = run_extraction(
            input_path=args.input,
            output_dir=args.output,
            use_ai=not args.no_ai,
            recursive=args.recursive
        )

        logger.info("=" * 60)
        logger.info(f"Extraction complete. {len(results)} result(s) written.")
        logger.info("=" * 60)

        return 0 if results else 1

    except (FileNotFoundError, ValueError) as e:
        # Bad arguments or an unreadable config file
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        logging.getLogger(ROOT_LOGGER_NAME).warning("Interrupted, no partial results kept")
        return 130


if __name__ == "__main__":
    sys.exit(main())
