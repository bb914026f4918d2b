#!/usr/bin/env python3
"""
Invoice to Tally Voucher Converter - Main Entry Point.

Converts a scanned invoice (PDF or image) into a Tally ERP voucher in
Tally's XML import format.

Usage:
    Command Line:
        python main.py --input invoice.pdf --output voucher.xml
        python main.py --record extracted.json --mode minimal

    Python:
        from main import run_conversion
        result = run_conversion("invoice.pdf")

Exit codes:
    0   voucher written
    1   any failure (input, extraction, malformed record, output, config)
    130 cancelled with Ctrl-C
"""

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import ConfigurationManager
from invoice_voucher.utils.logger import setup_logger_from_config, get_logger
from invoice_voucher.utils.exceptions import InvoiceVoucherError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice to Tally Voucher Converter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Extract and convert an invoice:
        python main.py --input invoice.pdf --output voucher.xml

    Re-compile an already extracted record:
        python main.py --record extracted.json --json-output response.json

    Header-only voucher without company context:
        python main.py --input invoice.jpg --mode minimal --no-company
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input", "-i",
        type=str,
        help="Invoice PDF or image to extract and convert"
    )
    source.add_argument(
        "--record", "-r",
        type=str,
        help="Extracted invoice record (JSON) to convert without extraction"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Tally XML output file (default: <output.directory>/<invoice number>.xml)"
    )

    parser.add_argument(
        "--json-output",
        type=str,
        default=None,
        help="Write the JSON response document to this file"
    )

    parser.add_argument(
        "--mode", "-m",
        choices=["full", "minimal"],
        default=None,
        help="XML output mode (default: voucher.output_mode)"
    )

    parser.add_argument(
        "--no-company",
        action="store_true",
        help="Omit the SVCURRENTCOMPANY company context"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
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
        help="Only print errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Load configuration and set up logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    if args.config:
        ConfigurationManager.reset()
    config = ConfigurationManager(args.config)

    logger = setup_logger_from_config(
        quiet=args.quiet,
        level="DEBUG" if args.debug else None
    )

    logger.info("=" * 60)
    logger.info("INVOICE TO TALLY VOUCHER CONVERTER")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Source: {args.input or args.record}")

    return config


def run_conversion(
    input_path: Optional[str] = None,
    record_path: Optional[str] = None,
    output_path: Optional[str] = None,
    json_output_path: Optional[str] = None,
    mode: Optional[str] = None,
    include_company: Optional[bool] = None
):
    """
    Run the conversion pipeline for one invoice.

    Exactly one of input_path (extract with Gemini first) or record_path
    (an already extracted JSON record) must be given.

    Args:
        input_path: Invoice PDF or image.
        record_path: Extracted record JSON file.
        output_path: Tally XML output file.
        json_output_path: JSON response output file.
        mode: "full" or "minimal"; configuration default when None.
        include_company: Override voucher.include_company.

    Returns:
        PipelineResult.

    Example:
        >>> result = run_conversion(record_path="extracted.json")
        >>> result.compilation.voucher.is_balanced()
        True
    """
    from invoice_voucher.extraction import GeminiExtractionAdapter, JSONRecordAdapter
    from invoice_voucher.output_handler import OutputHandler
    from invoice_voucher.pipeline import InvoicePipeline
    from invoice_voucher.voucher import CompilerOptions, VoucherCompiler

    if bool(input_path) == bool(record_path):
        raise ValueError("Exactly one of input_path or record_path is required")

    options = CompilerOptions.from_config(output_mode=mode)
    if include_company is not None:
        options = dataclasses.replace(options, include_company=include_company)

    if record_path:
        adapter = JSONRecordAdapter(record_path)
    else:
        adapter = GeminiExtractionAdapter.from_config()

    pipeline = InvoicePipeline(
        adapter,
        compiler=VoucherCompiler(options),
        output_handler=OutputHandler()
    )

    if record_path:
        record = adapter.load(record_path)
        return pipeline.convert(
            record,
            source=Path(record_path).name,
            xml_path=output_path,
            json_path=json_output_path
        )

    return pipeline.run(input_path, xml_path=output_path, json_path=json_output_path)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = None
    try:
        load_dotenv(find_dotenv(usecwd=True))

        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        result = run_conversion(
            input_path=args.input,
            record_path=args.record,
            output_path=args.output,
            json_output_path=args.json_output,
            mode=args.mode,
            include_company=False if args.no_company else None
        )

        validation = result.compilation.validation
        for error in validation.errors:
            logger.warning(f"Finding: {error}")

        logger.info("=" * 60)
        logger.info(f"Voucher: {result.compilation.voucher!r}")
        for kind, path in result.output_paths.items():
            if path:
                logger.info(f"{kind}: {path}")
        logger.info("=" * 60)

        return 0

    except InvoiceVoucherError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except (FileNotFoundError, yaml.YAMLError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args is not None and args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
