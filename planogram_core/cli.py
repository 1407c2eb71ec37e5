import argparse
import asyncio
import sys
from typing import List, Optional

from planogram_core.data_processing.layout_loader import LayoutLoader
from planogram_core.data_processing.layout_validator import LayoutValidator
from planogram_core.models.planogram import Planogram
from planogram_core.persistence.document_store import JsonFileDocumentStore
from planogram_core.persistence.repository import PlanogramRepository
from planogram_core.persistence.snapshot import deserialize, serialize
from planogram_core.placement.engine import PlacementEngine
from planogram_core.reporting.export_handler import ExportHandler, capacity_report
from planogram_core.utils.config import LayoutSettings, load_settings
from planogram_core.utils.error_handler import PlanogramError
from planogram_core.utils.logger import configure_logging


def _load_planogram(loader: LayoutLoader, path: str) -> Planogram:
    return deserialize(loader.load_snapshot(path))


def run_validate(args, settings: LayoutSettings, logger) -> int:
    """Audit a snapshot file, optionally against a product catalog"""
    loader = LayoutLoader(args.data_path)
    planogram = _load_planogram(loader, args.snapshot)
    validator = LayoutValidator(PlacementEngine(settings.scale, settings.enforce_bounds))

    is_valid, _ = validator.validate_planogram(planogram)
    print(validator.generate_validation_report())

    if args.catalog:
        catalog = loader.load_catalog(args.catalog)
        catalog_valid, _ = validator.validate_against_catalog(planogram, catalog)
        print(validator.generate_validation_report())
        is_valid = is_valid and catalog_valid

    logger.info(f"Validation of {args.snapshot}: {'passed' if is_valid else 'failed'}")
    return 0 if is_valid else 1


def run_capacity(args, settings: LayoutSettings, logger) -> int:
    """Print shelf capacity per row"""
    planogram = _load_planogram(LayoutLoader(args.data_path), args.snapshot)
    report = capacity_report(planogram)
    if report.empty:
        print("No rows defined.")
    else:
        print(report.to_string(index=False))
    return 0


def run_export(args, settings: LayoutSettings, logger) -> int:
    """Export a snapshot to JSON, CSV or Excel"""
    planogram = _load_planogram(LayoutLoader(args.data_path), args.snapshot)
    exporter = ExportHandler(args.output_dir)
    name = args.name or planogram.id

    if args.format == 'json':
        files = [exporter.export_to_json(planogram, f"{name}.json")]
    elif args.format == 'csv':
        files = exporter.export_to_csv(planogram, name)
    else:
        files = [exporter.export_to_excel(planogram, f"{name}.xlsx")]

    for path in files:
        print(f"  📄 {path}")
    return 0


def run_new(args, settings: LayoutSettings, logger) -> int:
    """Create a planogram from a fixture template and save it as version 1"""
    loader = LayoutLoader(args.data_path)
    fixture = loader.load_fixture_template(args.template)
    planogram = Planogram(
        id=args.planogram_id,
        name=args.name or fixture.name,
        fixture=fixture,
        created_by=args.created_by
    )
    repository = PlanogramRepository(JsonFileDocumentStore(args.store_dir), settings.io_timeout)
    result = asyncio.run(repository.save(serialize(planogram), planogram.version))
    if not result.success:
        print(f"\n❌ Error: {result.error}")
        return 1

    print(f"✅ Saved {result.value.planogram_id} as version {result.value.version}")
    return 0


def run_history(args, settings: LayoutSettings, logger) -> int:
    """List saved versions of a planogram"""
    repository = PlanogramRepository(JsonFileDocumentStore(args.store_dir), settings.io_timeout)
    result = asyncio.run(repository.history(args.planogram_id))
    if not result.success:
        print(f"\n❌ Error: {result.error}")
        return 1

    for version in result.value:
        print(f"  v{version}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Planogram Layout Core',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py validate layouts/gondola.json --catalog products.csv
  python main.py capacity layouts/gondola.json
  python main.py export layouts/gondola.json --format excel
  python main.py new --template gondola --planogram-id pog-1
  python main.py history pog-1
        """
    )
    parser.add_argument('--config', help='JSON settings file')
    parser.add_argument('--data-path', default='data', help='Directory holding catalogs and templates')
    subparsers = parser.add_subparsers(dest='command', required=True)

    validate = subparsers.add_parser('validate', help='Audit a snapshot file')
    validate.add_argument('snapshot')
    validate.add_argument('--catalog', help='Catalog CSV under the data path')
    validate.set_defaults(handler=run_validate)

    capacity = subparsers.add_parser('capacity', help='Shelf capacity per row')
    capacity.add_argument('snapshot')
    capacity.set_defaults(handler=run_capacity)

    export = subparsers.add_parser('export', help='Export a snapshot')
    export.add_argument('snapshot')
    export.add_argument('--format', '-f', choices=['json', 'csv', 'excel'], default='json')
    export.add_argument('--output-dir', '-o', default='output')
    export.add_argument('--name', help='Output file name (defaults to the planogram id)')
    export.set_defaults(handler=run_export)

    new = subparsers.add_parser('new', help='Create a planogram from a fixture template')
    new.add_argument('--template', '-t', required=True)
    new.add_argument('--planogram-id', required=True)
    new.add_argument('--name')
    new.add_argument('--created-by')
    new.add_argument('--store-dir', default='planograms')
    new.set_defaults(handler=run_new)

    history = subparsers.add_parser('history', help='List saved versions')
    history.add_argument('planogram_id')
    history.add_argument('--store-dir', default='planograms')
    history.set_defaults(handler=run_history)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except PlanogramError as e:
        print(f"\n❌ Error: {e}")
        return 2

    logger = configure_logging(settings.log_dir, settings.console_level, settings.file_level)

    try:
        return args.handler(args, settings, logger)
    except PlanogramError as e:
        logger.error(f"Error running {args.command}: {e}", exc_info=True)
        print(f"\n❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
