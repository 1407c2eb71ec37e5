import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from planogram_core.models.dimensions import Dimensions
from planogram_core.models.fixture import Fixture, Row, Section
from planogram_core.models.product import InMemoryProductCatalog, ProductInfo
from planogram_core.persistence.snapshot import LayoutSnapshot
from planogram_core.utils.error_handler import DataLoadError, ValidationError, handle_errors
from planogram_core.utils.logger import get_logger

CATALOG_COLUMNS = ['product_id', 'name', 'brand', 'width', 'height', 'depth']


class LayoutLoader:
    """Handle loading of product catalogs, fixture templates and snapshots"""

    def __init__(self, data_path: str = "data"):
        self.data_path = Path(data_path)
        self.templates_path = self.data_path / "fixture_templates"
        self.logger = get_logger()

    @handle_errors(error_class=DataLoadError)
    def load_catalog(self, filename: str = "products.csv") -> InMemoryProductCatalog:
        """Load a product catalog CSV"""
        file_path = self.data_path / filename
        if not file_path.exists():
            raise DataLoadError(f"Catalog file not found: {file_path}")

        df = pd.read_csv(file_path)
        missing_columns = set(CATALOG_COLUMNS) - set(df.columns)
        if missing_columns:
            raise DataLoadError(f"Missing required columns: {sorted(missing_columns)}")

        products = self._dataframe_to_products(df)
        self.logger.info(f"Loaded {len(products)} products from {file_path}")
        return InMemoryProductCatalog(products)

    def _dataframe_to_products(self, df: pd.DataFrame) -> List[ProductInfo]:
        """Convert DataFrame rows to ProductInfo, skipping unusable rows"""
        products = []
        skipped = 0

        for _, row in df.iterrows():
            try:
                dimensions = Dimensions(
                    width=float(row['width']),
                    height=float(row['height']),
                    depth=float(row['depth'])
                )
                if min(dimensions.width, dimensions.height, dimensions.depth) <= 0:
                    raise ValueError("non-positive dimensions")

                image_url = row.get('image_url')
                category = row.get('category')
                products.append(ProductInfo(
                    product_id=str(row['product_id']).strip(),
                    name=str(row['name']).strip(),
                    brand=str(row['brand']).strip(),
                    dimensions=dimensions,
                    category=str(category) if pd.notna(category) else "",
                    image_url=str(image_url) if pd.notna(image_url) else None
                ))
            except (TypeError, ValueError) as e:
                skipped += 1
                self.logger.warning(f"Skipping product {row.get('product_id', 'unknown')}: {e}")

        if skipped:
            self.logger.warning(f"Skipped {skipped} catalog rows")
        return products

    def load_fixture_template(self, template_name: str) -> Fixture:
        """Build a fixture from ``fixture_templates/<name>_fixture.json``"""
        file_path = self.templates_path / f"{template_name}_fixture.json"
        if not file_path.exists():
            raise DataLoadError(f"Fixture template not found: {file_path}")

        with open(file_path, 'r') as f:
            template = json.load(f)
        return self.fixture_from_template(template)

    def fixture_from_template(self, template: Dict[str, Any]) -> Fixture:
        """Build an empty fixture, running every section and row through validation"""
        try:
            info = template['fixture']
            fixture = Fixture(id=info['id'], name=info['name'], user_id=info.get('userId'))
            for section_data in template.get('sections', []):
                section = Section(
                    id=section_data['id'],
                    name=section_data.get('name', section_data['id']),
                    width=float(section_data['width']),
                    height=float(section_data['height']),
                    header_height=float(section_data.get('headerHeight', 0)),
                    row_offset=float(section_data.get('rowOffset', 0))
                )
                fixture.add_section(section)
                for row_data in section_data.get('rows', []):
                    section.add_row(Row(id=row_data['id'], height=float(row_data['height'])))
        except KeyError as e:
            raise DataLoadError(f"Fixture template is missing {e}") from e
        except ValidationError as e:
            raise DataLoadError(f"Fixture template is invalid: {e}") from e
        return fixture

    def get_available_templates(self) -> List[str]:
        """Get list of available fixture templates"""
        return sorted(
            file.stem.replace('_fixture', '')
            for file in self.templates_path.glob("*_fixture.json")
        )

    def load_snapshot(self, path: str) -> LayoutSnapshot:
        """Read a snapshot JSON file"""
        file_path = Path(path)
        if not file_path.exists():
            raise DataLoadError(f"Snapshot file not found: {file_path}")
        try:
            with open(file_path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise DataLoadError(f"Invalid snapshot file {file_path}: {e}") from e
