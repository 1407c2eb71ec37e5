import json
from pathlib import Path
from typing import Dict, List

import pandas as pd

from planogram_core.models.planogram import Planogram
from planogram_core.persistence.snapshot import serialize
from planogram_core.placement.snapping import shelf_capacity
from planogram_core.utils.error_handler import handle_errors
from planogram_core.utils.logger import get_logger


def capacity_report(planogram: Planogram) -> pd.DataFrame:
    """Used and free shelf width per row, in inches"""
    records = []
    for section in planogram.fixture.sections.values():
        for row_index, row in enumerate(section.rows):
            capacity = shelf_capacity(section, row_index)
            records.append({
                'section_id': section.id,
                'section_name': section.name,
                'row_index': row_index,
                'row_id': row.id,
                'row_height': row.height,
                'components': len(section.components_on_row(row_index)),
                'facings': sum(c.facings for c in section.components_on_row(row_index)),
                'used_width': capacity['used'],
                'available_width': capacity['available'],
                'utilization_pct': round(capacity['percentage'], 2),
            })
    columns = ['section_id', 'section_name', 'row_index', 'row_id', 'row_height', 'components',
               'facings', 'used_width', 'available_width', 'utilization_pct']
    return pd.DataFrame(records, columns=columns)


def component_table(planogram: Planogram) -> pd.DataFrame:
    """One line per placed component, taken from the snapshot so x/y match what is saved"""
    snapshot = serialize(planogram)
    records = []
    for section in snapshot['sections']:
        for component in section['components']:
            records.append({
                'section_id': section['id'],
                'component_id': component['id'],
                'product_id': component['productId'],
                'name': component['name'],
                'brand': component['brand'],
                'row_index': component['rowIndex'],
                'facings': component['facings'],
                'width': component['dimensions']['width'],
                'height': component['dimensions']['height'],
                'depth': component['dimensions']['depth'],
                'x': component['x'],
                'y': component['y'],
            })
    columns = ['section_id', 'component_id', 'product_id', 'name', 'brand', 'row_index',
               'facings', 'width', 'height', 'depth', 'x', 'y']
    return pd.DataFrame(records, columns=columns).sort_values(
        ['section_id', 'row_index', 'x'], kind='stable'
    ).reset_index(drop=True)


class ExportHandler:
    """Handle exporting planogram layouts in various formats"""

    def __init__(self, output_dir: str = "output"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = get_logger()

    @handle_errors()
    def export_to_json(self, planogram: Planogram, filename: str = "planogram.json") -> str:
        """Export the layout snapshot to JSON"""
        filepath = self.output_dir / filename
        with open(filepath, 'w') as f:
            json.dump(serialize(planogram), f, indent=2)

        self.logger.info(f"Exported planogram to {filepath}")
        return str(filepath)

    def _summary_frame(self, planogram: Planogram) -> pd.DataFrame:
        fixture = planogram.fixture
        return pd.DataFrame({
            'Metric': ['Planogram', 'Fixture', 'Status', 'Version', 'Sections', 'Rows',
                       'Components', 'Stores'],
            'Value': [
                planogram.name,
                fixture.name,
                planogram.status.value,
                planogram.version,
                len(fixture.sections),
                sum(len(s.rows) for s in fixture.sections.values()),
                fixture.component_count,
                len(planogram.store_assignments),
            ]
        })

    @handle_errors()
    def export_to_excel(self, planogram: Planogram, filename: str = "planogram.xlsx") -> str:
        """Export summary, component and capacity sheets to Excel"""
        filepath = self.output_dir / filename

        with pd.ExcelWriter(filepath, engine='openpyxl') as writer:
            self._summary_frame(planogram).to_excel(writer, sheet_name='Summary', index=False)
            component_table(planogram).to_excel(writer, sheet_name='Components', index=False)
            capacity_report(planogram).to_excel(writer, sheet_name='Capacity', index=False)

        self.logger.info(f"Exported planogram to {filepath}")
        return str(filepath)

    @handle_errors()
    def export_to_csv(self, planogram: Planogram, filename_prefix: str = "planogram") -> List[str]:
        """Export components and capacity to CSV files"""
        frames: Dict[str, pd.DataFrame] = {
            'components': component_table(planogram),
            'capacity': capacity_report(planogram),
        }

        files_created = []
        for suffix, frame in frames.items():
            path = self.output_dir / f"{filename_prefix}_{suffix}.csv"
            frame.to_csv(path, index=False)
            files_created.append(str(path))

        self.logger.info(f"Exported {len(files_created)} CSV files")
        return files_created
