from .export_handler import ExportHandler, capacity_report, component_table

__all__ = ['ExportHandler', 'capacity_report', 'component_table']
