from .layout_loader import LayoutLoader
from .layout_validator import LayoutValidator

__all__ = ['LayoutLoader', 'LayoutValidator']
