"""Extractly - list view-model and document export core for extracted web content."""

from .model import ListViewModel, Row, SaveMode, ViewState
from .layout import DocumentBlock, LayoutConfig, LayoutPage, LineMode, layout
from .textmatch import Segment, contains, highlight

__all__ = [
    'ListViewModel',
    'Row',
    'SaveMode',
    'ViewState',
    'DocumentBlock',
    'LayoutConfig',
    'LayoutPage',
    'LineMode',
    'layout',
    'Segment',
    'contains',
    'highlight',
]
