"""
Report package: static HTML mission report export.
"""

from .assembler import assemble_report, render_report_charts, report_filename, save_report

__all__ = [
    'assemble_report',
    'render_report_charts',
    'report_filename',
    'save_report'
]
