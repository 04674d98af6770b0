from .html import render_html_report, render_step_dashboard, render_widget_html
from .text import render_step_summary, render_text_summary

__all__ = [
    'render_html_report',
    'render_step_dashboard',
    'render_step_summary',
    'render_text_summary',
    'render_widget_html',
]
