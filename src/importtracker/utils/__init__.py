"""Utility functions for importtracker."""

from importtracker.utils.amount_parser import parse_amount
from importtracker.utils.date_parser import parse_eta
from importtracker.utils.formatting import format_money, format_percent
from importtracker.utils.project_resolver import resolve_project

__all__ = ["parse_amount", "parse_eta", "format_money", "format_percent", "resolve_project"]
