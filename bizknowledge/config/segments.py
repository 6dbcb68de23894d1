"""Seed taxonomy of business segments.

Loaded into the ``segments`` table on store initialisation with
insert-or-ignore semantics, so re-running startup never duplicates or
overwrites a segment.  ``config/config.yaml`` may replace this list via a
top-level ``segments:`` key.

"General" is the fallback segment for documents the classifier could not
place; it is looked up by name, never by id.
"""

from __future__ import annotations

DEFAULT_SEGMENT_NAME = "General"

DEFAULT_SEGMENTS: tuple[dict[str, str], ...] = (
    {
        "name": "General",
        "description": "General business information and documents",
        "colour": "#373F51",
    },
    {
        "name": "Accounting",
        "description": "Financial records, invoices, and accounting documents",
        "colour": "#5CA4A9",
    },
    {
        "name": "Finance",
        "description": "Financial planning, budgets, and investment information",
        "colour": "#EE716A",
    },
    {
        "name": "Marketing",
        "description": "Marketing materials, campaigns, and customer information",
        "colour": "#9C0D38",
    },
    {
        "name": "Operations",
        "description": "Operational procedures, workflows, and processes",
        "colour": "#9BC1BC",
    },
    {
        "name": "Human Resources",
        "description": "HR policies, employee information, and recruitment",
        "colour": "#F6B0A4",
    },
    {
        "name": "Legal",
        "description": "Contracts, legal documents, and compliance information",
        "colour": "#373F51",
    },
    {
        "name": "Product",
        "description": "Product specifications, development, and documentation",
        "colour": "#EE716A",
    },
    {
        "name": "Customer Service",
        "description": "Customer support, feedback, and service procedures",
        "colour": "#D1E3DD",
    },
)
