"""Content types of the platform's content graph."""

from enum import StrEnum


class ContentType(StrEnum):
    """Addressable kinds of content that carry permissions."""

    WORKBOOK = "workbook"
    DATASOURCE = "datasource"
    PROJECT = "project"
    VIEW = "view"
    FLOW = "flow"
