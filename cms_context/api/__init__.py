"""Tool-facing API: envelope-returning operations over the content services."""

from cms_context.api.tools import ContentTools, parse_additional_fields, tool_operation

__all__ = ["ContentTools", "parse_additional_fields", "tool_operation"]
