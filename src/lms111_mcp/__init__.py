"""Driver and MCP server for the SICK LMS111 laser scanner."""

__version__ = "0.1.0"
