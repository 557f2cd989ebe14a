"""Sample MCP tool servers launched over stdio."""
