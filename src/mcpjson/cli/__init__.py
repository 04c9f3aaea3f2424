"""
Command-line interface for mcpjson.
"""
