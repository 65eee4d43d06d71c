"""Pydantic request/response contracts. JSON is camelCase; see schemas/common.py."""
