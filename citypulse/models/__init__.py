"""
Pydantic models for reports, pipeline events and insight responses.

DESIGN PRINCIPLE:
- Models reflect data structure, not business logic
- Pipeline records are immutable once constructed
"""
