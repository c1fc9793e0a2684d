"""
Developer portal service package.

Shared code for the portal's Lambda functions, split the usual way:

- handlers: API and stream entry points, resolver and error plumbing
- logic: upstream clients, page aggregation, screening, geodata
- dal: notifications table access
- models: pydantic models
"""

__version__ = "1.0.0"
