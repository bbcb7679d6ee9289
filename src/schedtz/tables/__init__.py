"""Schedule-table detection, timestamp parsing, and local-time column injection.

Submodules:
  patterns     -- compiled regex patterns and constant tuples
  schema       -- ParsedTime / Settings Pydantic models, timezone validation
  parsing      -- timestamp-text parsing and year inference
  formatting   -- timezone-aware rendering of parsed times
  classifiers  -- schedule-table classification helpers
  document     -- section walk and node-insertion mutation feed
  augment      -- derived-column injection and teardown
  pipeline     -- RenderCoordinator (full passes, reconciliation, change handling)
"""
