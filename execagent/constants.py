from __future__ import annotations

AGENT_LABEL = "agent"
DEFAULT_MODEL = "opencode/kimi-k2.5-free"

READ_DEFAULT_LIMIT = 2000
READ_MAX_LINE_LENGTH = 2000
READ_PREVIEW_LINES = 20
MAX_SUGGESTIONS = 3

BINARY_SNIFF_BYTES = 4096
BINARY_NON_PRINTABLE_RATIO = 0.3

BASH_DEFAULT_TIMEOUT_MS = 120_000
BASH_MAX_TIMEOUT_MS = 600_000
BASH_MAX_OUTPUT_LENGTH = 30_000

DIFF_CONTEXT_LINES = 3
