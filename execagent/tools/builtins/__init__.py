from __future__ import annotations

from typing import TYPE_CHECKING

from execagent.tools.builtins.bash import BashTool
from execagent.tools.builtins.edit import EditTool
from execagent.tools.builtins.glob import GlobTool
from execagent.tools.builtins.grep import GrepTool
from execagent.tools.builtins.list_dir import ListTool
from execagent.tools.builtins.read import ReadTool
from execagent.tools.builtins.write import WriteTool

if TYPE_CHECKING:
    from execagent.config.settings import ToolSettings
    from execagent.tools.registry import ToolRegistry


def register_builtins(registry: ToolRegistry, settings: ToolSettings | None = None) -> None:
    """Register all built-in tools with the registry.

    Order is fixed: read, write, edit, list, glob, grep, bash.
    Limits come from settings when given, else from the module defaults.
    """
    if settings is None:
        read = ReadTool()
        bash = BashTool()
    else:
        read = ReadTool(
            default_limit=settings.read_default_limit,
            max_line_length=settings.read_max_line_length,
        )
        bash = BashTool(
            default_timeout_ms=settings.bash_default_timeout_ms,
            max_timeout_ms=settings.bash_max_timeout_ms,
            max_output_length=settings.bash_max_output_length,
        )

    registry.register(read)
    registry.register(WriteTool())
    registry.register(EditTool())
    registry.register(ListTool())
    registry.register(GlobTool())
    registry.register(GrepTool())
    registry.register(bash)
