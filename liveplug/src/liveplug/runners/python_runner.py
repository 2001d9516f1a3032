from __future__ import annotations

import ast
from pathlib import Path

from liveplug.contracts import Binding, Task
from liveplug.runners.base import ScriptLoadError, ScriptPluginRunner
from liveplug.runtime.loading import LoadingContext

SCRIPT_MODULE_NAME = "__plugin__"


class PythonPluginRunner(ScriptPluginRunner):
    """
    Runs `plugin.py` scripts.

    Binding values become globals of the script; its imports resolve through
    the plugin's loading context. Absolute imports at the top level of the
    script are resolved while loading, so dependency modules execute off the
    designated thread and unresolved ones are loading errors.
    """

    entry_script = "plugin.py"
    comment_prefix = "#"

    def load_script(
        self,
        entry: Path,
        source: str,
        context: LoadingContext,
        binding: Binding,
    ) -> Task:
        try:
            tree = ast.parse(source, filename=str(entry))
            code = compile(tree, str(entry), "exec", dont_inherit=True)
        except (SyntaxError, ValueError) as exc:
            raise ScriptLoadError(f"Error while compiling script. {exc}") from exc

        _preload_imports(tree, context)
        namespace = context.new_namespace(SCRIPT_MODULE_NAME, str(entry), **binding)

        def execute() -> None:
            exec(code, namespace)

        return execute


def _preload_imports(tree: ast.Module, context: LoadingContext) -> None:
    for node in tree.body:
        if isinstance(node, ast.Import):
            requests = [(alias.name, ()) for alias in node.names]
        elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
            requests = [(node.module, tuple(alias.name for alias in node.names))]
        else:
            continue
        for module_name, fromlist in requests:
            try:
                context.import_hook(module_name, None, None, fromlist, 0)
            except (Exception, SystemExit) as exc:
                raise ScriptLoadError(
                    f"Error while importing '{module_name}'. {type(exc).__name__}: {exc}"
                ) from exc
