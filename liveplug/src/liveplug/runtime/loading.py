"""
Isolated import scopes for plugin code.

A LoadingContext resolves `import` statements against its own ordered search
path before falling back to the host's import system. Modules it loads are
cached in the context under their plain names. They are also published in
`sys.modules` under a name private to the context (`liveplug._ctx<N>.<name>`),
so `dataclasses`, `typing.get_type_hints` and `pickle` can find them, until
`close` withdraws them. Two contexts, or two runs of the same plugin, never
share plugin modules.
"""

from __future__ import annotations

import builtins
import importlib
import importlib.util
import itertools
import logging
import os
import sys
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from importlib.machinery import ModuleSpec
from types import ModuleType
from typing import Any
from urllib.parse import urlparse
from urllib.request import url2pathname

logger = logging.getLogger(__name__)

ParentImport = Callable[[str], ModuleType]

CONTEXT_PACKAGE = "liveplug._ctx"

_context_ids = itertools.count(1)


class LoadingContextError(RuntimeError):
    pass


class LoadingContext:
    def __init__(
        self,
        *,
        name: str = "plugin",
        parent_import: ParentImport | None = None,
    ) -> None:
        self._name = name
        self._prefix = f"{CONTEXT_PACKAGE}{next(_context_ids)}"
        self._parent_import = parent_import or importlib.import_module
        self._paths: list[str] = []
        self._finders: list[Any] = []
        self._finder_cache: dict[str, Any] = {}
        self._modules: dict[str, ModuleType] = {}
        self._published: dict[str, ModuleType] = {}
        self._parent_names: set[str] = set()
        self._lock = threading.RLock()
        self._builtins = dict(vars(builtins))
        self._builtins["__import__"] = self.import_hook

    def __repr__(self) -> str:
        return f"LoadingContext(name={self._name!r}, prefix={self._prefix!r}, paths={self._paths!r})"

    def __enter__(self) -> LoadingContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def name(self) -> str:
        return self._name

    @property
    def prefix(self) -> str:
        """Package under which this context's modules appear in `sys.modules`."""
        return self._prefix

    @property
    def paths(self) -> list[str]:
        return list(self._paths)

    @property
    def modules(self) -> dict[str, ModuleType]:
        """Modules loaded from this context's own paths, keyed by plain name."""
        with self._lock:
            return dict(self._modules)

    @property
    def builtins(self) -> dict[str, Any]:
        """Builtins namespace whose `__import__` resolves through this context."""
        return self._builtins

    def qualified_name(self, fullname: str) -> str:
        return f"{self._prefix}.{fullname}"

    def plain_name(self, qualified: str) -> str:
        if qualified.startswith(self._prefix + "."):
            return qualified[len(self._prefix) + 1 :]
        return qualified

    def close(self) -> None:
        """Withdraw this context's modules from `sys.modules`."""
        with self._lock:
            for qualified, module in self._published.items():
                if sys.modules.get(qualified) is module:
                    del sys.modules[qualified]
            self._published.clear()

    def add_path(self, path: str) -> bool:
        """
        Register a directory or archive root.

        Returns False if no importer accepts the path; imports from it will
        then fail as unresolved modules. Raises LoadingContextError if a
        directory root cannot be enumerated.
        """
        if os.path.isdir(path):
            try:
                os.listdir(path)
            except OSError as exc:
                raise LoadingContextError(f"Cannot enumerate '{path}': {exc}") from exc
        finder = self._finder_for(path)
        if finder is None:
            logger.warning("No importer accepts '%s'; it is left out of %s", path, self._name)
            return False
        self._paths.append(path)
        self._finders.append(finder)
        return True

    def new_namespace(self, module_name: str, file_path: str, /, **values: Any) -> dict[str, Any]:
        """Globals of a script executed as module `module_name` of this context."""
        module = ModuleType(self.qualified_name(module_name))
        module.__file__ = file_path
        module.__builtins__ = self._builtins  # type: ignore[attr-defined]
        namespace = vars(module)
        namespace.update(values)
        with self._lock:
            self._publish(module)
        return namespace

    def import_module(self, fullname: str) -> ModuleType:
        with self._lock:
            module = self._modules.get(fullname)
            if module is not None:
                return module

            parent_name, _, child = fullname.rpartition(".")
            if not parent_name:
                if fullname in self._parent_names:
                    return self._parent_import(fullname)
                spec = self._find_spec(fullname, None)
                if spec is None:
                    module = self._parent_import(fullname)
                    self._parent_names.add(fullname)
                    return module
                return self._load(fullname, spec)

            parent = self.import_module(parent_name)
            if parent_name not in self._modules:
                return self._parent_import(fullname)
            # the parent's own initialisation may already have imported it
            module = self._modules.get(fullname)
            if module is not None:
                return module

            search_locations = getattr(parent, "__path__", None)
            if search_locations is None:
                raise ModuleNotFoundError(
                    f"No module named '{fullname}'; '{parent_name}' is not a package",
                    name=fullname,
                )
            spec = self._find_spec(fullname, list(search_locations))
            if spec is None:
                raise ModuleNotFoundError(f"No module named '{fullname}'", name=fullname)
            module = self._load(fullname, spec)
            setattr(parent, child, module)
            return module

    def import_hook(
        self,
        name: str,
        globals: Mapping[str, Any] | None = None,
        locals: Mapping[str, Any] | None = None,
        fromlist: Sequence[str] | None = (),
        level: int = 0,
    ) -> ModuleType:
        """Drop-in replacement for `builtins.__import__`."""
        if level > 0:
            package = _calc_package(globals or {})
            if package == self._prefix:
                raise ImportError("attempted relative import with no known parent package")
            resolved = importlib.util.resolve_name("." * level + name, package)
            if package.startswith(self._prefix + ".") and not resolved.startswith(self._prefix + "."):
                raise ImportError("attempted relative import beyond top-level package")
            fullname = self.plain_name(resolved)
        else:
            fullname = name
        module = self.import_module(fullname)

        if not fromlist:
            if level == 0:
                return self.import_module(name.partition(".")[0])
            if not name:
                return module
            cut_off = len(name) - len(name.partition(".")[0])
            return self.import_module(fullname[: len(fullname) - cut_off])

        if hasattr(module, "__path__"):
            self._handle_fromlist(module, fromlist)
        return module

    def _handle_fromlist(self, module: ModuleType, fromlist: Iterable[str]) -> None:
        for item in fromlist:
            if not isinstance(item, str):
                raise TypeError(f"Item in {module.__name__}.__all__ must be str, not {type(item).__name__}")
            if item == "*":
                exported = getattr(module, "__all__", None)
                if exported:
                    self._handle_fromlist(module, [entry for entry in exported if entry != "*"])
                continue
            if hasattr(module, item):
                continue
            submodule = f"{self.plain_name(module.__name__)}.{item}"
            try:
                self.import_module(submodule)
            except ModuleNotFoundError as exc:
                # a missing attribute is reported by the import statement itself
                if exc.name != submodule:
                    raise

    def _find_spec(self, fullname: str, search_locations: list[str] | None) -> ModuleSpec | None:
        if search_locations is None:
            finders = list(self._finders)
        else:
            finders = [
                finder
                for finder in (self._finder_for(location) for location in search_locations)
                if finder is not None
            ]

        # finders only use the last name component to locate a module
        qualified = self.qualified_name(fullname)
        namespace_locations: list[str] = []
        for finder in finders:
            spec = finder.find_spec(qualified)
            if spec is None:
                continue
            if spec.loader is not None:
                return spec
            namespace_locations.extend(spec.submodule_search_locations or [])

        if namespace_locations:
            spec = ModuleSpec(qualified, None, is_package=True)
            spec.submodule_search_locations = namespace_locations
            return spec
        return None

    def _load(self, fullname: str, spec: ModuleSpec) -> ModuleType:
        if spec.loader is None:
            module = _namespace_module(spec)
        else:
            module = importlib.util.module_from_spec(spec)
        module.__builtins__ = self._builtins  # type: ignore[attr-defined]
        self._modules[fullname] = module
        self._publish(module)
        try:
            if spec.loader is not None:
                spec.loader.exec_module(module)
        except BaseException:
            del self._modules[fullname]
            self._unpublish(module)
            raise
        return module

    def _publish(self, module: ModuleType) -> None:
        self._published[module.__name__] = module
        sys.modules[module.__name__] = module

    def _unpublish(self, module: ModuleType) -> None:
        self._published.pop(module.__name__, None)
        if sys.modules.get(module.__name__) is module:
            del sys.modules[module.__name__]

    def _finder_for(self, path: str) -> Any:
        if path in self._finder_cache:
            return self._finder_cache[path]
        finder = None
        for hook in sys.path_hooks:
            try:
                finder = hook(path)
            except ImportError:
                continue
            except OSError as exc:
                raise LoadingContextError(f"Cannot open '{path}': {exc}") from exc
            break
        self._finder_cache[path] = finder
        return finder


def normalize_path(entry: str) -> str | None:
    """
    Turn a classpath entry into a local directory or archive path.

    `file:` URLs are converted to local paths, other URL schemes are not
    supported and yield None.
    """
    parsed = urlparse(entry)
    if parsed.scheme == "file":
        return os.path.abspath(url2pathname(parsed.path))
    # a single letter is a Windows drive, not a scheme
    if len(parsed.scheme) > 1:
        return None
    return os.path.abspath(entry)


def build_loading_context(
    paths: Iterable[str],
    *,
    name: str = "plugin",
    parent_import: ParentImport | None = None,
) -> LoadingContext:
    """
    Build a fresh context seeded with `paths` in order.

    Dependencies should come first and the plugin root last. Raises
    LoadingContextError if a root cannot be enumerated.
    """
    context = LoadingContext(name=name, parent_import=parent_import)
    for entry in paths:
        path = normalize_path(entry)
        if path is None:
            logger.warning("Unsupported classpath entry '%s' is left out of %s", entry, name)
            continue
        context.add_path(path)
    logger.debug("Built %r", context)
    return context


def _namespace_module(spec: ModuleSpec) -> ModuleType:
    module = ModuleType(spec.name)
    module.__spec__ = spec
    module.__loader__ = None
    module.__package__ = spec.name
    module.__file__ = None
    module.__path__ = list(spec.submodule_search_locations or [])  # type: ignore[attr-defined]
    return module


def _calc_package(globals: Mapping[str, Any]) -> str:
    package = globals.get("__package__")
    if package is not None:
        return package
    spec = globals.get("__spec__")
    if spec is not None:
        return spec.parent
    package = globals.get("__name__", "")
    if "__path__" not in globals:
        package = package.rpartition(".")[0]
    return package
