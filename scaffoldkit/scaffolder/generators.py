"""Custom generator loading and invocation.

A scaffold entry may name a generator instead of relying on include
processing.  The generator is a Python module under the template's
``generators/`` directory exposing a ``generate(context)`` callable, which may
be a plain function or a coroutine function, and which returns a
:class:`~scaffoldkit.scaffolder.models.ScaffoldResult` (or a mapping of the
same shape).
"""

from __future__ import annotations

import importlib.util
import inspect
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Callable

from scaffoldkit.utils import print_debug

from .models import GeneratorContext, ScaffoldResult

GENERATORS_DIR = "generators"
ENTRY_POINT = "generate"


class GeneratorLoadError(Exception):
    """Raised when a generator module cannot be found or does not expose ``generate``."""


def resolve_generator_path(template_path: str | Path, generator: str) -> Path:
    """Locate the generator module file for *generator*.

    Accepts ``name.py``, ``name`` (``name.py`` is tried) or a package
    directory ``name/`` with an ``__init__.py``.

    Raises:
        GeneratorLoadError: If no module file exists.
    """
    base = Path(template_path) / GENERATORS_DIR / generator
    candidates = [base]
    if base.suffix != ".py":
        candidates.append(base.with_name(base.name + ".py"))
    candidates.append(base / "__init__.py")

    for candidate in candidates:
        if candidate.is_file():
            return candidate
    raise GeneratorLoadError(f"Generator module not found: {base}")


def load_generator(template_path: str | Path, generator: str) -> Callable[..., Any]:
    """Import the generator module and return its ``generate`` callable.

    Raises:
        GeneratorLoadError: If the module is missing or ``generate`` is absent
            or not callable.
    """
    module_file = resolve_generator_path(template_path, generator)
    module = _load_module(_module_name(template_path, generator), module_file)

    func = getattr(module, ENTRY_POINT, None)
    if not callable(func):
        raise GeneratorLoadError(
            f"Invalid generator: {generator} does not export a callable '{ENTRY_POINT}'"
        )
    return func


async def run_generator(func: Callable[..., Any], context: GeneratorContext) -> ScaffoldResult:
    """Call *func* with *context*, awaiting it when it is asynchronous."""
    result = func(context)
    if inspect.isawaitable(result):
        result = await result
    if isinstance(result, ScaffoldResult):
        return result
    return ScaffoldResult.model_validate(result)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _module_name(template_path: str | Path, generator: str) -> str:
    raw = f"{Path(template_path).name}_{Path(generator).stem}"
    return "scaffoldkit_generator_" + re.sub(r"\W", "_", raw)


def _load_module(module_name: str, file_path: Path) -> ModuleType:
    """Dynamically load a Python module from *file_path*."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    if spec is None or spec.loader is None:
        raise GeneratorLoadError(f"Could not load module spec from {file_path}")

    print_debug(f"Loading generator module {module_name} from {file_path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    return module
