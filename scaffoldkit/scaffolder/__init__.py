"""scaffoldkit scaffolder -- applies declarative templates to projects.

A template is a directory holding a ``scaffold.yaml`` and the files it
includes.  Boilerplates create new projects; features add files to an
existing one.

Quick usage::

    from scaffoldkit.scaffolder import BoilerplateService

    service = BoilerplateService("/path/to/templates")
    result = await service.use_boilerplate(
        "scaffold-nextjs-app", {"appName": "web", "packageName": "@acme/web"}
    )
"""

from scaffoldkit.scaffolder.boilerplates import BoilerplateInfo, BoilerplateService
from scaffoldkit.scaffolder.config_loader import (
    ScaffoldConfigCache,
    ScaffoldConfigError,
    ScaffoldConfigLoader,
)
from scaffoldkit.scaffolder.generators import GeneratorLoadError
from scaffoldkit.scaffolder.methods import ScaffoldingMethodsService, ScaffoldMethodError
from scaffoldkit.scaffolder.models import (
    BoilerplateOptions,
    FeatureOptions,
    GeneratorContext,
    ScaffoldResult,
)
from scaffoldkit.scaffolder.project_config import ProjectConfigError
from scaffoldkit.scaffolder.service import ScaffoldService, build_scaffold_service
from scaffoldkit.scaffolder.templates import TemplateRenderer

__all__ = [
    "BoilerplateInfo",
    "BoilerplateOptions",
    "BoilerplateService",
    "FeatureOptions",
    "GeneratorContext",
    "GeneratorLoadError",
    "ProjectConfigError",
    "ScaffoldConfigCache",
    "ScaffoldConfigError",
    "ScaffoldConfigLoader",
    "ScaffoldMethodError",
    "ScaffoldResult",
    "ScaffoldService",
    "ScaffoldingMethodsService",
    "TemplateRenderer",
    "build_scaffold_service",
]
