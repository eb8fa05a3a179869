"""Discovery of feature packages under ``qa_ops.modules``.

A feature package may ship a ``models`` module (tables registered on
``Base.metadata``) and a ``router`` module exposing ``router``. Both are
optional.
"""
from __future__ import annotations

import importlib
import pkgutil
from types import ModuleType
from typing import Iterator, List

from fastapi import APIRouter


MODULES_PACKAGE = "qa_ops.modules"


def iter_submodules(package: str = MODULES_PACKAGE) -> Iterator[str]:
    pkg = importlib.import_module(package)
    for info in pkgutil.iter_modules(pkg.__path__):
        if info.ispkg:
            yield f"{package}.{info.name}"


def _import_optional(module_pkg: str, name: str) -> ModuleType | None:
    target = f"{module_pkg}.{name}"
    try:
        return importlib.import_module(target)
    except ModuleNotFoundError as exc:
        # A missing dependency inside an existing module is a real error
        if exc.name != target:
            raise
        return None


def import_all_models() -> None:
    for module_pkg in iter_submodules():
        _import_optional(module_pkg, "models")


def collect_routers() -> List[APIRouter]:
    """Import every feature's models, then return the routers found."""
    routers: List[APIRouter] = []
    for module_pkg in iter_submodules():
        _import_optional(module_pkg, "models")
        router_mod = _import_optional(module_pkg, "router")
        router = getattr(router_mod, "router", None)
        if isinstance(router, APIRouter):
            routers.append(router)
    return routers
