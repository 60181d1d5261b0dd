# File: gencode/context.py
"""
gencode - Render Context Builder
=================================
Builds the ``RenderContext`` handed to each render.  A new context is made
for every render, so nothing can leak from one table to the next.
"""

from __future__ import annotations

import logging
from typing import List

from gencode.models import Config, RenderContext, Table
from gencode.utils import strip_table_prefix, to_pascal_case

logger: logging.Logger = logging.getLogger("gencode.context")


def derive_class_name(config: Config, table_name: str) -> str:
    """
    Class name for *table_name*.

    The configured table prefix is only removed when
    ``gen_config.strip_table_prefix`` is on; by default ``t_user`` becomes
    ``TUser``.
    """
    if config.gen_config.strip_table_prefix:
        table_name = strip_table_prefix(table_name, config.db_config.table_prefix)
    return to_pascal_case(table_name)


def build_table_context(config: Config, table: Table) -> RenderContext:
    packages = config.package_config
    gen = config.gen_config
    return RenderContext(
        config=config,
        table=table,
        class_name=derive_class_name(config, table.name),
        entity_package=packages.entity_package,
        mapper_package=packages.mapper_package,
        service_package=packages.service_package,
        controller_package=packages.controller_package,
        enable_lombok=gen.enable_lombok,
        enable_swagger=gen.enable_swagger,
        author=gen.author,
        date=gen.date,
    )


def build_global_context(config: Config) -> RenderContext:
    """Context for a render that runs once per generation; only ``config`` is bound."""
    return RenderContext(config=config)


__all__: List[str] = [
    "build_global_context",
    "build_table_context",
    "derive_class_name",
]
