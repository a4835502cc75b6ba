# src/prologtester/cli/list_cmds.py

import asyncio
import os
from pathlib import Path

import click
import structlog
from rich.markup import escape
from rich.tree import Tree

from prologtester.cli.utils import config_path_option, load_config_or_exit, logging_options, roots_argument
from prologtester.runtime.controller import TestController
from prologtester.telemetry import StructLogger
from prologtester.telemetry.logger import make_console
from prologtester.tree import TestTree

log: StructLogger = structlog.get_logger("cli.list")


def _display_path(path: Path, roots: tuple[Path, ...]) -> str:
    for root in roots:
        if path.is_relative_to(root):
            return os.path.relpath(path, root)
    return str(path)


def render_tree(tree: TestTree, roots: tuple[Path, ...]) -> Tree:
    """Builds a rich tree grouped by document, then suite, then test."""
    rendered = Tree(f"[bold]{tree.test_count} tests in {len(tree)} suites[/]")
    documents: dict[Path, Tree] = {}
    for _, suite in tree.iter_roots():
        doc_node = documents.get(suite.source_path)
        if doc_node is None:
            label = escape(_display_path(suite.source_path, roots))
            doc_node = documents[suite.source_path] = rendered.add(f"📄 [cyan]{label}[/]")
        suite_node = doc_node.add(f"[bold]{escape(suite.label)}[/] [dim]line {suite.line + 1}[/]")
        if not suite.children:
            suite_node.add("[dim](no tests)[/]")
        for test in suite.tests():
            suite_node.add(f"{escape(test.label)} [dim]line {test.line + 1}[/]")
    return rendered


@click.command(name="list")
@config_path_option
@roots_argument
@logging_options
@click.pass_context
def list_cli(ctx: click.Context, config_path: Path | None, roots: tuple[Path, ...], **kwargs):
    """Discover plunit suites and tests and print them as a tree."""
    config = load_config_or_exit(ctx, config_path, roots, **kwargs)
    controller = TestController(config)

    async def _list() -> None:
        try:
            await controller.resolve(None)
            make_console().print(render_tree(controller.tree, tuple(controller.discovery.roots)))
            log.info("'list' command finished.", suites=len(controller.tree), tests=controller.tree.test_count)
        finally:
            await controller.dispose()

    asyncio.run(_list())

# 🔼⚙️
