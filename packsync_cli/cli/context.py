"""Per-invocation state shared by the CLI commands.

The main callback builds an ``AppContext`` from the global options and
stores it on the Typer context; commands fetch it with
``get_app_context`` instead of reading process-wide state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import typer

from packsync_cli.config import PacksyncConfig, load_config
from packsync_cli.pack.editor import PackRoots, resolve_pack_roots
from packsync_cli.pack.fetcher import DEFAULT_USER_AGENT, ArchiveFetcher


@dataclass
class AppContext:
    """Configuration and output options for one invocation."""

    config: PacksyncConfig = field(default_factory=PacksyncConfig)
    json_output: bool = False
    quiet: bool = False
    config_file: Optional[Path] = None

    @property
    def manifest_path(self) -> Path:
        return self.config.get_manifest_path()

    @property
    def show_progress(self) -> bool:
        return not (self.json_output or self.quiet)

    def pack_roots(self) -> PackRoots:
        """Resolve the install roots, querying the editor unless configured."""
        return resolve_pack_roots(
            pack_name=self.config.pack_name,
            command=self.config.editor.command,
            timeout=self.config.editor.timeout,
            pack_root=self.config.editor.pack_root,
        )

    def fetcher(self) -> ArchiveFetcher:
        return ArchiveFetcher(
            timeout=self.config.download.timeout,
            user_agent=self.config.download.user_agent or DEFAULT_USER_AGENT,
        )


def get_app_context(ctx: typer.Context) -> AppContext:
    """Return the invocation's AppContext, creating a default one if needed."""
    app_ctx = ctx.find_object(AppContext)
    if app_ctx is None:
        app_ctx = AppContext(config=load_config())
        ctx.obj = app_ctx
    return app_ctx
