"""Local twtfile publishing with optional pre/post hooks."""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path

import structlog

from ..errors import PublishHookError
from .parser import Record

TWTFILE_TOKEN = "{twtfile}"


class LocalRecordSink:
    """Append records to the user's own twtfile."""

    def __init__(
        self,
        twtfile: Path,
        pre_hook: str | None = None,
        post_hook: str | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.twtfile = Path(twtfile).expanduser()
        self.pre_hook = pre_hook
        self.post_hook = post_hook
        self.logger = logger or structlog.get_logger("twtfeed.publisher")

    def exists(self) -> bool:
        return self.twtfile.exists()

    def read(self) -> str:
        return self.twtfile.read_text(encoding="utf-8")

    def append(self, record: Record) -> None:
        """Append ``record``; a failing pre hook prevents the write, a failing post hook does not undo it."""

        self.twtfile.parent.mkdir(parents=True, exist_ok=True)
        self.twtfile.touch(exist_ok=True)
        if self.pre_hook:
            self._run_hook("pre_tweet_hook", self.pre_hook, appended=False)
        with self.twtfile.open("a", encoding="utf-8") as stream:
            stream.write(record.to_string() + "\n")
        self.logger.info("record_appended", twtfile=str(self.twtfile))
        if self.post_hook:
            self._run_hook("post_tweet_hook", self.post_hook, appended=True)

    def _run_hook(self, name: str, template: str, appended: bool) -> None:
        command = template.replace(TWTFILE_TOKEN, shlex.quote(str(self.twtfile)))
        self.logger.debug("running_hook", hook=name, command=command)
        completed = subprocess.run(command, shell=True, check=False)
        if completed.returncode != 0:
            raise PublishHookError(name, command, completed.returncode, appended=appended)


__all__ = ["LocalRecordSink", "TWTFILE_TOKEN"]
