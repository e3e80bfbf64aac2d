"""Async runner for the gcloud CLI."""

import asyncio
import json
import os
import shutil
import time
from pathlib import Path
from typing import Any, List, Optional, Sequence

from ...constants import CONFIG_VALUE_TIMEOUT, PROBE_TIMEOUT, UNSET_SENTINELS
from ...core.config import Config
from ...core.exceptions import ErrorKind, GcloudError
from ...core.logger import HiGcloudLogger
from ...core.models import ExecResult
from .errors import classify_error, not_installed_error


# Common Google Cloud SDK install locations, probed when gcloud is not on PATH
SDK_LOCATIONS = (
    "/usr/bin/gcloud",
    "/usr/local/bin/gcloud",
    "/usr/lib/google-cloud-sdk/bin/gcloud",
    "/usr/local/google-cloud-sdk/bin/gcloud",
    "/opt/google-cloud-sdk/bin/gcloud",
    "/snap/bin/gcloud",
    "/opt/homebrew/bin/gcloud",
    "/opt/homebrew/share/google-cloud-sdk/bin/gcloud",
    "/usr/local/Caskroom/google-cloud-sdk/latest/google-cloud-sdk/bin/gcloud",
    "~/google-cloud-sdk/bin/gcloud",
)

READ_CHUNK_SIZE = 64 * 1024


class GcloudClient:
    """Runs gcloud commands as subprocesses.

    The binary location is discovered lazily and cached on the instance;
    call :meth:`reset` to force discovery again.
    """

    def __init__(self, config: Config, logger: HiGcloudLogger):
        self.config = config
        self.logger = logger
        self._gcloud_path: Optional[str] = None

    def reset(self):
        """Forget the discovered binary path."""
        self._gcloud_path = None

    def candidate_paths(self) -> List[str]:
        """Executable gcloud candidates, PATH lookup first, without duplicates."""
        candidates = []
        on_path = shutil.which("gcloud")
        if on_path:
            candidates.append(on_path)

        for location in SDK_LOCATIONS:
            path = str(Path(location).expanduser())
            if os.path.isfile(path) and os.access(path, os.X_OK):
                candidates.append(path)

        seen = set()
        return [c for c in candidates if not (c in seen or seen.add(c))]

    async def locate(self) -> str:
        """Return the gcloud binary, probing candidates concurrently on first use."""
        if self._gcloud_path:
            return self._gcloud_path

        if self.config.gcloud_path:
            self._gcloud_path = self.config.gcloud_path
            return self._gcloud_path

        candidates = self.candidate_paths()
        if not candidates:
            raise not_installed_error()

        self.logger.debug(f"Probing {len(candidates)} gcloud candidate(s)", "gcloud")
        tasks = [asyncio.create_task(self._probe(path)) for path in candidates]
        try:
            for next_done in asyncio.as_completed(tasks):
                path = await next_done
                if path:
                    self._gcloud_path = path
                    self.logger.debug(f"Using gcloud at {path}", "gcloud")
                    return path
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        raise not_installed_error()

    async def _probe(self, path: str) -> Optional[str]:
        """Run ``<path> --version``; return the path if it exits cleanly."""
        try:
            process = await asyncio.create_subprocess_exec(
                path, "--version",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError:
            return None

        try:
            returncode = await asyncio.wait_for(process.wait(), PROBE_TIMEOUT)
        except asyncio.TimeoutError:
            await self._kill(process)
            return None
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        return path if returncode == 0 else None

    async def execute(self, args: Sequence[str], timeout: float) -> ExecResult:
        """Run ``gcloud <args>`` and return its output.

        Raises:
            GcloudError: on a missing binary, non-zero exit, timeout or
                output larger than the configured buffer.
        """
        gcloud = await self.locate()
        args = list(args)
        start_time = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                gcloud, *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            self.reset()
            raise not_installed_error()
        except OSError as e:
            raise classify_error(str(e))

        budget = OutputBudget(self.config.max_buffer)
        stdout_chunks: List[bytes] = []
        stderr_chunks: List[bytes] = []

        try:
            await asyncio.wait_for(
                asyncio.gather(
                    self._collect(process, process.stdout, stdout_chunks, budget),
                    self._collect(process, process.stderr, stderr_chunks, budget),
                    process.wait(),
                ),
                timeout,
            )
        except asyncio.TimeoutError:
            await self._kill(process)
            self.logger.warning(f"gcloud {' '.join(args[:3])} timed out after {timeout}s", "gcloud")
            raise GcloudError(
                ErrorKind.UNKNOWN,
                f"gcloud command timed out after {timeout}s.",
                "Narrow the query (shorter time range, lower limit) or try again later."
            )
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        duration = time.monotonic() - start_time
        self.logger.command_executed(args, duration, process.returncode)

        if budget.exceeded:
            self.logger.warning(f"gcloud {' '.join(args[:3])} killed after {budget.limit} bytes of output", "gcloud")
            raise GcloudError(
                ErrorKind.UNKNOWN,
                f"gcloud output exceeded {budget.limit} bytes.",
                "Narrow the query (tighter filter, lower limit)."
            )

        stdout_text = b"".join(stdout_chunks).decode("utf-8", errors="replace")
        stderr_text = b"".join(stderr_chunks).decode("utf-8", errors="replace")

        if process.returncode != 0:
            raise classify_error(stderr_text or stdout_text)

        return ExecResult(stdout=stdout_text, stderr=stderr_text)

    async def execute_json(self, args: Sequence[str], timeout: float, default: Any) -> Any:
        """Run a command with JSON output; unparseable output yields ``default``."""
        result = await self.execute(args, timeout)
        if not result.stdout.strip():
            return default
        try:
            return json.loads(result.stdout)
        except ValueError as e:
            self.logger.warning(f"Could not parse JSON from gcloud {args[0]}: {e}", "gcloud")
            return default

    async def get_value(self, key: str) -> Optional[str]:
        """Read a gcloud config property; unset values come back as ``None``."""
        result = await self.execute(["config", "get-value", key], CONFIG_VALUE_TIMEOUT)
        value = result.stdout.strip()
        if value in UNSET_SENTINELS:
            return None
        return value

    @classmethod
    async def _collect(cls, process, stream, chunks: List[bytes], budget: "OutputBudget"):
        """Read ``stream`` into ``chunks``; kill the process once the budget is spent."""
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                return
            if not budget.take(len(chunk)):
                cls._signal_kill(process)
                return
            chunks.append(chunk)

    @staticmethod
    def _signal_kill(process):
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass

    @classmethod
    async def _kill(cls, process):
        cls._signal_kill(process)
        await process.wait()


class OutputBudget:
    """Byte allowance shared by the stdout and stderr readers of one command."""

    def __init__(self, limit: int):
        self.limit = limit
        self.total = 0
        self.exceeded = False

    def take(self, size: int) -> bool:
        self.total += size
        if self.total > self.limit:
            self.exceeded = True
        return not self.exceeded
