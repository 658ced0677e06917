import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from src.app.services.provisioner import InfrastructureError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    argv: Sequence[str]
    returncode: int
    stdout: str
    stderr: str


class CommandError(InfrastructureError):
    def __init__(self, result: CommandResult):
        self.result = result
        output = (result.stderr or result.stdout).strip()
        super().__init__(f"{result.argv[0]} exited with {result.returncode}: {output}")


class CommandTimeoutError(InfrastructureError):
    pass


class CommandRunner:
    """Runs external programs from an argument vector, never through a shell"""

    def __init__(self, timeout: float = 120.0):
        self.timeout = timeout

    async def run(
        self,
        argv: Sequence[str],
        env: Optional[Dict[str, str]] = None,
        cwd: Optional[str] = None,
        check: bool = True,
    ) -> CommandResult:
        merged_env = {**os.environ, **env} if env else None
        logger.debug(f"Running {argv[0]} {' '.join(argv[1:3])}")
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=merged_env,
                cwd=cwd,
            )
        except FileNotFoundError as exc:
            raise InfrastructureError(f"{argv[0]} is not installed") from exc

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise CommandTimeoutError(f"{argv[0]} timed out after {self.timeout}s")

        result = CommandResult(
            argv=list(argv),
            returncode=process.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        if check and result.returncode != 0:
            raise CommandError(result)
        return result
