import asyncio
import sys

import pytest

from libs.result import Return
from src.adapter.services.command_runner import CommandError, CommandRunner, CommandTimeoutError
from src.adapter.services.sweep_scheduler import (
    JobAlreadyRunningError,
    ScheduledJob,
    SweepScheduler,
)
from src.app.services.background_jobs import BackgroundJobRunner
from src.app.services.provisioner import InfrastructureError
from src.app.use_cases.sweeps import SweepReport


@pytest.mark.asyncio
async def test_run_job_returns_report():
    async def run():
        return Return.ok(SweepReport(job="expiration", processed=1, succeeded=1))

    scheduler = SweepScheduler([ScheduledJob("expiration", 60, run)])

    report = await scheduler.run_job("expiration")

    assert report.succeeded == 1
    assert not scheduler.is_running("expiration")


@pytest.mark.asyncio
async def test_unknown_job():
    with pytest.raises(KeyError):
        await SweepScheduler([]).run_job("nope")


@pytest.mark.asyncio
async def test_job_is_not_reentered():
    release = asyncio.Event()

    async def run():
        await release.wait()
        return Return.ok(SweepReport(job="expiration"))

    scheduler = SweepScheduler([ScheduledJob("expiration", 60, run)])
    first = asyncio.create_task(scheduler.run_job("expiration"))
    await asyncio.sleep(0)

    with pytest.raises(JobAlreadyRunningError):
        await scheduler.run_job("expiration")

    release.set()
    await first
    assert not scheduler.is_running("expiration")


@pytest.mark.asyncio
async def test_loop_runs_job_periodically_and_stops():
    runs = []

    async def run():
        runs.append(1)
        return Return.ok(SweepReport(job="warnings"))

    scheduler = SweepScheduler([ScheduledJob("warnings", 0.01, run)])
    scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop(timeout=1)

    assert scheduler.started is False
    assert len(runs) >= 2


@pytest.mark.asyncio
async def test_background_runner_survives_failing_job():
    runner = BackgroundJobRunner()

    async def boom():
        raise RuntimeError("boom")

    async def fine():
        return 42

    runner.spawn(boom(), name="boom")
    task = runner.spawn(fine(), name="fine")
    await runner.wait_idle()

    assert runner.pending == 0
    assert task.result() == 42


@pytest.mark.asyncio
async def test_command_runner_captures_output():
    result = await CommandRunner(timeout=10).run([sys.executable, "-c", "print('ok')"])

    assert result.returncode == 0
    assert result.stdout.strip() == "ok"


@pytest.mark.asyncio
async def test_command_runner_raises_on_nonzero_exit():
    with pytest.raises(CommandError) as exc_info:
        await CommandRunner(timeout=10).run(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"]
        )

    assert exc_info.value.result.returncode == 3
    assert "bad" in str(exc_info.value)


@pytest.mark.asyncio
async def test_command_runner_times_out():
    with pytest.raises(CommandTimeoutError):
        await CommandRunner(timeout=0.2).run([sys.executable, "-c", "import time; time.sleep(5)"])


@pytest.mark.asyncio
async def test_command_runner_missing_program():
    with pytest.raises(InfrastructureError):
        await CommandRunner().run(["definitely-not-a-real-binary-xyz"])
