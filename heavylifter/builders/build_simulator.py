"""
Build Simulator

Plays out a fixed build progression for each platform of a generated app:

    pending -> building (20, 40, 60, 80, 100%) -> completed

No compiler runs. Each completed platform gets a download URL whose payload
is the platform's generated files concatenated into one text file. The
delay between steps goes through an awaitable ``sleep`` so tests can run
the whole sequence on a virtual clock.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional

from ..schemas.generated_app import GeneratedApp

logger = logging.getLogger(__name__)

PROGRESS_STEPS = (20, 40, 60, 80, 100)

SleepFn = Callable[[float], Awaitable[None]]
DownloadUrlFn = Callable[[str, str], str]


class TaskStatus(str, Enum):
    """Status of one platform build, and of the run as a whole."""
    PENDING = "pending"
    BUILDING = "building"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class BuildStatus:
    """Progress of a single platform."""
    platform: str
    status: TaskStatus = TaskStatus.PENDING
    progress: int = 0  # 0-100, never decreases
    download_url: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    logs: list[str] = field(default_factory=list)

    def advance(self, progress: int):
        self.progress = max(self.progress, min(progress, 100))

    def to_dict(self) -> dict:
        return {
            "platform": self.platform,
            "status": self.status.value,
            "progress": self.progress,
            "downloadUrl": self.download_url,
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
            "logs": self.logs[-10:],
        }


@dataclass
class BuildState:
    """Overall state of one simulated build run."""
    build_id: str
    app_name: str
    status: TaskStatus = TaskStatus.PENDING
    platforms: list[BuildStatus] = field(default_factory=list)
    started_at: Optional[str] = None
    completed_at: Optional[str] = None

    def get(self, platform: str) -> Optional[BuildStatus]:
        for status in self.platforms:
            if status.platform == platform:
                return status
        return None

    def get_overall_progress(self) -> int:
        if not self.platforms:
            return 0
        return int(sum(p.progress for p in self.platforms) / len(self.platforms))

    def is_active(self) -> bool:
        return self.status in (TaskStatus.PENDING, TaskStatus.BUILDING)

    def to_dict(self) -> dict:
        return {
            "buildId": self.build_id,
            "appName": self.app_name,
            "status": self.status.value,
            "overallProgress": self.get_overall_progress(),
            "platforms": [p.to_dict() for p in self.platforms],
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
        }


def build_payload(app: GeneratedApp, platform: str) -> str:
    """The inert 'artifact' for a platform: its files, one after another."""
    parts = [f"// {f.path}\n{f.content}" for f in app.files_for(platform)]
    return "\n\n".join(parts)


def _default_download_url(build_id: str, platform: str) -> str:
    return f"/api/build/download?build_id={build_id}&platform={platform}"


class BuildSimulator:
    """
    Simulated build of a GeneratedApp.

    Usage:
        simulator = BuildSimulator(app, step_delay=1.0)
        simulator.on_progress = my_callback  # Optional progress callback
        await simulator.build()
    """

    def __init__(
        self,
        app: GeneratedApp,
        step_delay: float = 1.0,
        sleep: Optional[SleepFn] = None,
        download_url: Optional[DownloadUrlFn] = None,
    ):
        self.app = app
        self.step_delay = step_delay
        self._sleep = sleep or asyncio.sleep
        self._download_url = download_url or _default_download_url

        self.state = BuildState(
            build_id=f"build-{uuid.uuid4().hex[:8]}",
            app_name=app.name,
            platforms=[BuildStatus(platform=p) for p in app.platforms],
        )

        # Callback for progress updates
        self.on_progress: Optional[Callable[[BuildState], None]] = None

        # Stop event for cancellation between steps
        self._stop_event = threading.Event()

        # Guards status transitions shared by the build loop and stop()/fail()
        self._lock = threading.Lock()

    def _log(self, status: BuildStatus, message: str):
        timestamp = datetime.now().strftime("%H:%M:%S")
        status.logs.append(f"[{timestamp}] {message}")
        logger.debug("[%s %s] %s", self.state.build_id, status.platform, message)
        self._notify_progress()

    def _notify_progress(self):
        if self.on_progress:
            self.on_progress(self.state)

    async def _build_platform(self, status: BuildStatus) -> bool:
        with self._lock:
            if self._stop_event.is_set():
                return False
            status.status = TaskStatus.BUILDING
            status.started_at = datetime.now().isoformat()
        self._log(status, f"Building {self.app.name} for {status.platform}")

        for progress in PROGRESS_STEPS:
            await self._sleep(self.step_delay)
            with self._lock:
                if self._stop_event.is_set():
                    return False
                status.advance(progress)
            self._log(status, f"{progress}% complete")

        with self._lock:
            if self._stop_event.is_set():
                return False
            status.status = TaskStatus.COMPLETED
            status.completed_at = datetime.now().isoformat()
            status.download_url = self._download_url(self.state.build_id, status.platform)
        self._log(status, "Build complete")
        return True

    async def build(self) -> BuildState:
        """Run every platform in order. Returns the final state."""
        with self._lock:
            if not self._stop_event.is_set():
                self.state.status = TaskStatus.BUILDING
                self.state.started_at = datetime.now().isoformat()
        logger.info(
            "Build %s started for %s (%s)",
            self.state.build_id, self.app.name, ", ".join(self.app.platforms),
        )
        self._notify_progress()

        for status in self.state.platforms:
            if not await self._build_platform(status):
                break

        with self._lock:
            if self._stop_event.is_set():
                self._fail_unfinished("Build stopped")
            else:
                self.state.status = TaskStatus.COMPLETED
                self.state.completed_at = datetime.now().isoformat()
                logger.info("Build %s completed", self.state.build_id)

        self._notify_progress()
        return self.state

    def _fail_unfinished(self, reason: str):
        """Fail every platform still pending or building. Caller holds ``_lock``."""
        now = datetime.now().isoformat()
        for status in self.state.platforms:
            if status.status in (TaskStatus.PENDING, TaskStatus.BUILDING):
                status.status = TaskStatus.FAILED
                status.completed_at = now
                status.logs.append(reason)
        self.state.status = TaskStatus.FAILED
        self.state.completed_at = self.state.completed_at or now

    def fail(self, reason: str):
        """Mark the run failed after an unexpected error."""
        logger.error("Build %s failed: %s", self.state.build_id, reason)
        with self._lock:
            self._stop_event.set()
            self._fail_unfinished(reason)

    def stop(self):
        """Cancel the run; unfinished platforms end up failed and stay failed."""
        with self._lock:
            self._stop_event.set()
            if self.state.is_active():
                self._fail_unfinished("Build stopped")
        logger.info("Build %s stopped", self.state.build_id)

    def payload(self, platform: str) -> str:
        return build_payload(self.app, platform)


async def run_build(app: GeneratedApp, step_delay: float = 1.0) -> BuildState:
    """Run a complete simulated build."""
    simulator = BuildSimulator(app, step_delay=step_delay)
    return await simulator.build()
