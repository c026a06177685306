"""Launches and disposes the isolated browser sessions used by audits."""
from __future__ import annotations

import os
import shutil
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Protocol, Tuple

import structlog
from selenium import webdriver
from selenium.webdriver.chrome.service import Service as ChromeService

try:  # pragma: no cover - optional dependency
    from webdriver_manager.chrome import ChromeDriverManager  # type: ignore[import]
    from webdriver_manager.core.os_manager import ChromeType  # type: ignore[import]
except ImportError:  # pragma: no cover
    ChromeDriverManager = None
    ChromeType = None

from ..errors import SessionUnavailable

logger = structlog.get_logger(__name__)


class DriverFactory(Protocol):
    def __call__(self) -> Any:
        ...


@dataclass
class ChromeDriverFactory:
    """Starts a fresh headless Chrome process for every call."""

    chrome_binary: Optional[str] = None
    chromedriver_path: Optional[str] = None
    headless: bool = True
    window_size: Tuple[int, int] = (1920, 1080)

    def __call__(self) -> Any:
        options = webdriver.ChromeOptions()
        # Headless + sandbox-safe defaults for containers and CI environments.
        if self.headless:
            options.add_argument("--headless=new")
        options.add_argument("--incognito")
        options.add_argument("--disable-gpu")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument("--disable-extensions")
        options.add_argument(f"--window-size={self.window_size[0]},{self.window_size[1]}")

        binary = self._resolve_chrome_binary()
        if binary:
            options.binary_location = binary

        service = None
        driver_path = self._resolve_chromedriver_path()
        if driver_path:
            service = ChromeService(driver_path)

        try:
            if service is not None:
                return webdriver.Chrome(service=service, options=options)
            return webdriver.Chrome(options=options)
        except Exception as exc:
            raise SessionUnavailable(
                "Failed to start Chrome. Verify Google Chrome is installed or "
                "set CHROME_BINARY and CHROMEDRIVER_PATH."
            ) from exc

    def _resolve_chrome_binary(self) -> Optional[str]:
        explicit = self.chrome_binary or os.getenv("CHROME_BINARY")
        if explicit and Path(explicit).exists():
            return explicit

        candidates = [
            shutil.which("google-chrome"),
            shutil.which("google-chrome-stable"),
            shutil.which("chromium"),
            shutil.which("chromium-browser"),
            "/opt/google/chrome/chrome",
            "/usr/bin/google-chrome",
            r"C:\Program Files\Google\Chrome\Application\chrome.exe",
            r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
        ]
        for candidate in candidates:
            if candidate and Path(candidate).exists():
                return str(candidate)
        # Let Selenium Manager locate a browser on its own.
        return None

    def _resolve_chromedriver_path(self) -> Optional[str]:
        explicit = self.chromedriver_path or os.getenv("CHROMEDRIVER_PATH")
        if explicit and Path(explicit).exists():
            return explicit

        system_driver = shutil.which("chromedriver")
        if system_driver:
            return system_driver

        if ChromeDriverManager is not None:
            try:
                kwargs = {"chrome_type": ChromeType.GOOGLE} if ChromeType is not None else {}
                return ChromeDriverManager(**kwargs).install()
            except Exception as exc:
                logger.warning("chromedriver download failed", error=str(exc))
                return None
        return None


@dataclass(frozen=True)
class SessionHandle:
    """A live browser owned by exactly one audit."""

    session_id: str
    driver: Any = field(repr=False)
    started_at: float = field(default_factory=time.monotonic, compare=False)


class BrowserPool:
    """Shared allocator for browser sessions.

    Launches are serialized and the number of live browsers is capped at
    ``max_sessions``. No browser is ever handed to two audits.
    """

    def __init__(
        self,
        driver_factory: Optional[DriverFactory] = None,
        *,
        max_sessions: int = 4,
        acquire_timeout: float = 30.0,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.driver_factory = driver_factory or ChromeDriverFactory()
        self.max_sessions = max_sessions
        self.acquire_timeout = acquire_timeout
        self._slots = threading.BoundedSemaphore(max_sessions)
        self._launch_lock = threading.Lock()
        self._registry_lock = threading.Lock()
        self._active: Dict[str, SessionHandle] = {}

    @property
    def active_sessions(self) -> int:
        with self._registry_lock:
            return len(self._active)

    @property
    def capacity(self) -> int:
        return self.max_sessions

    def launch(self) -> SessionHandle:
        if not self._slots.acquire(timeout=self.acquire_timeout):
            raise SessionUnavailable(
                f"All {self.max_sessions} browser sessions are busy; try again shortly."
            )
        try:
            with self._launch_lock:
                driver = self.driver_factory()
        except SessionUnavailable:
            self._slots.release()
            raise
        except Exception as exc:
            self._slots.release()
            raise SessionUnavailable(f"Browser could not be launched: {exc}") from exc

        handle = SessionHandle(session_id=uuid.uuid4().hex, driver=driver)
        with self._registry_lock:
            self._active[handle.session_id] = handle
        logger.debug("browser session acquired", session_id=handle.session_id)
        return handle

    def dispose(self, handle: SessionHandle) -> bool:
        """Quit the browser behind ``handle``; returns False if it was already gone."""
        with self._registry_lock:
            known = self._active.pop(handle.session_id, None)
        if known is None:
            return False
        try:
            known.driver.quit()
        except Exception as exc:
            logger.warning("browser quit failed", session_id=handle.session_id, error=str(exc))
        finally:
            self._slots.release()
        logger.debug(
            "browser session released",
            session_id=handle.session_id,
            elapsed_ms=int((time.monotonic() - handle.started_at) * 1000),
        )
        return True

    def session_manager(self) -> "BrowserSessionManager":
        return BrowserSessionManager(self)

    def close(self) -> None:
        """Dispose every live session, e.g. on service shutdown."""
        with self._registry_lock:
            handles = list(self._active.values())
        for handle in handles:
            self.dispose(handle)


class BrowserSessionManager:
    """Request-scoped owner of a single browser session."""

    def __init__(self, pool: BrowserPool) -> None:
        self.pool = pool
        self._handle: Optional[SessionHandle] = None

    def acquire(self) -> SessionHandle:
        if self._handle is not None:
            raise RuntimeError("This session manager already owns a browser session")
        self._handle = self.pool.launch()
        return self._handle

    def release(self, handle: SessionHandle) -> None:
        if self._handle is None or handle.session_id != self._handle.session_id:
            return
        self._handle = None
        self.pool.dispose(handle)

    @contextmanager
    def session(self) -> Iterator[SessionHandle]:
        handle = self.acquire()
        try:
            yield handle
        finally:
            self.release(handle)
