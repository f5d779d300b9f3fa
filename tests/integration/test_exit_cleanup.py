"""
Context file cleanup when the host process exits abnormally.

These run a real interpreter so that atexit and signal handling behave as
they do for a host.
"""

import os
import signal
import subprocess
import sys
import textwrap
import time
from pathlib import Path

import pytest

from slshooks.config import CONTEXT_ENV_VAR

REPO_ROOT = Path(__file__).resolve().parents[2]

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals and shell")


def _child_env() -> dict[str, str]:
    env = os.environ.copy()
    env.pop(CONTEXT_ENV_VAR, None)
    env.pop("SLS_DEBUG", None)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    return env


def _wait_for_text(path: Path, timeout: float = 15.0) -> str:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if path.exists():
            text = path.read_text()
            if text:
                return text
        time.sleep(0.05)
    raise AssertionError(f"{path} was not written within {timeout}s")


class TestUncaughtException:
    def test_context_removed_when_host_crashes(self, service_dir):
        script = textwrap.dedent(
            """
            import asyncio
            import os
            import sys
            from pathlib import Path

            from slshooks import HostState, ServerlessHooks

            async def main():
                plugin = ServerlessHooks(HostState(service_path=Path(sys.argv[1])))
                await plugin.hooks["initialize"]()
                print(os.environ["SLS_CONTEXT"], flush=True)
                raise RuntimeError("host crashed")

            asyncio.run(main())
            """
        )
        result = subprocess.run(
            [sys.executable, "-c", script, str(service_dir)],
            env=_child_env(),
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert result.returncode != 0
        assert "host crashed" in result.stderr
        context_path = result.stdout.strip()
        assert context_path.endswith(".json")
        assert not os.path.exists(context_path)


class TestTermination:
    def test_context_removed_on_sigterm(self, service_dir, write_scripts):
        marker = service_dir / "context-path.txt"
        write_scripts({"hook:deploy": f'printf "%s" "$SLS_CONTEXT" > "{marker}"; sleep 5'})

        proc = subprocess.Popen(
            [sys.executable, "-m", "slshooks.cli", "-s", str(service_dir), "run", "deploy"],
            env=_child_env(),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        try:
            context_path = _wait_for_text(marker)
            assert os.path.exists(context_path)

            proc.send_signal(signal.SIGTERM)
            returncode = proc.wait(timeout=30)
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()

        assert returncode == 128 + signal.SIGTERM
        assert not os.path.exists(context_path)
