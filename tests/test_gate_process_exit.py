import os
import socketserver
import subprocess
import sys
import threading
import time
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]

CONSUMER_SCRIPT = """
from trialguard.gate import MemoryLastCheckStore, RevocationGate
from trial_cli.core.api import api_check_revocation

gate = RevocationGate(api_check_revocation, MemoryLastCheckStore(), timeout=1.0)
print("DECISION", gate.check("alice").state.value, flush=True)
"""


class TrickleHandler(socketserver.BaseRequestHandler):
    """Answers with a status line that never ends, one byte at a time."""

    def handle(self):
        self.request.recv(4096)
        stream = b"HTTP/1.1 200 OK\r\nX-Padding: "
        try:
            self.request.sendall(stream)
            while not self.server.stopping.is_set():
                self.request.sendall(b"a")
                time.sleep(0.3)
        except OSError:
            # client went away
            return


class TestHungAuthorityDoesNotStallProcess(unittest.TestCase):

    def setUp(self):
        socketserver.ThreadingTCPServer.allow_reuse_address = True
        self.server = socketserver.ThreadingTCPServer(("127.0.0.1", 0), TrickleHandler)
        self.server.daemon_threads = True
        self.server.stopping = threading.Event()
        threading.Thread(target=self.server.serve_forever, daemon=True).start()

    def tearDown(self):
        self.server.stopping.set()
        self.server.shutdown()
        self.server.server_close()

    def test_consumer_exits_after_deadline(self):
        host, port = self.server.server_address
        env = os.environ.copy()
        env["TRIALGUARD_URL"] = f"http://{host}:{port}"
        env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))

        started = time.monotonic()
        process = subprocess.Popen(
            [sys.executable, "-c", CONSUMER_SCRIPT],
            cwd=str(REPO_ROOT),
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
        try:
            stdout, stderr = process.communicate(timeout=20)
        except subprocess.TimeoutExpired:
            process.kill()
            process.communicate()
            self.fail("consumer process kept running after the check deadline")

        self.assertEqual(process.returncode, 0, stderr)
        self.assertIn("DECISION unreachable", stdout)
        self.assertLess(time.monotonic() - started, 20)


if __name__ == "__main__":
    unittest.main()
