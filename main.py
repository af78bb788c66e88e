import subprocess
import sys
import requests
import time
import os

HOST = os.getenv("BOARD_HOST", "127.0.0.1")
PORT = os.getenv("BOARD_PORT", "8000")

if not os.getenv("PEXELS_API"):
    print("Warning: PEXELS_API is not set, image search endpoints will answer 502")

server_process = subprocess.Popen([
    sys.executable, '-m', 'uvicorn', 'backend.server:app', '--host', HOST, '--port', PORT, '--reload'
])

status_code = 0
while status_code != 200:
    if server_process.poll() is not None:
        sys.exit(f"Server exited with code {server_process.returncode}")
    try:
        r = requests.get(f"http://{HOST}:{PORT}/api/health")
        status_code = r.status_code
    except requests.exceptions.RequestException:
        pass
    time.sleep(1)

print(f"Vision board API ready on http://{HOST}:{PORT} (docs at /docs)")

try:
    print("Press Ctrl+C to stop the server and exit...")
    while server_process.poll() is None:
        time.sleep(1)
except KeyboardInterrupt:
    print("\nCtrl+C detected. Exiting...")
finally:
    server_process.terminate()
    server_process.wait()
