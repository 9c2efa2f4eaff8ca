from typing import List, Optional, Tuple
import subprocess


def run_cmd(cmd: List[str], input: Optional[bytes] = None, timeout: Optional[float] = None) -> Tuple[int, bytes, str]:
    """Run a command. Returns (returncode, stdout bytes, stderr text).

    stdout is kept as raw bytes so binary payloads pass through unchanged.
    A missing executable is reported as return code 127, a timeout as 124.
    """
    try:
        completed = subprocess.run(
            cmd,
            input=input,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
        )
    except FileNotFoundError:
        return 127, b'', f'FileNotFound: {cmd[0]}'
    except subprocess.TimeoutExpired:
        return 124, b'', f'Timed out after {timeout}s: {cmd[0]}'
    return completed.returncode, completed.stdout, completed.stderr.decode('utf-8', errors='replace')
