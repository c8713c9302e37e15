"""
Side files with the deployed instance's connection details.

After an apply, ``public_ip.txt`` and ``instance_id.txt`` are written next to
the caller so shell scripts can pick them up without talking to the engine.
"""

import os
from typing import Any, Dict, List, Optional

CONNECTION_FILES = {
    "public_ip": "public_ip.txt",
    "instance_id": "instance_id.txt",
}

def write_connection_files(directory: str, outputs: Dict[str, Any]) -> List[str]:
    """
    Write one file per known output.

    Args:
        directory: Directory to write into (created if missing)
        outputs: Stack outputs, plain values keyed by output name

    Returns:
        List[str]: Paths of the files written
    """
    os.makedirs(directory, exist_ok=True)
    written = []
    for output_name, filename in CONNECTION_FILES.items():
        value = outputs.get(output_name)
        if value is None:
            continue
        path = os.path.join(directory, filename)
        with open(path, "w") as f:
            f.write(f"{value}\n")
        written.append(path)
    return written

def read_connection_files(directory: str) -> Dict[str, Optional[str]]:
    values = {}
    for output_name, filename in CONNECTION_FILES.items():
        path = os.path.join(directory, filename)
        if os.path.exists(path):
            with open(path, "r") as f:
                values[output_name] = f.read().strip()
        else:
            values[output_name] = None
    return values

def remove_connection_files(directory: str) -> List[str]:
    removed = []
    for filename in CONNECTION_FILES.values():
        path = os.path.join(directory, filename)
        if os.path.exists(path):
            os.unlink(path)
            removed.append(path)
    return removed
