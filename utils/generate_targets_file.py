#!/usr/bin/env python3
"""
Script to generate a large targets file for load testing.

Every generated target points to the mock server (utils/mock_server.py):
- the path is picked among the mock server endpoints, mostly /ok
- about 10% of targets carry a content check
- about 10% of targets carry their own timeout

The generated file is written to 'targets.generated.yaml'.
"""

import random
from pathlib import Path
from uuid import uuid4

import yaml

# Number of targets to generate
TARGETS_TO_GENERATE = 2000
BASE_URL = "http://localhost:8080"
PATHS = ["/ok"] * 7 + ["/error", "/flap", "/content-ok"]


def generate_target(index: int) -> dict:
    """Generate one random target definition.

    Args:
        index: Position of the target, used to build a unique name.

    Returns:
        dict: The target as it appears in the YAML file.
    """
    path = random.choice(PATHS)
    target = {
        "name": f"target-{index:05d}-{uuid4().hex[:8]}",
        "url": f"{BASE_URL}{path}",
        "method": "GET",
        "expected_status": 200,
    }
    if path == "/content-ok" or random.random() < 0.1:
        target["check_content"] = "SYSTEM OK" if path == "/content-ok" else "healthy"
    if random.random() < 0.1:
        target["timeout"] = f"{random.randint(1, 10)}s"
    return target


def generate_targets_document() -> dict:
    return {
        "targets": [generate_target(i) for i in range(TARGETS_TO_GENERATE)],
        "notifications": {"telegram": {"enabled": False}, "email": {"enabled": False}},
    }


def main() -> None:
    """Generate the targets file in the current directory."""
    output_file = Path("targets.generated.yaml")
    with open(output_file, "w") as f:
        yaml.safe_dump(generate_targets_document(), f, sort_keys=False)

    print(f"Targets file with {TARGETS_TO_GENERATE} targets has been generated and saved to {output_file}")


if __name__ == "__main__":
    main()
