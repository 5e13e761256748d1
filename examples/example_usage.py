"""Example: drive the kiosk services without Flask.

Registers one identity from an image file and scans a second image against it.

    python examples/example_usage.py reference.jpg frame.jpg
"""

import base64
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.faceguard.faceguard.capture.frame_source import Base64FrameSource
from src.faceguard.faceguard.container import build_container
from src.faceguard.faceguard.registry.model import RegistrationCandidate


def _b64(path: str) -> str:
    return base64.b64encode(Path(path).read_bytes()).decode("ascii")


def main():
    reference, frame = sys.argv[1], sys.argv[2]
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)

    identity = container.registry.register(
        RegistrationCandidate(name="Demo User", department="Engineering", reference_image=_b64(reference))
    )
    print("registered", identity.id)

    resolution = container.session.scan(Base64FrameSource(_b64(frame)))
    print(resolution.to_dict())


if __name__ == "__main__":
    main()
