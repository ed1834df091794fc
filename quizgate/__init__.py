from importlib import metadata
from pathlib import Path

here = Path(__file__).parent
try:
    with open(here.parent / "VERSION.txt", "r") as vf:
        __version__ = vf.read().strip()
except FileNotFoundError:
    # installed without the source tree
    __version__ = metadata.version("quizgate")
