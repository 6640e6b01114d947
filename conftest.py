import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep a developer's .env from switching tests over to a live model.
os.environ["GEMINI_API_KEY"] = ""
os.environ.setdefault("LOG_LEVEL", "WARNING")
