from pathlib import Path

# Repo-root conventional directories/files (overrideable via engine.yaml / CLI flags)
CONFIG_DIR = Path("configs")
ENGINE_FILE = CONFIG_DIR / "engine.yaml"

OUTPUT_ROOT = Path("outputs")
