import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from sitepulse.adapters.snapshot_source import JsonFileSnapshotSource
from sitepulse.components.dashboard import DashboardLoader
from sitepulse.rules.adapters import DashboardRulesAdapter
from sitepulse.rules.loader import load_rules
from sitepulse.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(
            os.environ.get("SITEPULSE_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        self.snapshot_dir = Path(
            os.environ.get("SITEPULSE_SNAPSHOT_DIR", str(self.base_dir / "data" / "snapshots"))
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Dashboard ---
# The loader holds the most recent snapshot, so it is shared across requests.
_loader_instance: DashboardLoader | None = None


def get_dashboard_loader(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> DashboardLoader:
    """Get dashboard loader singleton."""
    global _loader_instance
    if _loader_instance is None:
        _loader_instance = DashboardLoader(
            source=JsonFileSnapshotSource(settings.snapshot_dir),
            rules=DashboardRulesAdapter(rules),
        )
    return _loader_instance


def reset_dashboard_loader() -> None:
    """Reset dashboard loader (for testing)."""
    global _loader_instance
    _loader_instance = None
