"""Example: call the service layer directly (no Flask).

Prints one employee's dashboard summary and the organization's overview for today.
"""

import importlib
import json
import sys

from config import get_settings_module

from src.timekeeping_system.timekeeping_system.container import build_container


def main(employee_id: str, organization_id: str) -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        default_timezone=getattr(settings, "DEFAULT_TIMEZONE", None),
    )
    service = container.timekeeping_service

    print(json.dumps(service.dashboard_summary(employee_id).to_dict(), indent=2))
    print(json.dumps(service.day_overview(organization_id).to_dict(), indent=2))


if __name__ == "__main__":
    main(*(sys.argv[1:3] or ["emp-1", "org-1"]))
