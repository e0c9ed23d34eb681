"""Example: use the service layer directly (no Flask).

Resolves the faculty member for a class from raw components, then marks
the day's attendance through the same capture workflow the API uses.
"""

import importlib
import logging

from config import get_settings_module

from src.class_attendance.class_attendance.container import build_container
from src.class_attendance.class_attendance.faculty.model import ResolutionContext


def main():
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    context = ResolutionContext(cohort="2022", year="3", term="5", section="A", department="CSE")
    result = container.faculty_service.resolve_faculty_id(context)
    print(result.faculty_id, result.source.value)
    print(container.faculty_service.list_assignments(result.faculty_id))

    summary = container.capture_service.capture(context, "2024-09-02", ["22CS102"], "demo")
    print(summary.as_dict())


if __name__ == "__main__":
    main()
